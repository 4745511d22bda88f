"""
Storage layer exports.
"""

from sitemap.storage.base import ObjectStorageClient, StoredObject
from sitemap.storage.gateway import StorageGateway, UploadResult
from sitemap.storage.local import LocalObjectStorage, ObjectStorageError

__all__ = [
    "LocalObjectStorage",
    "ObjectStorageClient",
    "ObjectStorageError",
    "StorageGateway",
    "StoredObject",
    "UploadResult",
]
