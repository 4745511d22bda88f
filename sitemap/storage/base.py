"""
Object storage client abstraction used by the sitemap publisher.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    """
    Descriptor of one object returned by a listing.
    """

    name: str
    size_bytes: int | None = None
    last_modified: datetime | None = None


class ObjectStorageClient(Protocol):
    """
    Durable key/value object store. Every call may fail with a transport error.
    """

    def put(self, key: str, payload: bytes) -> str | None:
        """Store ``payload`` under ``key`` and return a version tag (ETag)."""
        ...

    def is_available(self, key: str) -> bool:
        ...

    def get(self, key: str) -> bytes | None:
        ...

    def list(self) -> list[StoredObject]:
        ...

    def delete(self, key: str) -> None:
        ...
