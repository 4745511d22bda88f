"""
Model package exports.

Import all SQLAlchemy models here so metadata registration works without
extra imports.
"""

from db.models.catalog_record import CatalogRecordRow

__all__ = [
    "CatalogRecordRow",
]
