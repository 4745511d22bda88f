"""
db/models/catalog_record.py

Catalog record as stored in the record store. Only the columns the sitemap
pipeline projects are mapped here; the table is owned by the catalog.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class CatalogRecordRow(Base):
    __tablename__ = "catalog_records"

    about: Mapped[str] = mapped_column(
        String(512),
        primary_key=True,
        comment="Record identifier, e.g. /2021672/resource_document_mauritshuis_670",
    )
    europeana_completeness: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Quality score 0-10",
    )
    timestamp_updated: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Absent for legacy records",
    )

    __table_args__ = (
        Index("ix_catalog_records_europeana_completeness", "europeana_completeness"),
    )
