"""
sitemap/domain/records.py

Domain models shared by the generation pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CatalogRecord:
    """
    Immutable snapshot of one catalog record as read from the store.
    """

    identifier: str
    completeness: int
    last_updated: datetime | None = None


@dataclass(frozen=True)
class RecordFilter:
    """
    Server-side filter for the record stream. ``None`` disables filtering.
    """

    min_completeness: int | None = None


@dataclass(frozen=True)
class SitemapChunk:
    """
    One finished sitemap file covering records [start_offset, end_offset).
    """

    start_offset: int
    end_offset: int
    file_name: str
    content: bytes

    @property
    def entry_count(self) -> int:
        return self.end_offset - self.start_offset


@dataclass(frozen=True)
class SitemapIndex:
    """
    Index document of one generation run.
    """

    entries: tuple[str, ...]
    content: bytes
