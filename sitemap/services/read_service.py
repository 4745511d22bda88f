"""
sitemap/services/read_service.py

Read access to the published sitemap index and active-slot files.
"""

from __future__ import annotations

from sitemap.naming import SITEMAP_INDEX_FILE, chunk_file_name
from sitemap.services.active_set import ActiveSetManager
from sitemap.storage.gateway import StorageGateway


class ReadSitemapService:
    def __init__(
        self,
        gateway: StorageGateway,
        active_set: ActiveSetManager,
        *,
        index_key: str = SITEMAP_INDEX_FILE,
    ) -> None:
        self._gateway = gateway
        self._active_set = active_set
        self._index_key = index_key

    @property
    def index_key(self) -> str:
        return self._index_key

    def index_content(self) -> str | None:
        """Return the published index document, or None before the first run."""
        raw = self._gateway.read(self._index_key)
        return raw.decode("utf-8") if raw is not None else None

    def file_content(self, start: int, end: int) -> str | None:
        """Return the active slot's sitemap file for records [start, end)."""
        key = chunk_file_name(self._active_set.active_slot_name(), start, end)
        raw = self._gateway.read(key)
        return raw.decode("utf-8") if raw is not None else None
