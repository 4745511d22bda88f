"""
sitemap/services/generation_service.py

Streams records into sitemap files for one slot and publishes the index.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from sitemap.config import SitemapSettings
from sitemap.domain.records import RecordFilter
from sitemap.naming import SITEMAP_INDEX_FILE
from sitemap.repositories.record_source import RecordSource
from sitemap.services.sitemap_builder import SitemapIndexBuilder, SitemapWriter, iter_chunks
from sitemap.storage.gateway import StorageGateway, UploadResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationSummary:
    """
    Outcome of one generation pass.
    """

    records_processed: int
    files_written: int
    unconfirmed_keys: tuple[str, ...] = ()


class SitemapGenerationService:
    """
    Writes chunk files to a slot, then the index once every chunk is stored.
    """

    def __init__(
        self,
        *,
        settings: SitemapSettings,
        record_source: RecordSource,
        gateway: StorageGateway,
        abort_on_unconfirmed_upload: bool = True,
        index_key: str = SITEMAP_INDEX_FILE,
    ) -> None:
        self._settings = settings
        self._record_source = record_source
        self._gateway = gateway
        self._abort_on_unconfirmed_upload = abort_on_unconfirmed_upload
        self._index_key = index_key

    def generate(self, slot_base_name: str) -> GenerationSummary:
        """
        Regenerate every sitemap file under ``slot_base_name``.

        Raises StorageUnconfirmedError on the first unverified upload when
        aborting is enabled; the index is then never written.
        """

        writer = SitemapWriter(
            base_url=self._settings.base_url,
            record_url_path=self._settings.record_url_path,
            file_base_name=slot_base_name,
            entries_per_file=self._settings.entries_per_file,
        )
        index_builder = SitemapIndexBuilder(base_url=self._settings.base_url)
        records = self._record_source.stream(
            RecordFilter(min_completeness=self._settings.min_record_completeness)
        )
        unconfirmed: list[str] = []

        logger.info("Retrieving records...")
        file_start = time.monotonic()
        for chunk in iter_chunks(records, writer):
            index_builder.add(chunk)
            self._store(chunk.file_name, chunk.content, unconfirmed)
            now = time.monotonic()
            logger.info(
                "Created sitemap file %s in %d ms",
                chunk.file_name,
                int((now - file_start) * 1000),
            )
            file_start = now

        index = index_builder.build()
        self._store(self._index_key, index.content, unconfirmed)
        logger.info(
            "Records processed %d, written %d sitemap files and 1 sitemap index file",
            writer.records_written,
            writer.chunks_emitted,
        )
        return GenerationSummary(
            records_processed=writer.records_written,
            files_written=writer.chunks_emitted,
            unconfirmed_keys=tuple(unconfirmed),
        )

    def _store(self, key: str, content: bytes, unconfirmed: list[str]) -> UploadResult:
        result = self._gateway.upload(key, content)
        if result.confirmed:
            return result
        if self._abort_on_unconfirmed_upload:
            result.raise_for_status()
        logger.warning("Continuing without confirmation for %s", key)
        unconfirmed.append(key)
        return result

