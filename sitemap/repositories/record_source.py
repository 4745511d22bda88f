"""
sitemap/repositories/record_source.py

Streaming read access to catalog records for sitemap generation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.catalog_record import CatalogRecordRow
from sitemap.config import DEFAULT_ENTRIES_PER_FILE
from sitemap.domain.records import CatalogRecord, RecordFilter

logger = logging.getLogger(__name__)


class RecordSource:
    """
    Streams catalog records with server-side filtering and field projection.

    Rows are fetched in batches of ``batch_size`` through a server-side cursor
    so the full result set is never held in memory. The returned iterator is
    single-pass; the underlying session is closed once it is exhausted or
    abandoned.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        *,
        batch_size: int = DEFAULT_ENTRIES_PER_FILE,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory
        self._batch_size = max(1, batch_size)

    def stream(self, record_filter: RecordFilter | None = None) -> Iterator[CatalogRecord]:
        """
        Yield records one at a time in store order.

        Store errors propagate to the caller; no partial results are hidden.
        """

        record_filter = record_filter or RecordFilter()
        stmt = select(
            CatalogRecordRow.about,
            CatalogRecordRow.europeana_completeness,
            CatalogRecordRow.timestamp_updated,
        )
        if record_filter.min_completeness is not None:
            logger.info(
                "Filtering records on completeness score of at least %d",
                record_filter.min_completeness,
            )
            stmt = stmt.where(
                CatalogRecordRow.europeana_completeness >= record_filter.min_completeness
            )

        session = self._session_factory()
        try:
            logger.info("Starting record query...")
            result = session.execute(
                stmt.execution_options(stream_results=True, yield_per=self._batch_size)
            )
            for about, completeness, timestamp_updated in result:
                yield CatalogRecord(
                    identifier=str(about),
                    completeness=int(completeness),
                    last_updated=timestamp_updated,
                )
        finally:
            session.close()
