"""
sitemap/services/update_coordinator.py

Top-level sitemap update run.

Run sequence once admitted
--------------------------
  1. Purge every object of the inactive slot (leftovers of earlier runs).
  2. Keep the currently published index as a baseline.
  3. Generate all files into the inactive slot, then the index.
  4. Flip the active slot.
  5. Compare the new index with the baseline (case-insensitive).
  6. Notify search engines only when it changed.

Any failure in 1-6 is raised as a single ``GenerationError``; the update
lock is released on every exit path. A run that fails before step 4 leaves
the previously active slot serving; when step 4 itself fails, the index
captured in step 2 is put back so it matches that slot again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from functools import lru_cache

from sitemap.errors import GenerationError
from sitemap.logging_utils import log_event
from sitemap.services.active_set import ActiveSetManager
from sitemap.services.generation_service import GenerationSummary, SitemapGenerationService
from sitemap.services.notifier import NotificationTrigger
from sitemap.services.read_service import ReadSitemapService
from sitemap.services.update_lock import UpdateLock, UpdateState
from sitemap.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateRunResult:
    """
    Summary of one successful update run.
    """

    records_processed: int
    files_written: int
    files_purged: int
    active_slot: str
    index_changed: bool
    notified: bool
    duration_seconds: float
    unconfirmed_keys: tuple[str, ...] = ()


def index_changed(previous: str | None, current: str | None) -> bool:
    if previous is None or current is None:
        return previous != current
    return previous.lower() != current.lower()


class UpdateCoordinator:
    """
    Single-flight orchestrator for regenerating and publishing the sitemap.
    """

    def __init__(
        self,
        *,
        generation_service: SitemapGenerationService,
        gateway: StorageGateway,
        active_set: ActiveSetManager,
        reader: ReadSitemapService,
        notifier: NotificationTrigger,
        lock: UpdateLock | None = None,
    ) -> None:
        self._generation_service = generation_service
        self._gateway = gateway
        self._active_set = active_set
        self._reader = reader
        self._notifier = notifier
        self._lock = lock or UpdateLock()

    @property
    def reader(self) -> ReadSitemapService:
        return self._reader

    def status(self) -> UpdateState:
        return self._lock.state

    def admit(self) -> UpdateState:
        """
        Reserve the next run without starting it; pass the returned state to
        ``update()``. Raises ConcurrentUpdateError when a run is in progress.
        """

        return self._lock.start()

    def update(self, admitted: UpdateState | None = None) -> UpdateRunResult:
        """
        Run one full update.

        Args:
            admitted: State returned by ``admit()`` when the run was reserved
                ahead of time; None admits it here.

        Raises:
            ConcurrentUpdateError: another run is in progress (not wrapped).
            SitemapStateError: ``admitted`` is no longer the running update.
            GenerationError: the run failed; the cause is chained.
        """

        with self._lock.hold(admitted) as state:
            log_event(logger, logging.INFO, "sitemap_update_started", started_at=state.started_at)
            started = time.monotonic()
            try:
                result = self._run(started)
            except Exception as exc:
                logger.error("Error updating sitemap: %s", exc, exc_info=True)
                log_event(
                    logger,
                    logging.ERROR,
                    "sitemap_update_failed",
                    error=type(exc).__name__,
                    duration_seconds=round(time.monotonic() - started, 3),
                )
                raise GenerationError("Error updating sitemap") from exc

        log_event(
            logger,
            logging.INFO,
            "sitemap_update_finished",
            records=result.records_processed,
            files=result.files_written,
            active_slot=result.active_slot,
            index_changed=result.index_changed,
            duration_seconds=result.duration_seconds,
        )
        return result

    def _run(self, started: float) -> UpdateRunResult:
        inactive = self._active_set.inactive_slot_name()
        purged = self._gateway.purge_prefix(inactive)

        old_index = self._reader.index_content()

        generation_start = time.monotonic()
        summary: GenerationSummary = self._generation_service.generate(inactive)
        logger.info(
            "Sitemap generation completed in %d seconds",
            int(time.monotonic() - generation_start),
        )

        try:
            active = self._active_set.switch_active()
        except Exception:
            self._restore_index(old_index)
            raise
        logger.info("Switched active sitemap to %s", active)

        new_index = self._reader.index_content()
        changed = index_changed(old_index, new_index)
        if changed:
            logger.info("Index has changed")
            self._notifier.notify()
        else:
            logger.info("Index has not changed")

        return UpdateRunResult(
            records_processed=summary.records_processed,
            files_written=summary.files_written,
            files_purged=purged,
            active_slot=active,
            index_changed=changed,
            notified=changed,
            duration_seconds=round(time.monotonic() - started, 3),
            unconfirmed_keys=summary.unconfirmed_keys,
        )

    def _restore_index(self, previous: str | None) -> None:
        """
        Put back the index that matches the still-active slot after a failed
        switch. Restore failures are logged; the switch error is what the
        caller sees.
        """

        key = self._reader.index_key
        try:
            if previous is None:
                self._gateway.delete(key)
            else:
                result = self._gateway.upload(key, previous.encode("utf-8"))
                if not result.confirmed:
                    logger.error("Could not confirm restored sitemap index %s", key)
                    return
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to restore sitemap index %s: %s", key, exc)
            return
        logger.warning("Restored previous sitemap index after failed switch")


@lru_cache(maxsize=1)
def get_update_coordinator() -> UpdateCoordinator:
    """
    Build the process-wide coordinator from environment settings.
    """

    from sitemap.config import (
        get_notification_settings,
        get_sitemap_settings,
        get_storage_settings,
    )
    from sitemap.naming import SITEMAP_INDEX_FILE
    from sitemap.repositories.record_source import RecordSource
    from sitemap.services.notifier import SearchEngineNotifier
    from sitemap.storage.local import LocalObjectStorage

    sitemap_settings = get_sitemap_settings()
    storage_settings = get_storage_settings()

    gateway = StorageGateway(
        LocalObjectStorage(storage_settings.root_dir),
        max_attempts=storage_settings.upload_max_attempts,
        backoff_seconds=storage_settings.upload_backoff_seconds,
    )
    active_set = ActiveSetManager(gateway)
    generation_service = SitemapGenerationService(
        settings=sitemap_settings,
        record_source=RecordSource(batch_size=sitemap_settings.query_batch_size),
        gateway=gateway,
        abort_on_unconfirmed_upload=storage_settings.abort_on_unconfirmed_upload,
    )
    notifier = SearchEngineNotifier(
        index_url=f"{sitemap_settings.base_url}/{SITEMAP_INDEX_FILE}",
        settings=get_notification_settings(),
    )
    return UpdateCoordinator(
        generation_service=generation_service,
        gateway=gateway,
        active_set=active_set,
        reader=ReadSitemapService(gateway, active_set),
        notifier=notifier,
    )
