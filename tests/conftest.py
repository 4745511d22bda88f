"""
Shared fixtures for the sitemap test suite.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from sitemap.config import SitemapSettings
from sitemap.services.active_set import ActiveSetManager
from sitemap.services.generation_service import SitemapGenerationService
from sitemap.services.read_service import ReadSitemapService
from sitemap.services.update_coordinator import UpdateCoordinator
from sitemap.services.update_lock import UpdateLock
from sitemap.storage.gateway import StorageGateway
from tests.fakes import (
    BASE_URL,
    RECORD_PATH,
    InMemoryObjectStorage,
    ListRecordSource,
    RecordingNotifier,
    SleepRecorder,
)


@pytest.fixture()
def storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture()
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def gateway(storage: InMemoryObjectStorage, sleeper: SleepRecorder) -> StorageGateway:
    return StorageGateway(storage, max_attempts=3, backoff_seconds=5.0, sleep=sleeper)


@pytest.fixture()
def settings() -> SitemapSettings:
    return SitemapSettings(base_url=BASE_URL, record_url_path=RECORD_PATH, entries_per_file=3)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def coordinator_factory(
    settings: SitemapSettings,
    gateway: StorageGateway,
    notifier: RecordingNotifier,
) -> Callable[..., UpdateCoordinator]:
    """Build a coordinator wired to in-memory collaborators."""

    def _build(
        source: ListRecordSource,
        *,
        gateway_override: StorageGateway | None = None,
        abort_on_unconfirmed_upload: bool = True,
        lock: UpdateLock | None = None,
    ) -> UpdateCoordinator:
        gw = gateway_override or gateway
        active_set = ActiveSetManager(gw)
        generation_service = SitemapGenerationService(
            settings=settings,
            record_source=source,  # type: ignore[arg-type]
            gateway=gw,
            abort_on_unconfirmed_upload=abort_on_unconfirmed_upload,
        )
        return UpdateCoordinator(
            generation_service=generation_service,
            gateway=gw,
            active_set=active_set,
            reader=ReadSitemapService(gw, active_set),
            notifier=notifier,
            lock=lock,
        )

    return _build
