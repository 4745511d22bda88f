"""
tests/test_scheduler_jobs.py

Pytest tests for the periodic update job registration and wrapper.
"""

from __future__ import annotations

from sitemap.config import SchedulerSettings
from sitemap.scheduler.jobs import build_scheduler, run_sitemap_update
from sitemap.services.update_lock import UpdateLock
from tests.fakes import ListRecordSource, make_records


class BrokenSource(ListRecordSource):
    def stream(self, record_filter=None):
        raise RuntimeError("record store down")
        yield  # pragma: no cover


def test_build_scheduler_registers_daily_job() -> None:
    scheduler = build_scheduler(SchedulerSettings(enabled=True, hour=3, minute=15))

    job = scheduler.get_job("sitemap_update")

    assert job is not None
    assert job.name == "Daily sitemap regeneration"
    assert job.max_instances == 1
    assert job.coalesce is True
    trigger = str(job.trigger)
    assert "hour='3'" in trigger
    assert "minute='15'" in trigger
    assert scheduler.running is False


def test_run_returns_result_on_success(coordinator_factory) -> None:
    result = run_sitemap_update(coordinator_factory(ListRecordSource(make_records(4))))
    assert result is not None
    assert result.records_processed == 4


def test_run_swallows_generation_failure(coordinator_factory) -> None:
    coordinator = coordinator_factory(BrokenSource())
    assert run_sitemap_update(coordinator) is None
    assert coordinator.status().in_progress is False


def test_run_skips_when_update_in_progress(coordinator_factory, notifier) -> None:
    lock = UpdateLock()
    lock.start()
    coordinator = coordinator_factory(ListRecordSource(make_records(4)), lock=lock)

    assert run_sitemap_update(coordinator) is None
    assert coordinator.status().in_progress is True
    assert notifier.calls == 0


def test_run_skips_stale_admission(coordinator_factory, notifier) -> None:
    coordinator = coordinator_factory(ListRecordSource(make_records(4)))
    admitted = coordinator.admit()
    coordinator.update(admitted)

    assert run_sitemap_update(coordinator, admitted) is None
    assert coordinator.status().in_progress is False
    assert notifier.calls == 1
