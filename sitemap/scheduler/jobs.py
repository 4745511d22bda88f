"""
sitemap/scheduler/jobs.py

APScheduler-based scheduler for periodic sitemap regeneration.

Schedule (UTC)
--------------
  sitemap_update : SITEMAP_UPDATE_CRON_HOUR:SITEMAP_UPDATE_CRON_MINUTE daily
                   (01:00 by default)

Lifecycle
---------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from sitemap.config import SchedulerSettings, get_scheduler_settings
from sitemap.errors import ConcurrentUpdateError, GenerationError, SitemapStateError
from sitemap.services.update_coordinator import (
    UpdateCoordinator,
    UpdateRunResult,
    get_update_coordinator,
)
from sitemap.services.update_lock import UpdateState

logger = logging.getLogger(__name__)


def run_sitemap_update(
    coordinator: UpdateCoordinator | None = None,
    admitted: UpdateState | None = None,
) -> UpdateRunResult | None:
    """
    Run one sitemap update; failures are logged, never raised into the
    scheduler thread. ``admitted`` carries a run already reserved through
    ``UpdateCoordinator.admit()``.
    """

    coordinator = coordinator or get_update_coordinator()
    logger.info("Scheduler: sitemap_update starting")
    try:
        result = coordinator.update(admitted)
    except (ConcurrentUpdateError, SitemapStateError) as exc:
        logger.warning("Scheduler: sitemap_update skipped: %s", exc)
        return None
    except GenerationError as exc:
        logger.warning("Scheduler: sitemap_update failed: %s (cause: %r)", exc, exc.__cause__)
        return None

    logger.info(
        "Scheduler: sitemap_update complete records=%d files=%d active=%s index_changed=%s",
        result.records_processed,
        result.files_written,
        result.active_slot,
        result.index_changed,
    )
    return result


def build_scheduler(settings: SchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build and register the periodic sitemap update job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """

    settings = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_sitemap_update,
        trigger="cron",
        hour=settings.hour,
        minute=settings.minute,
        id="sitemap_update",
        name="Daily sitemap regeneration",
        replace_existing=True,
        misfire_grace_time=3600,
        max_instances=1,
        coalesce=True,
    )

    return scheduler
