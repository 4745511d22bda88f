"""
sitemap/services package marker.
"""

from sitemap.services.active_set import ActiveSetManager
from sitemap.services.generation_service import GenerationSummary, SitemapGenerationService
from sitemap.services.notifier import NotificationTrigger, SearchEngineNotifier
from sitemap.services.read_service import ReadSitemapService
from sitemap.services.update_coordinator import (
    UpdateCoordinator,
    UpdateRunResult,
    get_update_coordinator,
)
from sitemap.services.update_lock import UpdateLock, UpdateState, UpdateStatus

__all__ = [
    "ActiveSetManager",
    "GenerationSummary",
    "NotificationTrigger",
    "ReadSitemapService",
    "SearchEngineNotifier",
    "SitemapGenerationService",
    "UpdateCoordinator",
    "UpdateLock",
    "UpdateRunResult",
    "UpdateState",
    "UpdateStatus",
    "get_update_coordinator",
]
