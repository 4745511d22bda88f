"""
sitemap/services/notifier.py

Tell search engines that the published sitemap index changed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol
from urllib.parse import quote

import requests

from sitemap.config import NotificationSettings

logger = logging.getLogger(__name__)


class NotificationTrigger(Protocol):
    def notify(self) -> None:
        ...


class SearchEngineNotifier:
    """
    Pings each configured search engine endpoint with the index URL.

    Failures are logged per endpoint and never raised; a failed ping must
    not undo a published sitemap.
    """

    def __init__(
        self,
        *,
        index_url: str,
        settings: NotificationSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._index_url = index_url
        self._enabled = settings.enabled
        self._ping_urls: Sequence[str] = settings.ping_urls
        self._timeout_seconds = settings.timeout_seconds
        self._session = session or requests.Session()

    def notify(self) -> None:
        if not self._enabled:
            logger.info("Search engine notification disabled; skipping")
            return

        for ping_url in self._ping_urls:
            url = ping_url + quote(self._index_url, safe="")
            try:
                response = self._session.get(url, timeout=self._timeout_seconds)
            except requests.RequestException as exc:
                logger.warning("Failed to notify %s: %s", ping_url, exc)
                continue
            if response.ok:
                logger.info("Notified %s (status=%d)", ping_url, response.status_code)
            else:
                logger.warning(
                    "Notification to %s rejected (status=%d)",
                    ping_url,
                    response.status_code,
                )
