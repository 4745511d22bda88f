"""
sitemap/errors.py

Exception hierarchy for sitemap generation and publishing.
"""

from __future__ import annotations

from datetime import datetime


class SitemapError(Exception):
    """Base exception for sitemap pipeline failures."""


class ConfigurationError(SitemapError):
    """Raised when required settings are missing or blank."""


class ConcurrentUpdateError(SitemapError):
    """
    Raised when an update is requested while another one is running.

    Attributes:
        started_at: When the running update was admitted.
    """

    def __init__(self, started_at: datetime | None) -> None:
        self.started_at = started_at
        super().__init__(
            f"There is already an update in progress (started at {started_at})"
        )


class StorageUnconfirmedError(SitemapError):
    """
    Raised when an upload could not be verified after all attempts.

    Attributes:
        key: Object key that was written.
        attempts: Total number of put attempts made.
    """

    def __init__(self, key: str, attempts: int) -> None:
        self.key = key
        self.attempts = attempts
        super().__init__(
            f"Upload of {key!r} could not be confirmed after {attempts} attempt(s)"
        )


class SitemapStateError(SitemapError):
    """Raised when persisted blue/green state cannot be interpreted."""


class GenerationError(SitemapError):
    """Raised when an update run fails; the cause is chained."""
