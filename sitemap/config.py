"""
sitemap/config.py

Environment-driven settings for sitemap generation, storage and scheduling.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files
from sitemap.errors import ConfigurationError

DEFAULT_ENTRIES_PER_FILE = 45_000
DEFAULT_PING_URLS = (
    "https://www.google.com/ping?sitemap=",
    "https://www.bing.com/ping?sitemap=",
)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_optional_int_env(name: str) -> int | None:
    """
    Read an optional integer; unset, blank or negative values disable it.
    """

    raw_value = _get_optional_str_env(name)
    if raw_value is None:
        return None
    try:
        parsed = int(raw_value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw_value!r}") from exc
    return parsed if parsed >= 0 else None


def _require_str_env(name: str) -> str:
    value = _get_optional_str_env(name)
    if value is None:
        raise ConfigurationError(f"{name} is not set")
    return value


@dataclass(frozen=True)
class SitemapSettings:
    """
    Settings for building sitemap documents.
    """

    base_url: str
    record_url_path: str
    min_record_completeness: int | None = None
    entries_per_file: int = DEFAULT_ENTRIES_PER_FILE
    query_batch_size: int = DEFAULT_ENTRIES_PER_FILE

    def __post_init__(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise ConfigurationError("Portal base url is not set")
        if not self.record_url_path or not self.record_url_path.strip():
            raise ConfigurationError("Portal record url path is not set")
        # trailing spaces in deployment config are common
        object.__setattr__(self, "base_url", self.base_url.strip())
        object.__setattr__(self, "record_url_path", self.record_url_path.strip())
        if self.entries_per_file < 1:
            raise ConfigurationError("entries_per_file must be at least 1")


@dataclass(frozen=True)
class StorageSettings:
    """
    Object storage and upload verification settings.
    """

    root_dir: str = "data/sitemap"
    upload_max_attempts: int = 3
    upload_backoff_seconds: float = 5.0
    abort_on_unconfirmed_upload: bool = True


@dataclass(frozen=True)
class NotificationSettings:
    """
    Search engine notification settings.
    """

    enabled: bool = True
    ping_urls: tuple[str, ...] = DEFAULT_PING_URLS
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Periodic update schedule (UTC).
    """

    enabled: bool = True
    hour: int = 1
    minute: int = 0


@lru_cache(maxsize=1)
def get_sitemap_settings() -> SitemapSettings:
    """
    Return cached sitemap settings.

    Raises ConfigurationError if PORTAL_BASE_URL or PORTAL_RECORD_URLPATH is
    missing or blank.
    """

    entries_per_file = max(1, _get_int_env("SITEMAP_ENTRIES_PER_FILE", DEFAULT_ENTRIES_PER_FILE))
    return SitemapSettings(
        base_url=_require_str_env("PORTAL_BASE_URL"),
        record_url_path=_require_str_env("PORTAL_RECORD_URLPATH"),
        min_record_completeness=_get_optional_int_env("SITEMAP_MIN_RECORD_COMPLETENESS"),
        entries_per_file=entries_per_file,
        query_batch_size=max(1, _get_int_env("SITEMAP_QUERY_BATCH_SIZE", entries_per_file)),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """
    Return cached storage settings from environment variables.
    """

    return StorageSettings(
        root_dir=_get_str_env("SITEMAP_STORAGE_DIR", "data/sitemap"),
        upload_max_attempts=max(1, _get_int_env("SITEMAP_UPLOAD_MAX_ATTEMPTS", 3)),
        upload_backoff_seconds=max(0.0, _get_float_env("SITEMAP_UPLOAD_BACKOFF_SECONDS", 5.0)),
        abort_on_unconfirmed_upload=_get_bool_env("SITEMAP_ABORT_ON_UNCONFIRMED_UPLOAD", True),
    )


@lru_cache(maxsize=1)
def get_notification_settings() -> NotificationSettings:
    """
    Return cached notification settings from environment variables.
    """

    raw_urls = _get_optional_str_env("SITEMAP_PING_URLS")
    if raw_urls is None:
        ping_urls = DEFAULT_PING_URLS
    else:
        ping_urls = tuple(url.strip() for url in raw_urls.split(",") if url.strip())
    return NotificationSettings(
        enabled=_get_bool_env("SITEMAP_NOTIFY_ENABLED", True),
        ping_urls=ping_urls,
        timeout_seconds=max(1.0, _get_float_env("SITEMAP_NOTIFY_TIMEOUT_SECONDS", 15.0)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    return SchedulerSettings(
        enabled=_get_bool_env("SITEMAP_SCHEDULER_ENABLED", True),
        hour=min(23, max(0, _get_int_env("SITEMAP_UPDATE_CRON_HOUR", 1))),
        minute=min(59, max(0, _get_int_env("SITEMAP_UPDATE_CRON_MINUTE", 0))),
    )
