"""Upload-with-verification on top of an object storage client.

Every write is confirmed by a non-empty version tag *and* a follow-up
existence check. Unconfirmed writes are retried with linear backoff
(``attempt * backoff_seconds``). Exhausting the attempts does not raise; the
caller receives an ``UploadResult`` with ``confirmed=False`` and decides.
Transport errors raised by the client itself are not retried.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from sitemap.errors import StorageUnconfirmedError
from sitemap.storage.base import ObjectStorageClient, StoredObject

logger = logging.getLogger(__name__)

_PURGE_PROGRESS_EVERY = 100


@dataclass(frozen=True)
class UploadResult:
    """Outcome of one upload-with-verification.

    Attributes:
        key: Object key that was written.
        confirmed: True when a version tag was returned and the object exists.
        attempts: Number of put calls made.
        version: Version tag returned by the last put, if any.
    """

    key: str
    confirmed: bool
    attempts: int
    version: str | None = None

    def raise_for_status(self) -> "UploadResult":
        if not self.confirmed:
            raise StorageUnconfirmedError(self.key, self.attempts)
        return self


class StorageGateway:
    """Verified writes, listing and purging over an ``ObjectStorageClient``."""

    def __init__(
        self,
        client: ObjectStorageClient,
        *,
        max_attempts: int = 3,
        backoff_seconds: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = max(0.0, backoff_seconds)
        self._sleep = sleep

    def upload(self, key: str, content: bytes) -> UploadResult:
        """Put ``content`` under ``key`` and verify it landed.

        Args:
            key: Object key.
            content: Serialized payload.

        Returns:
            An ``UploadResult``; ``confirmed`` is False when every attempt
            failed verification.
        """
        version: str | None = None
        for attempt in range(1, self._max_attempts + 1):
            version = self._client.put(key, content)
            exists = self._client.is_available(key)
            if version and exists:
                if attempt > 1:
                    logger.info("Saved %s on attempt %d/%d", key, attempt, self._max_attempts)
                return UploadResult(key=key, confirmed=True, attempts=attempt, version=version)

            logger.info(
                "Failed to save to storage (key=%s, version=%r, exists=%s) attempt %d/%d",
                key,
                version,
                exists,
                attempt,
                self._max_attempts,
            )
            if attempt < self._max_attempts:
                delay = attempt * self._backoff_seconds
                logger.info("Waiting %s seconds to try again", delay)
                self._sleep(delay)
                logger.info("Retrying to save %s", key)

        logger.error("Giving up on %s after %d attempt(s)", key, self._max_attempts)
        return UploadResult(
            key=key,
            confirmed=False,
            attempts=self._max_attempts,
            version=version or None,
        )

    def exists(self, key: str) -> bool:
        return self._client.is_available(key)

    def read(self, key: str) -> bytes | None:
        return self._client.get(key)

    def list(self) -> list[StoredObject]:
        return self._client.list()

    def delete(self, key: str) -> None:
        self._client.delete(key)

    def purge_prefix(self, prefix: str) -> int:
        """Delete every object whose name starts with ``prefix``.

        Individual delete failures are logged and skipped; the number of
        objects actually removed is returned.
        """
        objects = self._client.list()
        if not objects:
            logger.info("No files to remove.")
            return 0

        logger.info("Deleting all old files with the name %s", prefix)
        removed = 0
        failed = 0
        for obj in objects:
            if not obj.name.startswith(prefix):
                continue
            try:
                self._client.delete(obj.name)
            except Exception as exc:  # noqa: BLE001
                failed += 1
                logger.warning("Failed to remove %s: %s", obj.name, exc)
                continue
            removed += 1
            if removed % _PURGE_PROGRESS_EVERY == 0:
                logger.info("Removed %d old files", removed)

        if failed:
            logger.warning("Removed %d old files, %d could not be removed", removed, failed)
        else:
            logger.info("Removed all %d old files", removed)
        return removed
