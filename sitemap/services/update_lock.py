"""
sitemap/services/update_lock.py

Single-flight admission for sitemap update runs.

The lock is process-local: coordinators in separate processes are not
mutually excluded.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from sitemap.errors import ConcurrentUpdateError, SitemapStateError

logger = logging.getLogger(__name__)


class UpdateStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"


@dataclass(frozen=True)
class UpdateState:
    status: UpdateStatus
    started_at: datetime | None = None

    @property
    def in_progress(self) -> bool:
        return self.status is UpdateStatus.IN_PROGRESS


IDLE_STATE = UpdateState(status=UpdateStatus.IDLE)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UpdateLock:
    """
    Guards the Idle -> InProgress -> Idle lifecycle of one coordinator.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._mutex = threading.Lock()
        self._state = IDLE_STATE

    @property
    def state(self) -> UpdateState:
        with self._mutex:
            return self._state

    def start(self) -> UpdateState:
        """
        Admit a run. Raises ConcurrentUpdateError when one is already running;
        the running state is left untouched.
        """

        with self._mutex:
            if self._state.in_progress:
                logger.warning(
                    "There is already an update in progress (started at %s)",
                    self._state.started_at,
                )
                raise ConcurrentUpdateError(self._state.started_at)
            self._state = UpdateState(status=UpdateStatus.IN_PROGRESS, started_at=self._clock())
            logger.info("Starting update process...")
            return self._state

    def finish(self) -> None:
        with self._mutex:
            self._state = IDLE_STATE
            logger.info("Status: %s", self._state.status.value)

    def claim(self, admitted: UpdateState) -> UpdateState:
        """
        Take over a run admitted earlier by ``start()``. Raises
        SitemapStateError when that run is no longer the one in progress.
        """

        with self._mutex:
            if not admitted.in_progress or self._state != admitted:
                raise SitemapStateError(
                    f"Admitted update (started at {admitted.started_at}) is no longer in progress"
                )
            return self._state

    @contextmanager
    def hold(self, admitted: UpdateState | None = None) -> Iterator[UpdateState]:
        """
        Hold the lock for one run, admitting it unless ``admitted`` was
        already obtained from ``start()``. Always released on exit.
        """

        state = self.start() if admitted is None else self.claim(admitted)
        try:
            yield state
        finally:
            self.finish()
