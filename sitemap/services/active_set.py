"""
sitemap/services/active_set.py

Blue/green designation of the served sitemap file set.
"""

from __future__ import annotations

import logging
import threading

from sitemap.errors import SitemapStateError
from sitemap.naming import ACTIVE_SLOT_FILE, Slot
from sitemap.storage.gateway import StorageGateway

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_SLOT = Slot.BLUE


class ActiveSetManager:
    """
    Tracks which of the two slots is served.

    The designation is one marker object holding the active slot's base name,
    so exactly one slot is active at any time. A switch is a single put of
    that marker; readers see either the old or the new value.
    """

    def __init__(self, gateway: StorageGateway, *, marker_key: str = ACTIVE_SLOT_FILE) -> None:
        self._gateway = gateway
        self._marker_key = marker_key
        self._lock = threading.Lock()

    def active_slot(self) -> Slot:
        raw = self._gateway.read(self._marker_key)
        if raw is None:
            return DEFAULT_ACTIVE_SLOT
        try:
            value = raw.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise SitemapStateError(
                f"Active slot marker {self._marker_key!r} is not valid UTF-8"
            ) from exc
        if not value:
            return DEFAULT_ACTIVE_SLOT
        slot = Slot.from_base_name(value)
        if slot is None:
            raise SitemapStateError(
                f"Active slot marker {self._marker_key!r} holds unknown value {value!r}"
            )
        return slot

    def active_slot_name(self) -> str:
        return self.active_slot().base_name

    def inactive_slot_name(self) -> str:
        """Base object name of the slot the next generation writes to."""
        return self.active_slot().other.base_name

    def switch_active(self) -> str:
        """
        Make the inactive slot active and return its base name.

        Raises StorageUnconfirmedError if the marker write cannot be verified;
        the previous designation then stays in effect.
        """

        with self._lock:
            new_active = self.active_slot().other
            self._gateway.upload(
                self._marker_key,
                new_active.base_name.encode("utf-8"),
            ).raise_for_status()
            logger.info("Active sitemap slot is now %s", new_active.value)
            return new_active.base_name
