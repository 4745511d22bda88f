"""
sitemap/naming.py

Well-known object keys and file naming for the published sitemap.
"""

from __future__ import annotations

from enum import Enum

# Public name of a sitemap file; the read side resolves it to the active slot.
SITEMAP_FILE = "sitemap.xml"
SITEMAP_INDEX_FILE = "sitemap-index.xml"
ACTIVE_SLOT_FILE = "sitemap-active-slot.txt"

_SLOT_FILE_TEMPLATE = "sitemap-hashed-{slot}.xml"


class Slot(str, Enum):
    BLUE = "blue"
    GREEN = "green"

    @property
    def base_name(self) -> str:
        return _SLOT_FILE_TEMPLATE.format(slot=self.value)

    @property
    def other(self) -> "Slot":
        return Slot.GREEN if self is Slot.BLUE else Slot.BLUE

    @classmethod
    def from_base_name(cls, base_name: str) -> "Slot | None":
        for slot in cls:
            if slot.base_name == base_name:
                return slot
        return None


def range_suffix(start: int, end: int) -> str:
    """Return the `?from=..&to=..` suffix for the half-open range [start, end)."""

    return f"?from={start}&to={end}"


def chunk_file_name(base_name: str, start: int, end: int) -> str:
    return base_name + range_suffix(start, end)
