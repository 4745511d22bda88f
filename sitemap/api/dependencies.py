"""
sitemap/api/dependencies.py

Shared FastAPI dependencies for the sitemap endpoints.
"""

from __future__ import annotations

from sitemap.services.read_service import ReadSitemapService
from sitemap.services.update_coordinator import UpdateCoordinator, get_update_coordinator


def get_coordinator() -> UpdateCoordinator:
    return get_update_coordinator()


def get_read_service() -> ReadSitemapService:
    return get_update_coordinator().reader
