"""
sitemap/api/routers package marker.
"""

from sitemap.api.routers.sitemap_router import router as sitemap_router

__all__ = [
    "sitemap_router",
]
