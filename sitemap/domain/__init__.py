"""
sitemap/domain package marker.
"""

from sitemap.domain.records import CatalogRecord, RecordFilter, SitemapChunk, SitemapIndex

__all__ = [
    "CatalogRecord",
    "RecordFilter",
    "SitemapChunk",
    "SitemapIndex",
]
