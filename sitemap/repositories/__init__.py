"""
sitemap/repositories package marker.
"""

from sitemap.repositories.record_source import RecordSource

__all__ = [
    "RecordSource",
]
