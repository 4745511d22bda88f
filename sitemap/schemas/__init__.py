"""
sitemap/schemas package marker.
"""

from sitemap.schemas.sitemap import UpdateAcceptedResponse, UpdateStatusResponse

__all__ = [
    "UpdateAcceptedResponse",
    "UpdateStatusResponse",
]
