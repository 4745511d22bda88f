"""
Schemas for sitemap update trigger and status endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class UpdateStatusResponse(BaseModel):
    status: str
    started_at: datetime | None = None


class UpdateAcceptedResponse(BaseModel):
    status: str
    detail: str
