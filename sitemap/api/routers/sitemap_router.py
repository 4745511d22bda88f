"""
Sitemap serving and update trigger endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response, status

from sitemap.api.dependencies import get_coordinator, get_read_service
from sitemap.errors import ConcurrentUpdateError, SitemapStateError
from sitemap.naming import SITEMAP_FILE, SITEMAP_INDEX_FILE
from sitemap.scheduler.jobs import run_sitemap_update
from sitemap.schemas.sitemap import UpdateAcceptedResponse, UpdateStatusResponse
from sitemap.services.read_service import ReadSitemapService
from sitemap.services.update_coordinator import UpdateCoordinator

router = APIRouter(tags=["sitemap"])

_XML_MEDIA_TYPE = "application/xml"


@router.get(f"/{SITEMAP_INDEX_FILE}")
def get_sitemap_index(
    reader: ReadSitemapService = Depends(get_read_service),
) -> Response:
    content = reader.index_content()
    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sitemap index has not been generated yet.",
        )
    return Response(content=content, media_type=_XML_MEDIA_TYPE)


@router.get(f"/{SITEMAP_FILE}")
def get_sitemap_file(
    from_: int = Query(alias="from", ge=0, description="First record offset (inclusive)"),
    to: int = Query(ge=0, description="Last record offset (exclusive)"),
    reader: ReadSitemapService = Depends(get_read_service),
) -> Response:
    try:
        content = reader.file_content(from_, to)
    except SitemapStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sitemap file not found: from={from_} to={to}",
        )
    return Response(content=content, media_type=_XML_MEDIA_TYPE)


@router.post(
    "/sitemap/update",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=UpdateAcceptedResponse,
)
def trigger_sitemap_update(
    background_tasks: BackgroundTasks,
    coordinator: UpdateCoordinator = Depends(get_coordinator),
) -> UpdateAcceptedResponse:
    # a 202 means the queued task already holds the run
    try:
        admitted = coordinator.admit()
    except ConcurrentUpdateError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    background_tasks.add_task(run_sitemap_update, coordinator, admitted)
    return UpdateAcceptedResponse(status="accepted", detail="Sitemap update scheduled.")


@router.get("/sitemap/status", response_model=UpdateStatusResponse)
def get_update_status(
    coordinator: UpdateCoordinator = Depends(get_coordinator),
) -> UpdateStatusResponse:
    state = coordinator.status()
    return UpdateStatusResponse(status=state.status.value, started_at=state.started_at)
