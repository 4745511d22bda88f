from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from sitemap.logging_utils import configure_logging


def _validate_env() -> None:
    """
    Validate all required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files
    from sitemap.config import get_sitemap_settings
    from sitemap.errors import ConfigurationError

    load_env_files()

    errors: list[str] = []

    try:
        get_sitemap_settings()
    except ConfigurationError as exc:
        errors.append(str(exc))

    catalog_url = os.getenv("CATALOG_DATABASE_URL", "").strip()
    database_url = os.getenv("DATABASE_URL", "").strip()
    if not catalog_url and not database_url:
        errors.append(
            "No record store URL configured. Set CATALOG_DATABASE_URL or DATABASE_URL."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed - missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the record store is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Record store unavailable.") from exc


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate record store connectivity, start the scheduler on boot; shut it down on exit."""
    from sitemap.config import get_scheduler_settings
    from sitemap.scheduler.jobs import build_scheduler

    log = logging.getLogger(__name__)
    _check_db()
    log.info("Record store connectivity confirmed")

    settings = get_scheduler_settings()
    if not settings.enabled:
        log.info("Scheduler disabled")
        yield
        return

    scheduler = build_scheduler(settings)
    scheduler.start()
    log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        log.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    configure_logging()

    application = FastAPI(
        title="Catalog Sitemap API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from sitemap.api.routers import sitemap_router

    application.include_router(sitemap_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
