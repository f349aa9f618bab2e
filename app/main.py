"""
app/main.py

FastAPI application factory for the scheme status import service.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_logging_settings

logger = logging.getLogger(__name__)

_INTEGER_ENV_VARS: tuple[str, ...] = (
    "SCHEME_IMPORT_HEADER_SCAN_DEPTH",
    "SCHEME_IMPORT_MAX_ROW_ERRORS",
    "SCHEME_IMPORT_GENERATED_ID_FLOOR",
    "CHANGE_FEED_MAX_EVENTS_PER_DAY",
    "CHANGE_FEED_RETENTION_DAYS",
)


def _validate_env() -> None:
    """
    Fail startup with every configuration problem listed at once.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []
    if not any(
        os.getenv(name, "").strip()
        for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
    ):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL, "
            "or LOCAL_DATABASE_URL."
        )

    for name in _INTEGER_ENV_VARS:
        raw = os.getenv(name)
        if raw is not None and not raw.strip().isdigit():
            errors.append(f"{name}='{raw}' must be a non-negative integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
        )


def _configure_logging() -> None:
    logging.basicConfig(
        level=get_logging_settings().level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Confirm the database answers and every mapped table exists.

    Migrations are never applied here; a missing table stops startup.
    """

    from sqlalchemy import inspect, text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401 (registers the mapped tables)
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical("Tables missing from the database: %s. Run 'alembic upgrade head'.", ", ".join(missing))
        raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(missing)}.")


def _warm_change_feed() -> None:
    from app.services.change_feed import get_change_feed, warm_change_feed
    from db.session import session_scope

    with session_scope() as db:
        warm_change_feed(db, get_change_feed())


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_database()
    logger.info("Database connectivity and schema confirmed")
    _warm_change_feed()

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Scheduler started with %d job(s)", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Scheme Status Import API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import activity_router, region_router, scheme_import_router

    application.include_router(scheme_import_router)
    application.include_router(activity_router)
    application.include_router(region_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
