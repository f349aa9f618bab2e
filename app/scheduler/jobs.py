"""
app/scheduler/jobs.py

APScheduler-based maintenance scheduler.

Schedule (all times UTC, configurable)
--------------------------------------
  region_summary_refresh: 01:00 every day; rebuilds every region summary
                           from the current scheme records
  change_feed_prune:      5 minutes later; drops feed partitions older than
                           the retention window

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_scheduler_settings
from app.services.change_feed import get_change_feed
from app.services.scheme_import_service import get_scheme_import_service
from db.session import session_scope

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Job: Daily region summary refresh
# ---------------------------------------------------------------------------


def run_region_summary_refresh() -> None:
    """
    Recompute every region summary from ground truth.
    The import service commits; failures are logged and left for the next run.
    """
    logger.info("Scheduler: region_summary_refresh starting")
    with session_scope() as db:
        try:
            summaries = get_scheme_import_service().refresh_summaries(db=db)
            logger.info("Scheduler: region_summary_refresh regions=%d", len(summaries))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Scheduler: region_summary_refresh failed: %s", exc)
    logger.info("Scheduler: region_summary_refresh complete")


# ---------------------------------------------------------------------------
# Job: Change feed retention
# ---------------------------------------------------------------------------


def run_change_feed_prune() -> None:
    removed = get_change_feed().prune()
    logger.info("Scheduler: change_feed_prune removed=%d partition(s)", removed)


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register all periodic jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    No jobs are registered when ``SCHEDULER_ENABLED`` is false.
    """
    settings = get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")
    if not settings.enabled:
        logger.info("Scheduler disabled; no jobs registered")
        return scheduler

    prune_minute = (settings.summary_refresh_minute + 5) % 60
    prune_hour = (settings.summary_refresh_hour + (settings.summary_refresh_minute + 5) // 60) % 24

    scheduler.add_job(
        run_region_summary_refresh,
        trigger="cron",
        hour=settings.summary_refresh_hour,
        minute=settings.summary_refresh_minute,
        id="region_summary_refresh",
        name="Daily region summary refresh",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.add_job(
        run_change_feed_prune,
        trigger="cron",
        hour=prune_hour,
        minute=prune_minute,
        id="change_feed_prune",
        name="Daily change feed prune",
        replace_existing=True,
        misfire_grace_time=3600,
    )

    return scheduler
