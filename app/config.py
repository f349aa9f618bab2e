"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class LoggingSettings:
    level: int = logging.INFO


@dataclass(frozen=True)
class SchemeImportSettings:
    """
    Runtime settings for scheme report imports.
    """

    header_scan_depth: int = 20
    max_row_errors: int = 500
    log_row_errors: bool = True
    generated_id_floor: int = 20000000
    lock_name: str = "scheme_status"


@dataclass(frozen=True)
class ChangeFeedSettings:
    """
    Bounds for the in-memory activity feed.
    """

    max_events_per_day: int = 1000
    retention_days: int = 7


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Daily maintenance job schedule (UTC).
    """

    enabled: bool = True
    summary_refresh_hour: int = 1
    summary_refresh_minute: int = 0


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    level_name = _get_str_env("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return LoggingSettings(level=level if isinstance(level, int) else logging.INFO)


@lru_cache(maxsize=1)
def get_scheme_import_settings() -> SchemeImportSettings:
    """
    Return cached scheme import settings from environment variables.
    """

    return SchemeImportSettings(
        header_scan_depth=max(1, _get_int_env("SCHEME_IMPORT_HEADER_SCAN_DEPTH", 20)),
        max_row_errors=max(1, _get_int_env("SCHEME_IMPORT_MAX_ROW_ERRORS", 500)),
        log_row_errors=_get_bool_env("SCHEME_IMPORT_LOG_ROW_ERRORS", True),
        generated_id_floor=max(0, _get_int_env("SCHEME_IMPORT_GENERATED_ID_FLOOR", 20000000)),
        lock_name=_get_str_env("SCHEME_IMPORT_LOCK_NAME", "scheme_status"),
    )


@lru_cache(maxsize=1)
def get_change_feed_settings() -> ChangeFeedSettings:
    """
    Return cached change feed settings from environment variables.
    """

    return ChangeFeedSettings(
        max_events_per_day=max(1, _get_int_env("CHANGE_FEED_MAX_EVENTS_PER_DAY", 1000)),
        retention_days=max(1, _get_int_env("CHANGE_FEED_RETENTION_DAYS", 7)),
    )


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.
    """

    hour = _get_int_env("SUMMARY_REFRESH_HOUR_UTC", 1)
    minute = _get_int_env("SUMMARY_REFRESH_MINUTE_UTC", 0)
    return SchedulerSettings(
        enabled=_get_bool_env("SCHEDULER_ENABLED", True),
        summary_refresh_hour=hour if 0 <= hour <= 23 else 1,
        summary_refresh_minute=minute if 0 <= minute <= 59 else 0,
    )
