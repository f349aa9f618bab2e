from __future__ import annotations

from typing import Iterator

import pytest

from app.config import get_change_feed_settings, get_scheduler_settings, get_scheme_import_settings
from app.scheduler import jobs


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    for getter in (get_scheme_import_settings, get_change_feed_settings, get_scheduler_settings):
        getter.cache_clear()
    yield
    for getter in (get_scheme_import_settings, get_change_feed_settings, get_scheduler_settings):
        getter.cache_clear()


def test_import_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCHEME_IMPORT_HEADER_SCAN_DEPTH", "35")
    monkeypatch.setenv("SCHEME_IMPORT_MAX_ROW_ERRORS", "not-a-number")
    monkeypatch.setenv("SCHEME_IMPORT_LOG_ROW_ERRORS", "off")

    settings = get_scheme_import_settings()

    assert settings.header_scan_depth == 35
    assert settings.max_row_errors == 500
    assert settings.log_row_errors is False


def test_change_feed_settings_are_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHANGE_FEED_MAX_EVENTS_PER_DAY", "0")
    monkeypatch.setenv("CHANGE_FEED_RETENTION_DAYS", "3")

    settings = get_change_feed_settings()

    assert settings.max_events_per_day == 1
    assert settings.retention_days == 3


def test_disabled_scheduler_registers_no_jobs(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCHEDULER_ENABLED", "false")

    assert jobs.build_scheduler().get_jobs() == []


def test_prune_job_runs_after_refresh(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCHEDULER_ENABLED", "true")
    monkeypatch.setenv("SUMMARY_REFRESH_HOUR_UTC", "23")
    monkeypatch.setenv("SUMMARY_REFRESH_MINUTE_UTC", "58")

    scheduler = jobs.build_scheduler()
    by_id = {job.id: job for job in scheduler.get_jobs()}

    assert set(by_id) == {"region_summary_refresh", "change_feed_prune"}
    prune_fields = {field.name: str(field) for field in by_id["change_feed_prune"].trigger.fields}
    assert prune_fields["hour"] == "0"
    assert prune_fields["minute"] == "3"


def test_refresh_job_logs_and_survives_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    class _BrokenService:
        def refresh_summaries(self, *, db: object) -> dict[str, object]:
            raise RuntimeError("database offline")

    class _Session:
        def close(self) -> None:
            pass

    monkeypatch.setattr(jobs, "get_scheme_import_service", lambda: _BrokenService())
    monkeypatch.setattr("db.session.SessionLocal", lambda: _Session())

    jobs.run_region_summary_refresh()
