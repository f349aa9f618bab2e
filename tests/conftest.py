"""
tests/conftest.py

Shared fixtures: an in-memory scheme store and a fixed-clock change feed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

import pytest

from app.domain.scheme_import import ChangeEvent, RegionSummary, SchemeRecord
from app.repositories.scheme_status_repository import RecordWriteError
from app.services.change_feed import ChangeFeed
from app.services.record_reconciler import RecordReconciler
from app.services.scheme_import_service import SchemeImportService

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


class InMemorySchemeStore:
    """
    Dict-backed store honouring the same contract as the SQLAlchemy store.
    """

    def __init__(self, records: Sequence[SchemeRecord] = ()) -> None:
        self.records: dict[str, SchemeRecord] = {record.key: record for record in records}
        self.summaries: dict[str, RegionSummary] = {}
        self.events: list[ChangeEvent] = []
        self.locks: list[str] = []
        self.failing_keys: set[str] = set()
        self.upserts: list[str] = []

    def get_by_id(self, identifier: str) -> SchemeRecord | None:
        return self.records.get(identifier)

    def find_by_name(self, *, region: str, scheme_name: str) -> SchemeRecord | None:
        wanted = scheme_name.strip().lower()
        for record in self.records.values():
            if record.region == region and (record.scheme_name or "").lower() == wanted:
                return record
        return None

    def upsert(self, record: SchemeRecord) -> SchemeRecord:
        if record.key in self.failing_keys:
            raise RecordWriteError(f"Failed to write scheme '{record.key}': constraint violated")
        self.records[record.key] = record
        self.upserts.append(record.key)
        return record

    def list_by_region(self, region: str) -> list[SchemeRecord]:
        return sorted(
            (record for record in self.records.values() if record.region == region),
            key=lambda record: record.key,
        )

    def list_regions(self) -> list[str]:
        regions = {record.region for record in self.records.values()}
        regions.update(self.summaries)
        return sorted(regions)

    def max_numeric_identifier(self) -> int | None:
        numeric = [int(record.scheme_id) for record in self.records.values() if record.scheme_id.isdigit()]
        return max(numeric) if numeric else None

    def replace_summary(self, region: str, summary: RegionSummary) -> None:
        self.summaries[region] = summary

    def append_events(self, events: Sequence[ChangeEvent]) -> None:
        self.events.extend(events)

    def acquire_import_lock(self, name: str) -> None:
        self.locks.append(name)


@pytest.fixture()
def store() -> InMemorySchemeStore:
    return InMemorySchemeStore()


@pytest.fixture()
def feed() -> ChangeFeed:
    return ChangeFeed(max_events_per_day=100, retention_days=3, clock=fixed_clock)


@pytest.fixture()
def reconciler(store: InMemorySchemeStore, feed: ChangeFeed) -> RecordReconciler:
    return RecordReconciler(store=store, change_feed=feed, clock=fixed_clock)


@pytest.fixture()
def import_service(feed: ChangeFeed) -> SchemeImportService:
    return SchemeImportService(
        change_feed=feed,
        log_row_errors=False,
        lock_name="scheme_status_test",
        clock=fixed_clock,
    )
