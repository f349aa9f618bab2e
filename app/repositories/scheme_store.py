"""
app/repositories/scheme_store.py

Storage collaborator contract used by the reconciler and aggregation engine,
plus its SQLAlchemy implementation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.domain.scheme_import import ChangeEvent, RegionSummary, SchemeRecord
from app.repositories.change_event_repository import ChangeEventRepository
from app.repositories.region_summary_repository import RegionSummaryRepository
from app.repositories.scheme_status_repository import SchemeStatusRepository


class SchemeStore(Protocol):
    """
    Keyed record store. Every write is a full-record replace.
    """

    def get_by_id(self, identifier: str) -> SchemeRecord | None: ...

    def find_by_name(self, *, region: str, scheme_name: str) -> SchemeRecord | None: ...

    def upsert(self, record: SchemeRecord) -> SchemeRecord: ...

    def list_by_region(self, region: str) -> list[SchemeRecord]: ...

    def list_regions(self) -> list[str]: ...

    def max_numeric_identifier(self) -> int | None: ...

    def replace_summary(self, region: str, summary: RegionSummary) -> None: ...

    def append_events(self, events: Sequence[ChangeEvent]) -> None: ...

    def acquire_import_lock(self, name: str) -> None: ...


class SqlAlchemySchemeStore:
    """
    PostgreSQL-backed store bound to one session and its transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._schemes = SchemeStatusRepository(session)
        self._summaries = RegionSummaryRepository(session)
        self._events = ChangeEventRepository(session)

    def get_by_id(self, identifier: str) -> SchemeRecord | None:
        return self._schemes.get_by_key(identifier)

    def find_by_name(self, *, region: str, scheme_name: str) -> SchemeRecord | None:
        return self._schemes.find_by_name(region=region, scheme_name=scheme_name)

    def upsert(self, record: SchemeRecord) -> SchemeRecord:
        return self._schemes.upsert(record)

    def list_by_region(self, region: str) -> list[SchemeRecord]:
        return self._schemes.list_by_region(region)

    def list_regions(self) -> list[str]:
        regions = set(self._schemes.list_regions())
        regions.update(self._summaries.list_regions())
        return sorted(regions)

    def max_numeric_identifier(self) -> int | None:
        return self._schemes.max_numeric_identifier()

    def replace_summary(self, region: str, summary: RegionSummary) -> None:
        if summary.region != region:
            raise ValueError(f"Summary for '{summary.region}' cannot replace region '{region}'.")
        self._summaries.replace(summary)

    def append_events(self, events: Sequence[ChangeEvent]) -> None:
        self._events.append(events)

    def acquire_import_lock(self, name: str) -> None:
        """
        Take a transaction-scoped advisory lock; released on commit or rollback.
        """

        self._session.execute(text("SELECT pg_advisory_xact_lock(hashtext(:name))"), {"name": name})
