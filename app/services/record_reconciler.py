"""
app/services/record_reconciler.py

Matches mapped rows against stored scheme records, writes full replacements,
and derives change events from positive metric deltas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import InvalidOperation
from typing import Any, Callable, Mapping

from app.domain.scheme_import import (
    CANONICAL_FIELDS,
    IDENTIFIER_FIELD,
    NAME_FIELD,
    TRACKED_METRICS,
    Accepted,
    CellValue,
    ChangeEvent,
    Failed,
    MetricType,
    RowOutcome,
    SchemeRecord,
    Skipped,
    SkipReason,
    utc_now,
)
from app.mappers.column_mapper import DEFAULT_FIELD_PATTERNS
from app.mappers.header_detector import is_filled
from app.normalization.region_resolver import default_agency
from app.normalization.status_normalizer import DEFAULT_SCHEME_STATUS
from app.normalization.value_coercer import ValueCoercer
from app.repositories.scheme_status_repository import RecordWriteError
from app.repositories.scheme_store import SchemeStore
from app.services.change_feed import ChangeFeed
from app.validators.row_validator import RowValidator

logger = logging.getLogger(__name__)

DEFAULT_GENERATED_ID_FLOOR = 20000000


def default_header_aliases() -> list[str]:
    aliases = [alias for _, group in DEFAULT_FIELD_PATTERNS for alias in group]
    aliases.extend(CANONICAL_FIELDS)
    return aliases


@dataclass
class ReconcileBatch:
    """
    Mutable state for one import call.
    """

    seen_keys: set[str] = field(default_factory=set)
    events: list[ChangeEvent] = field(default_factory=list)
    last_generated_id: int | None = None
    published: bool = False


class RecordReconciler:
    """
    Reconciles one row at a time against the store.

    Rows are handled strictly in order; the store must reflect every earlier
    row of the batch before the next one is looked up.
    """

    def __init__(
        self,
        *,
        store: SchemeStore,
        change_feed: ChangeFeed | None = None,
        coercer: ValueCoercer | None = None,
        row_validator: RowValidator | None = None,
        generated_id_floor: int = DEFAULT_GENERATED_ID_FLOOR,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._change_feed = change_feed
        self._coercer = coercer or ValueCoercer()
        self._row_validator = row_validator or RowValidator(header_aliases=default_header_aliases())
        self._generated_id_floor = generated_id_floor
        self._clock = clock

    def begin_batch(self) -> ReconcileBatch:
        return ReconcileBatch()

    def reconcile(
        self,
        batch: ReconcileBatch,
        *,
        row_number: int,
        mapped: Mapping[str, CellValue],
        region: str,
        raw: str = "",
    ) -> RowOutcome:
        """
        Turn one mapped row into an explicit outcome.
        """

        try:
            values = self._coercer.coerce_row(mapped)
        except (ValueError, TypeError, InvalidOperation, OverflowError) as exc:
            return Failed(row_number=row_number, error=f"Could not coerce row values: {exc}", raw=raw)

        identifier: str | None = values[IDENTIFIER_FIELD]
        name: str | None = values[NAME_FIELD]
        if not identifier and not name:
            return Skipped(row_number=row_number, reason=SkipReason.NO_IDENTIFIER)

        for candidate in (identifier, name):
            if candidate and self._row_validator.looks_like_header(candidate):
                return Skipped(row_number=row_number, reason=SkipReason.HEADER_ROW, detail=candidate)

        if not identifier:
            identifier = self._resolve_missing_identifier(batch, region=region, scheme_name=name or "")

        record = self._build_record(
            values,
            scheme_id=identifier,
            region=region,
            derive_balance=not is_filled(mapped.get("balance_esr")),
        )

        key = record.key
        if key in batch.seen_keys:
            return Skipped(row_number=row_number, reason=SkipReason.DUPLICATE_IN_BATCH, detail=key)
        batch.seen_keys.add(key)

        existing = self._store.get_by_id(key)
        try:
            self._store.upsert(record)
        except RecordWriteError as exc:
            batch.seen_keys.discard(key)
            return Failed(row_number=row_number, error=str(exc), raw=raw)

        events = self._events_for(existing, record)
        batch.events.extend(events)
        return Accepted(
            row_number=row_number,
            record=record,
            created=existing is None,
            events=tuple(events),
        )

    def publish(self, batch: ReconcileBatch) -> int:
        """
        Push the batch's events to the change feed. Call only after commit.
        """

        if batch.published or self._change_feed is None:
            return 0
        batch.published = True
        return self._change_feed.extend(batch.events)

    def _events_for(self, existing: SchemeRecord | None, record: SchemeRecord) -> list[ChangeEvent]:
        if existing is None:
            return [self._event(MetricType.SCHEME, 1, record)]

        events: list[ChangeEvent] = []
        for field_name, metric_type in TRACKED_METRICS:
            delta = getattr(record, field_name) - getattr(existing, field_name)
            if delta > 0:
                events.append(self._event(metric_type, delta, record))
        return events

    def _event(self, metric_type: str, delta: int, record: SchemeRecord) -> ChangeEvent:
        return ChangeEvent(
            metric_type=metric_type,
            delta_count=delta,
            region=record.region,
            scheme_id=record.scheme_id,
            scheme_name=record.scheme_name,
            timestamp=self._clock(),
        )

    def _resolve_missing_identifier(
        self,
        batch: ReconcileBatch,
        *,
        region: str,
        scheme_name: str,
    ) -> str:
        """
        Reuse the id of a same-named scheme in the region, else mint a new one.
        """

        known = self._store.find_by_name(region=region, scheme_name=scheme_name)
        if known is not None:
            return known.scheme_id

        stored_max = self._store.max_numeric_identifier() or 0
        next_id = max(stored_max, self._generated_id_floor, batch.last_generated_id or 0) + 1
        batch.last_generated_id = next_id
        logger.info("Generated scheme id %s for '%s' in %s.", next_id, scheme_name, region)
        return str(next_id)

    @staticmethod
    def _build_record(
        values: Mapping[str, Any],
        *,
        scheme_id: str,
        region: str,
        derive_balance: bool,
    ) -> SchemeRecord:
        fields_: dict[str, Any] = {
            name: values[name]
            for name in CANONICAL_FIELDS
            if name not in (IDENTIFIER_FIELD, "region")
        }
        if not fields_["agency"]:
            fields_["agency"] = default_agency(region)
        if not fields_["status"]:
            fields_["status"] = DEFAULT_SCHEME_STATUS
        if derive_balance:
            fields_["balance_esr"] = max(0, fields_["total_esr"] - fields_["fully_completed_esr"])
        return SchemeRecord(scheme_id=scheme_id, region=region, **fields_)
