"""
app/services/scheme_import_service.py

Service layer for scheme report import orchestration.

One call handles one uploaded file:

    1. decode the file into sheets (fails fast, before any store access)
    2. per sheet: detect the header row, map columns, resolve the region
    3. per row: reconcile against the store (Accepted / Skipped / Failed)
    4. recompute every region summary from ground truth
    5. persist change events, commit, then publish them to the feed

Imports targeting the same table are serialized by a process-local lock and
a transaction-scoped advisory lock held by the store.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Sequence
from datetime import datetime
from functools import lru_cache
from typing import Callable, Mapping

from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_scheme_import_settings
from app.domain.scheme_import import (
    REGION_FIELD,
    Accepted,
    Failed,
    ImportSummary,
    RawSheet,
    RegionSummary,
    SheetReport,
    SheetRow,
    SheetSkipReason,
    Skipped,
    SkipReason,
    utc_now,
)
from app.logging_utils import log_event
from app.mappers.column_mapper import ColumnMapper, ColumnMapping
from app.mappers.header_detector import detect_header_row
from app.normalization.region_resolver import RegionResolver
from app.normalization.value_coercer import ValueCoercer
from app.parsing.workbook_reader import read_workbook
from app.repositories.scheme_store import SchemeStore, SqlAlchemySchemeStore
from app.services.aggregation_service import AggregationEngine
from app.services.change_feed import ChangeFeed, get_change_feed
from app.services.record_reconciler import ReconcileBatch, RecordReconciler
from app.validators.mapping_validator import SchemaMappingError
from db.repositories.import_run_repository import ImportRunRepository

logger = logging.getLogger(__name__)

# Skipped rows that are also reported in ``errors`` with their raw content.
_REPORTED_SKIP_REASONS = frozenset({SkipReason.NO_IDENTIFIER, SkipReason.HEADER_ROW})


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SchemeImportPersistenceError(RuntimeError):
    """
    Raised when an import batch cannot be persisted; the batch is rolled back.
    """


# ---------------------------------------------------------------------------
# Process-local table locks
# ---------------------------------------------------------------------------

_TABLE_LOCKS: dict[str, threading.Lock] = {}
_TABLE_LOCKS_GUARD = threading.Lock()


def table_lock(name: str) -> threading.Lock:
    with _TABLE_LOCKS_GUARD:
        lock = _TABLE_LOCKS.get(name)
        if lock is None:
            lock = threading.Lock()
            _TABLE_LOCKS[name] = lock
        return lock


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SchemeImportService:
    """
    Coordinates decoding, mapping, reconciliation, aggregation, and publishing.
    """

    def __init__(
        self,
        *,
        header_scan_depth: int = 20,
        max_row_errors: int = 500,
        log_row_errors: bool = True,
        generated_id_floor: int = 20000000,
        lock_name: str = "scheme_status",
        change_feed: ChangeFeed | None = None,
        mapper: ColumnMapper | None = None,
        region_resolver: RegionResolver | None = None,
        coercer: ValueCoercer | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._header_scan_depth = max(1, header_scan_depth)
        self._max_row_errors = max(1, max_row_errors)
        self._log_row_errors = log_row_errors
        self._generated_id_floor = generated_id_floor
        self._lock_name = lock_name
        self._change_feed = change_feed
        self._mapper = mapper or ColumnMapper()
        self._region_resolver = region_resolver or RegionResolver()
        self._coercer = coercer or ValueCoercer()
        self._clock = clock

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def import_upload(self, *, upload_file: UploadFile, db: Session) -> ImportSummary:
        """
        Import an uploaded report. The caller owns the session lifecycle.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        content = raw_file.read()
        return self.import_file(content=content, filename=upload_file.filename or "upload", db=db)

    def import_file(self, *, content: bytes, filename: str, db: Session) -> ImportSummary:
        """
        Decode ``content`` and import it against the database behind ``db``.

        Raises:
            WorkbookDecodeError: the file cannot be decoded; nothing was written.
            SchemeImportPersistenceError: the batch failed to persist and was rolled back.
        """

        sheets = read_workbook(content, filename)

        runs = ImportRunRepository(db)
        try:
            run_id = runs.start_run(file_name=filename).id
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise SchemeImportPersistenceError("Failed to record import run.") from exc

        def _commit(summary: ImportSummary) -> None:
            runs.mark_completed(run_id=run_id, summary_payload=summary.to_dict())
            db.commit()

        try:
            return self.import_sheets(
                sheets=sheets,
                store=SqlAlchemySchemeStore(db),
                source_name=filename,
                commit=_commit,
            )
        except SQLAlchemyError as exc:
            db.rollback()
            self._mark_run_failed(db, runs, run_id=run_id, error=str(exc))
            raise SchemeImportPersistenceError("Failed to persist scheme report rows.") from exc

    def import_sheets(
        self,
        *,
        sheets: Sequence[RawSheet],
        store: SchemeStore,
        source_name: str = "upload",
        commit: Callable[[ImportSummary], None] | None = None,
    ) -> ImportSummary:
        """
        Import already-decoded sheets into ``store``.

        ``commit`` runs after summaries and events are written; events reach
        the change feed only once it returns.
        """

        summary = ImportSummary()
        with table_lock(self._lock_name):
            store.acquire_import_lock(self._lock_name)
            reconciler = RecordReconciler(
                store=store,
                change_feed=self._change_feed,
                coercer=self._coercer,
                generated_id_floor=self._generated_id_floor,
                clock=self._clock,
            )
            batch = reconciler.begin_batch()

            for sheet in sheets:
                summary.sheets.append(self._import_sheet(sheet, reconciler, batch, summary))

            refreshed = AggregationEngine(store).recompute_all()
            summary.regions_refreshed = list(refreshed)
            summary.events = list(batch.events)
            store.append_events(batch.events)

            if commit is not None:
                commit(summary)
            published = reconciler.publish(batch)

        log_event(
            logger,
            logging.INFO,
            "scheme_import_finished",
            source=source_name,
            created=summary.created,
            updated=summary.updated,
            skipped=summary.skipped,
            errors=len(summary.errors),
            events=published,
            regions=len(summary.regions_refreshed),
        )
        return summary

    def refresh_summaries(self, *, db: Session) -> Mapping[str, RegionSummary]:
        """
        Recompute every region summary from ground truth and commit.
        """

        store = SqlAlchemySchemeStore(db)
        with table_lock(self._lock_name):
            try:
                store.acquire_import_lock(self._lock_name)
                summaries = AggregationEngine(store).recompute_all()
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise SchemeImportPersistenceError("Failed to refresh region summaries.") from exc
        return summaries

    # ------------------------------------------------------------------
    # Sheet processing
    # ------------------------------------------------------------------

    def _import_sheet(
        self,
        sheet: RawSheet,
        reconciler: RecordReconciler,
        batch: ReconcileBatch,
        summary: ImportSummary,
    ) -> SheetReport:
        report = SheetReport(sheet_name=sheet.name)
        log_event(logger, logging.INFO, "sheet_started", sheet=sheet.name, rows=sheet.row_count)

        if not any(any(value is not None and str(value).strip() for value in row) for row in sheet.rows):
            return self._skip_sheet(report, summary, SheetSkipReason.EMPTY_SHEET, "sheet has no values")

        header_index = detect_header_row(sheet, max_scan_rows=self._header_scan_depth)
        report.header_row_index = header_index
        log_event(logger, logging.DEBUG, "header_row_found", sheet=sheet.name, index=header_index)

        try:
            mapping = self._mapper.build_mapping(sheet.row(header_index))
        except SchemaMappingError as exc:
            return self._skip_sheet(report, summary, SheetSkipReason.NO_IDENTIFIER_COLUMN, exc.message)
        log_event(
            logger,
            logging.DEBUG,
            "mapping_resolved",
            sheet=sheet.name,
            strategies=mapping.match_strategies,
        )

        rows = [
            row
            for row in self._mapper.iter_rows(sheet, header_row_index=header_index, mapping=mapping)
            if not row.is_blank()
        ]
        region = self._region_resolver.resolve(sheet.name, self._first_region_cell(rows, mapping))
        if region is None:
            return self._skip_sheet(report, summary, SheetSkipReason.NO_REGION, "no region in sheet name or region column")
        report.region = region

        for row in rows:
            raw = row.raw_content()
            outcome = reconciler.reconcile(
                batch,
                row_number=row.row_number,
                mapped=self._mapper.map_row(row, mapping),
                region=region,
                raw=raw,
            )
            if isinstance(outcome, Accepted):
                if outcome.created:
                    summary.created += 1
                    report.created += 1
                else:
                    summary.updated += 1
                    report.updated += 1
            elif isinstance(outcome, Skipped):
                summary.skipped += 1
                report.skipped += 1
                summary.skip_reasons[outcome.reason] = summary.skip_reasons.get(outcome.reason, 0) + 1
                if outcome.reason in _REPORTED_SKIP_REASONS:
                    self._record_error(
                        summary,
                        f"Sheet '{sheet.name}' row {outcome.row_number}: skipped ({outcome.reason}) | raw: {raw}",
                    )
            elif isinstance(outcome, Failed):
                report.failed += 1
                self._record_error(
                    summary,
                    f"Sheet '{sheet.name}' row {outcome.row_number}: {outcome.error} | raw: {outcome.raw}",
                )

        log_event(
            logger,
            logging.INFO,
            "sheet_finished",
            sheet=sheet.name,
            region=region,
            created=report.created,
            updated=report.updated,
            skipped=report.skipped,
            failed=report.failed,
        )
        return report

    @staticmethod
    def _first_region_cell(rows: Sequence[SheetRow], mapping: ColumnMapping) -> object:
        column = mapping.column_for(REGION_FIELD)
        if column is None:
            return None
        for row in rows:
            value = row.value_at(column)
            if value is not None and str(value).strip():
                return value
        return None

    def _skip_sheet(
        self,
        report: SheetReport,
        summary: ImportSummary,
        reason: str,
        detail: str,
    ) -> SheetReport:
        report.skip_reason = reason
        log_event(logger, logging.WARNING, "sheet_skipped", sheet=report.sheet_name, reason=reason, detail=detail)
        self._record_error(summary, f"Sheet '{report.sheet_name}' skipped ({reason}): {detail}")
        return report

    def _record_error(self, summary: ImportSummary, message: str) -> None:
        if self._log_row_errors:
            logger.warning("Scheme import issue: %s", message)
        if len(summary.errors) < self._max_row_errors:
            summary.errors.append(message)

    def _mark_run_failed(
        self,
        db: Session,
        runs: ImportRunRepository,
        *,
        run_id: uuid.UUID,
        error: str,
    ) -> None:
        try:
            runs.mark_failed(run_id=run_id, error_message=error[:2000])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("Could not mark import run %s as failed: %s", run_id, exc)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_scheme_import_service() -> SchemeImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_scheme_import_settings()
    return SchemeImportService(
        header_scan_depth=settings.header_scan_depth,
        max_row_errors=settings.max_row_errors,
        log_row_errors=settings.log_row_errors,
        generated_id_floor=settings.generated_id_floor,
        lock_name=settings.lock_name,
        change_feed=get_change_feed(),
    )
