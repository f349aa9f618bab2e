"""
app/repositories/scheme_status_repository.py

Persistence layer for canonical scheme status records.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import BigInteger, cast, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.scheme_import import CANONICAL_FIELDS, SchemeRecord
from db.models.scheme_status import SchemeStatusRecord


class RecordWriteError(RuntimeError):
    """
    Raised when a single scheme record cannot be written.
    """


def to_domain(row: SchemeStatusRecord) -> SchemeRecord:
    return SchemeRecord(**{name: getattr(row, name) for name in CANONICAL_FIELDS})


class SchemeStatusRepository:
    """
    Repository for keyed reads and full-replace writes of scheme records.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_key(self, key: str) -> SchemeRecord | None:
        row = self._get_row(key)
        return to_domain(row) if row is not None else None

    def find_by_name(self, *, region: str, scheme_name: str) -> SchemeRecord | None:
        stmt = (
            select(SchemeStatusRecord)
            .where(SchemeStatusRecord.region == region)
            .where(func.lower(SchemeStatusRecord.scheme_name) == scheme_name.strip().lower())
            .order_by(SchemeStatusRecord.created_at)
            .limit(1)
        )
        row = self._session.scalars(stmt).first()
        return to_domain(row) if row is not None else None

    def upsert(self, record: SchemeRecord) -> SchemeRecord:
        """
        Insert or fully replace one record inside a SAVEPOINT.

        A failing write rolls back only its own savepoint so earlier rows of
        the batch stay intact.
        """

        values: dict[str, Any] = record.to_dict()
        try:
            with self._session.begin_nested():
                row = self._get_row(record.key)
                if row is None:
                    row = SchemeStatusRecord(record_key=record.key, **values)
                    self._session.add(row)
                else:
                    for name, value in values.items():
                        setattr(row, name, value)
                self._session.flush()
        except SQLAlchemyError as exc:
            raise RecordWriteError(f"Failed to write scheme '{record.key}': {exc}") from exc
        return record

    def list_by_region(self, region: str) -> list[SchemeRecord]:
        stmt = (
            select(SchemeStatusRecord)
            .where(SchemeStatusRecord.region == region)
            .order_by(SchemeStatusRecord.record_key)
        )
        return [to_domain(row) for row in self._session.scalars(stmt)]

    def list_regions(self) -> list[str]:
        stmt = select(SchemeStatusRecord.region).distinct().order_by(SchemeStatusRecord.region)
        return list(self._session.scalars(stmt))

    def max_numeric_identifier(self) -> int | None:
        stmt = select(func.max(cast(SchemeStatusRecord.scheme_id, BigInteger))).where(
            SchemeStatusRecord.scheme_id.regexp_match(r"^[0-9]+$")
        )
        value = self._session.scalar(stmt)
        return int(value) if value is not None else None

    def _get_row(self, key: str) -> SchemeStatusRecord | None:
        stmt = select(SchemeStatusRecord).where(SchemeStatusRecord.record_key == key)
        return self._session.scalars(stmt).first()
