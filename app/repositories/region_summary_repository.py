"""
app/repositories/region_summary_repository.py

Persistence layer for region summary rollups.
"""

from __future__ import annotations

from dataclasses import fields

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.scheme_import import RegionSummary
from db.models.region_summary import RegionSummaryRecord

_SUMMARY_FIELDS: tuple[str, ...] = tuple(item.name for item in fields(RegionSummary))


class RegionSummaryRepository:
    """
    Replaces and reads per-region summary rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def replace(self, summary: RegionSummary) -> None:
        """
        Overwrite every counter of the region row; never patch individual totals.
        """

        row = self._session.scalars(
            select(RegionSummaryRecord).where(RegionSummaryRecord.region == summary.region)
        ).first()
        if row is None:
            row = RegionSummaryRecord(region=summary.region)
            self._session.add(row)
        for name in _SUMMARY_FIELDS:
            setattr(row, name, getattr(summary, name))
        self._session.flush()

    def get(self, region: str) -> RegionSummary | None:
        row = self._session.scalars(
            select(RegionSummaryRecord).where(RegionSummaryRecord.region == region)
        ).first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[RegionSummary]:
        stmt = select(RegionSummaryRecord).order_by(RegionSummaryRecord.region)
        return [self._to_domain(row) for row in self._session.scalars(stmt)]

    def list_regions(self) -> list[str]:
        return list(self._session.scalars(select(RegionSummaryRecord.region)))

    @staticmethod
    def _to_domain(row: RegionSummaryRecord) -> RegionSummary:
        return RegionSummary(**{name: getattr(row, name) for name in _SUMMARY_FIELDS})
