"""
app/repositories/change_event_repository.py

Persistence layer for activity feed events.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.scheme_import import ChangeEvent
from db.models.change_event import ChangeEventRecord


class ChangeEventRepository:
    """
    Appends and reads persisted change events.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, events: Sequence[ChangeEvent]) -> int:
        if not events:
            return 0
        self._session.add_all(
            [
                ChangeEventRecord(
                    metric_type=event.metric_type,
                    delta_count=event.delta_count,
                    status=event.status,
                    region=event.region,
                    scheme_id=event.scheme_id,
                    scheme_name=event.scheme_name,
                    occurred_at=event.timestamp,
                )
                for event in events
            ]
        )
        self._session.flush()
        return len(events)

    def list_since(self, since: datetime, *, limit: int | None = None) -> list[ChangeEvent]:
        stmt = (
            select(ChangeEventRecord)
            .where(ChangeEventRecord.occurred_at >= since)
            .order_by(ChangeEventRecord.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [
            ChangeEvent(
                metric_type=row.metric_type,
                delta_count=row.delta_count,
                status=row.status,
                region=row.region,
                scheme_id=row.scheme_id,
                scheme_name=row.scheme_name,
                timestamp=row.occurred_at,
            )
            for row in self._session.scalars(stmt)
        ]
