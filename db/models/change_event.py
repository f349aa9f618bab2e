"""
db/models/change_event.py

Persisted activity feed entries. Append-only.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class ChangeEventRecord(Base):
    __tablename__ = "change_events"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    metric_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="scheme, village, esr, flow_meter, rca, pressure_transmitter",
    )
    delta_count: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="new")
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    scheme_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    scheme_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_change_events_occurred_at", "occurred_at"),
        Index("ix_change_events_region_occurred_at", "region", "occurred_at"),
    )
