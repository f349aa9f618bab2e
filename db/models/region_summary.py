"""
db/models/region_summary.py

Per-region rollup of scheme counters. Rows are replaced wholesale after
every import and by the daily refresh job.
"""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, count_column


class RegionSummaryRecord(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "region_summaries"

    region: Mapped[str] = mapped_column(String(100), nullable=False)

    total_schemes: Mapped[int] = count_column()
    fully_completed_schemes: Mapped[int] = count_column()
    partial_esr: Mapped[int] = count_column()
    total_villages: Mapped[int] = count_column()
    villages_integrated: Mapped[int] = count_column()
    functional_villages: Mapped[int] = count_column()
    partial_villages: Mapped[int] = count_column()
    non_functional_villages: Mapped[int] = count_column()
    fully_completed_villages: Mapped[int] = count_column()
    total_esr: Mapped[int] = count_column()
    esr_integrated: Mapped[int] = count_column()
    fully_completed_esr: Mapped[int] = count_column()
    balance_esr: Mapped[int] = count_column()
    flow_meters_connected: Mapped[int] = count_column()
    pressure_transmitters_connected: Mapped[int] = count_column()
    residual_chlorine_connected: Mapped[int] = count_column()

    __table_args__ = (
        UniqueConstraint("region", name="uq_region_summaries_region"),
    )
