"""
db/models/scheme_status.py

Canonical scheme status record model.
"""

from __future__ import annotations

from sqlalchemy import Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, count_column


class SchemeStatusRecord(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "scheme_status"

    record_key: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="scheme_id, or scheme_id::block when a scheme spans blocks",
    )
    scheme_id: Mapped[str] = mapped_column(String(100), nullable=False)
    scheme_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    sr_no: Mapped[int | None] = mapped_column(Integer, nullable=True)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    circle: Mapped[str | None] = mapped_column(String(255), nullable=True)
    division: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sub_division: Mapped[str | None] = mapped_column(String(255), nullable=True)
    block: Mapped[str | None] = mapped_column(String(255), nullable=True)
    agency: Mapped[str | None] = mapped_column(String(255), nullable=True)

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

    status: Mapped[str | None] = mapped_column(String(100), nullable=True)
    functional_status: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("record_key", name="uq_scheme_status_record_key"),
        Index("ix_scheme_status_region", "region"),
        Index("ix_scheme_status_region_scheme_name", "region", "scheme_name"),
        Index("ix_scheme_status_scheme_id", "scheme_id"),
    )
