"""
db/models/import_run.py

Audit trail for scheme report imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class ImportRunStatus:
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportRun(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "import_runs"

    file_name: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ImportRunStatus.RUNNING,
    )
    summary_payload: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="created/updated/skipped counts, errors and per-sheet reports",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_import_runs_status", "status"),
        Index("ix_import_runs_created_at", "created_at"),
    )
