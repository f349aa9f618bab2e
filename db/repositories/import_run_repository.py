"""
Repository for scheme import run lifecycle persistence and lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from db.models.import_run import ImportRun, ImportRunStatus


class ImportRunRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def start_run(self, *, file_name: str) -> ImportRun:
        run = ImportRun(
            file_name=file_name,
            status=ImportRunStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
        )
        self._session.add(run)
        self._session.flush()
        return run

    def get_run(self, run_id: uuid.UUID) -> ImportRun | None:
        return self._session.get(ImportRun, run_id)

    def mark_completed(
        self,
        *,
        run_id: uuid.UUID,
        summary_payload: dict[str, Any],
    ) -> ImportRun | None:
        run = self.get_run(run_id)
        if run is None:
            return None
        run.status = ImportRunStatus.COMPLETED
        run.completed_at = datetime.now(timezone.utc)
        run.summary_payload = summary_payload
        run.error_message = None
        return run

    def mark_failed(self, *, run_id: uuid.UUID, error_message: str) -> ImportRun | None:
        run = self.get_run(run_id)
        if run is None:
            return None
        run.status = ImportRunStatus.FAILED
        run.completed_at = datetime.now(timezone.utc)
        run.error_message = error_message
        return run
