"""
app/repositories package marker.
"""

from app.repositories.change_event_repository import ChangeEventRepository
from app.repositories.region_summary_repository import RegionSummaryRepository
from app.repositories.scheme_status_repository import RecordWriteError, SchemeStatusRepository
from app.repositories.scheme_store import SchemeStore, SqlAlchemySchemeStore

__all__ = [
    "ChangeEventRepository",
    "RecordWriteError",
    "RegionSummaryRepository",
    "SchemeStatusRepository",
    "SchemeStore",
    "SqlAlchemySchemeStore",
]
