"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.change_event import ChangeEventRecord
from db.models.import_run import ImportRun, ImportRunStatus
from db.models.region_summary import RegionSummaryRecord
from db.models.scheme_status import SchemeStatusRecord

__all__ = [
    "ChangeEventRecord",
    "ImportRun",
    "ImportRunStatus",
    "RegionSummaryRecord",
    "SchemeStatusRecord",
]
