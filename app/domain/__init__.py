"""
app/domain package marker.
"""

from app.domain.scheme_import import (
    Accepted,
    ChangeEvent,
    Failed,
    ImportSummary,
    RawSheet,
    RegionSummary,
    SchemeRecord,
    SheetReport,
    SheetRow,
    Skipped,
)

__all__ = [
    "Accepted",
    "ChangeEvent",
    "Failed",
    "ImportSummary",
    "RawSheet",
    "RegionSummary",
    "SchemeRecord",
    "SheetReport",
    "SheetRow",
    "Skipped",
]
