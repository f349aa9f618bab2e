"""
app/schemas package marker.
"""

from app.schemas.scheme_import import (
    ActivityFeedResponse,
    ChangeEventResponse,
    RegionSummaryResponse,
    SchemeImportSummaryResponse,
    SheetReportResponse,
)

__all__ = [
    "ActivityFeedResponse",
    "ChangeEventResponse",
    "RegionSummaryResponse",
    "SchemeImportSummaryResponse",
    "SheetReportResponse",
]
