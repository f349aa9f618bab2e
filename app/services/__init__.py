"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationEngine, summarize_region
from app.services.change_feed import ChangeFeed, get_change_feed, warm_change_feed
from app.services.record_reconciler import ReconcileBatch, RecordReconciler
from app.services.scheme_import_service import (
    SchemeImportPersistenceError,
    SchemeImportService,
    get_scheme_import_service,
)

__all__ = [
    "AggregationEngine",
    "ChangeFeed",
    "ReconcileBatch",
    "RecordReconciler",
    "SchemeImportPersistenceError",
    "SchemeImportService",
    "get_change_feed",
    "get_scheme_import_service",
    "summarize_region",
    "warm_change_feed",
]
