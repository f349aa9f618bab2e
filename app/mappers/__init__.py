"""
app/mappers package marker.
"""

from app.mappers.column_mapper import (
    DEFAULT_FIELD_PATTERNS,
    POSITIONAL_FALLBACK,
    ColumnMapper,
    ColumnMapping,
    normalize_header,
)
from app.mappers.header_detector import detect_header_row

__all__ = [
    "DEFAULT_FIELD_PATTERNS",
    "POSITIONAL_FALLBACK",
    "ColumnMapper",
    "ColumnMapping",
    "detect_header_row",
    "normalize_header",
]
