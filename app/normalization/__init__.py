"""
app/normalization package marker.
"""

from app.normalization.region_resolver import RegionResolver, default_agency
from app.normalization.status_normalizer import (
    StatusNormalizer,
    is_fully_completed,
    normalize_functional_status,
    normalize_status,
)
from app.normalization.value_coercer import ValueCoercer

__all__ = [
    "RegionResolver",
    "StatusNormalizer",
    "ValueCoercer",
    "default_agency",
    "is_fully_completed",
    "normalize_functional_status",
    "normalize_status",
]
