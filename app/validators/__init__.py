"""
app/validators package marker.
"""

from app.validators.mapping_validator import MappingErrorDetail, MappingValidator, SchemaMappingError
from app.validators.row_validator import RowValidator

__all__ = [
    "MappingErrorDetail",
    "MappingValidator",
    "RowValidator",
    "SchemaMappingError",
]
