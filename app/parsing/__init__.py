"""
app/parsing package marker.
"""

from app.parsing.workbook_reader import SUPPORTED_EXTENSIONS, WorkbookDecodeError, read_workbook

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "WorkbookDecodeError",
    "read_workbook",
]
