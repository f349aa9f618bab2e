"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status

from app.parsing.workbook_reader import SUPPORTED_EXTENSIONS

REPORT_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
}


def get_report_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a workbook or CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    has_supported_extension = any(filename.endswith(extension) for extension in SUPPORTED_EXTENSIONS)
    has_supported_content_type = content_type in REPORT_CONTENT_TYPES

    if not has_supported_extension and not has_supported_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx, .xlsm, or .csv scheme reports are allowed.",
        )

    return file
