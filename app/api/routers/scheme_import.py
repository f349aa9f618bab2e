"""
app/api/routers/scheme_import.py

Scheme report import HTTP endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_report_upload
from app.parsing.workbook_reader import WorkbookDecodeError
from app.schemas.scheme_import import SchemeImportSummaryResponse
from app.services.scheme_import_service import (
    SchemeImportPersistenceError,
    SchemeImportService,
    get_scheme_import_service,
)
from db.session import get_db

router = APIRouter(tags=["import"])


@router.post("/import/scheme-report", response_model=SchemeImportSummaryResponse)
def import_scheme_report(
    file: UploadFile = Depends(get_report_upload),
    db: Session = Depends(get_db),
    import_service: SchemeImportService = Depends(get_scheme_import_service),
) -> SchemeImportSummaryResponse:
    """
    Import one scheme status report (.xlsx or .csv).
    """

    try:
        summary = import_service.import_upload(upload_file=file, db=db)
    except WorkbookDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except SchemeImportPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist scheme report rows.",
        ) from exc
    finally:
        file.file.close()

    return SchemeImportSummaryResponse.from_domain(summary)
