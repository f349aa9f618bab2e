"""
app/api/routers/region_router.py

Region summary read and refresh endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.repositories.region_summary_repository import RegionSummaryRepository
from app.schemas.scheme_import import RegionSummaryResponse
from app.services.scheme_import_service import (
    SchemeImportPersistenceError,
    SchemeImportService,
    get_scheme_import_service,
)
from db.session import get_db

router = APIRouter(prefix="/regions", tags=["regions"])


def get_region_summary_repository(db: Session = Depends(get_db)) -> RegionSummaryRepository:
    return RegionSummaryRepository(db)


@router.get("/summary", response_model=list[RegionSummaryResponse])
def list_region_summaries(
    repository: RegionSummaryRepository = Depends(get_region_summary_repository),
) -> list[RegionSummaryResponse]:
    """
    Return the stored summary row of every region.
    """

    try:
        summaries = repository.list_all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to read region summaries.",
        ) from exc
    return [RegionSummaryResponse.from_domain(summary) for summary in summaries]


@router.post("/summary/refresh", response_model=list[RegionSummaryResponse])
def refresh_region_summaries(
    db: Session = Depends(get_db),
    import_service: SchemeImportService = Depends(get_scheme_import_service),
) -> list[RegionSummaryResponse]:
    """
    Recompute every region summary from the current scheme records.
    """

    try:
        summaries = import_service.refresh_summaries(db=db)
    except SchemeImportPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return [RegionSummaryResponse.from_domain(summary) for summary in summaries.values()]
