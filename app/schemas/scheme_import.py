"""
app/schemas/scheme_import.py

Response schemas for scheme import, activity, and region summary endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.scheme_import import ChangeEvent, ImportSummary, RegionSummary


class SheetReportResponse(BaseModel):
    """
    API response model for one processed or skipped sheet.
    """

    sheet_name: str
    processed: bool
    region: str | None = None
    header_row_index: int | None = Field(default=None, ge=0)
    skip_reason: str | None = None
    created: int = Field(0, ge=0)
    updated: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)


class ChangeEventResponse(BaseModel):
    metric_type: str
    delta_count: int = Field(..., ge=1)
    status: str
    region: str
    scheme_id: str | None = None
    scheme_name: str | None = None
    timestamp: datetime

    @classmethod
    def from_domain(cls, event: ChangeEvent) -> ChangeEventResponse:
        return cls(
            metric_type=event.metric_type,
            delta_count=event.delta_count,
            status=event.status,
            region=event.region,
            scheme_id=event.scheme_id,
            scheme_name=event.scheme_name,
            timestamp=event.timestamp,
        )


class SchemeImportSummaryResponse(BaseModel):
    """
    API response model for one import call.
    """

    created: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    errors: list[str] = Field(default_factory=list)
    skip_reasons: dict[str, int] = Field(default_factory=dict)
    sheets: list[SheetReportResponse] = Field(default_factory=list)
    events: list[ChangeEventResponse] = Field(default_factory=list)
    regions_refreshed: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, summary: ImportSummary) -> SchemeImportSummaryResponse:
        return cls(
            created=summary.created,
            updated=summary.updated,
            skipped=summary.skipped,
            errors=list(summary.errors),
            skip_reasons=dict(summary.skip_reasons),
            sheets=[SheetReportResponse(**sheet.to_dict()) for sheet in summary.sheets],
            events=[ChangeEventResponse.from_domain(event) for event in summary.events],
            regions_refreshed=list(summary.regions_refreshed),
        )


class ActivityFeedResponse(BaseModel):
    day: str
    count: int = Field(..., ge=0)
    totals_by_metric: dict[str, int] = Field(default_factory=dict)
    events: list[ChangeEventResponse] = Field(default_factory=list)


class RegionSummaryResponse(BaseModel):
    region: str
    total_schemes: int = Field(..., ge=0)
    fully_completed_schemes: int = Field(..., ge=0)
    partial_esr: int = Field(..., ge=0)
    total_villages: int = Field(..., ge=0)
    villages_integrated: int = Field(..., ge=0)
    functional_villages: int = Field(..., ge=0)
    partial_villages: int = Field(..., ge=0)
    non_functional_villages: int = Field(..., ge=0)
    fully_completed_villages: int = Field(..., ge=0)
    total_esr: int = Field(..., ge=0)
    esr_integrated: int = Field(..., ge=0)
    fully_completed_esr: int = Field(..., ge=0)
    balance_esr: int = Field(..., ge=0)
    flow_meters_connected: int = Field(..., ge=0)
    pressure_transmitters_connected: int = Field(..., ge=0)
    residual_chlorine_connected: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, summary: RegionSummary) -> RegionSummaryResponse:
        return cls(**summary.to_dict())
