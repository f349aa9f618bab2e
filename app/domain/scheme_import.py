"""
app/domain/scheme_import.py

Domain models used by the scheme report import flow.

A report arrives as one or more ``RawSheet`` grids. Rows stay opaque
``(header, value)`` pairs until the column mapping resolves them into a
``SchemeRecord`` candidate, which the reconciler then compares against the
store.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Sequence, Union

CellValue = Union[str, int, float, bool, datetime, None]

# ---------------------------------------------------------------------------
# Canonical field vocabulary
# ---------------------------------------------------------------------------

IDENTIFIER_FIELD = "scheme_id"
NAME_FIELD = "scheme_name"
REGION_FIELD = "region"
SERIAL_FIELD = "sr_no"
STATUS_FIELD = "status"
FUNCTIONAL_STATUS_FIELD = "functional_status"

TEXT_FIELDS: tuple[str, ...] = (
    "scheme_name",
    "region",
    "circle",
    "division",
    "sub_division",
    "block",
    "agency",
)

COUNT_FIELDS: tuple[str, ...] = (
    "total_villages",
    "villages_integrated",
    "functional_villages",
    "partial_villages",
    "non_functional_villages",
    "fully_completed_villages",
    "total_esr",
    "esr_integrated",
    "fully_completed_esr",
    "balance_esr",
    "flow_meters_connected",
    "pressure_transmitters_connected",
    "residual_chlorine_connected",
)

CANONICAL_FIELDS: tuple[str, ...] = (
    SERIAL_FIELD,
    IDENTIFIER_FIELD,
    *TEXT_FIELDS,
    *COUNT_FIELDS,
    STATUS_FIELD,
    FUNCTIONAL_STATUS_FIELD,
)


class MetricType:
    SCHEME = "scheme"
    VILLAGE = "village"
    ESR = "esr"
    FLOW_METER = "flow_meter"
    RCA = "rca"
    PRESSURE_TRANSMITTER = "pressure_transmitter"


# Count fields whose increases are reported on the activity feed.
TRACKED_METRICS: tuple[tuple[str, str], ...] = (
    ("villages_integrated", MetricType.VILLAGE),
    ("esr_integrated", MetricType.ESR),
    ("flow_meters_connected", MetricType.FLOW_METER),
    ("residual_chlorine_connected", MetricType.RCA),
    ("pressure_transmitters_connected", MetricType.PRESSURE_TRANSMITTER),
)


class SkipReason:
    NO_IDENTIFIER = "no_identifier"
    HEADER_ROW = "header_row"
    DUPLICATE_IN_BATCH = "duplicate_in_batch"


class SheetSkipReason:
    EMPTY_SHEET = "empty_sheet"
    NO_REGION = "no_region"
    NO_IDENTIFIER_COLUMN = "no_identifier_column"


def record_key(scheme_id: str, block: str | None = None) -> str:
    """
    Build the store key for one scheme, qualified by block when present.
    """

    if block:
        return f"{scheme_id}::{block}"
    return scheme_id


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Input grid
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawSheet:
    """
    One named 2-D grid of decoded cell values.
    """

    name: str
    rows: tuple[tuple[CellValue, ...], ...]

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[CellValue]]) -> RawSheet:
        return cls(name=name, rows=tuple(tuple(row) for row in rows))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    def row(self, index: int) -> tuple[CellValue, ...]:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return ()


@dataclass(frozen=True)
class SheetRow:
    """
    One data row as ordered ``(raw header, raw value)`` pairs.

    ``row_number`` is the 1-based position in the source sheet so error
    messages point at the line a user sees in their spreadsheet.
    """

    row_number: int
    cells: tuple[tuple[str, CellValue], ...]

    def value_at(self, column_index: int) -> CellValue:
        if 0 <= column_index < len(self.cells):
            return self.cells[column_index][1]
        return None

    def is_blank(self) -> bool:
        return all(value is None or str(value).strip() == "" for _, value in self.cells)

    def raw_content(self) -> str:
        parts = [
            f"{header}={value!r}"
            for header, value in self.cells
            if value is not None and str(value).strip() != ""
        ]
        return ", ".join(parts)


# ---------------------------------------------------------------------------
# Canonical records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchemeRecord:
    """
    Normalized, schema-conformant representation of one scheme.
    """

    scheme_id: str
    scheme_name: str | None
    region: str
    sr_no: int | None = None
    circle: str | None = None
    division: str | None = None
    sub_division: str | None = None
    block: str | None = None
    agency: str | None = None
    total_villages: int = 0
    villages_integrated: int = 0
    functional_villages: int = 0
    partial_villages: int = 0
    non_functional_villages: int = 0
    fully_completed_villages: int = 0
    total_esr: int = 0
    esr_integrated: int = 0
    fully_completed_esr: int = 0
    balance_esr: int = 0
    flow_meters_connected: int = 0
    pressure_transmitters_connected: int = 0
    residual_chlorine_connected: int = 0
    status: str | None = None
    functional_status: str | None = None

    @property
    def key(self) -> str:
        return record_key(self.scheme_id, self.block)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChangeEvent:
    """
    Append-only notice that a countable metric increased or a scheme appeared.
    """

    metric_type: str
    delta_count: int
    region: str
    scheme_id: str | None = None
    scheme_name: str | None = None
    status: str = "new"
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric_type": self.metric_type,
            "delta_count": self.delta_count,
            "status": self.status,
            "region": self.region,
            "scheme_id": self.scheme_id,
            "scheme_name": self.scheme_name,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class RegionSummary:
    """
    Rollup of every scheme currently tagged with one region.
    """

    region: str
    total_schemes: int = 0
    fully_completed_schemes: int = 0
    partial_esr: int = 0
    total_villages: int = 0
    villages_integrated: int = 0
    functional_villages: int = 0
    partial_villages: int = 0
    non_functional_villages: int = 0
    fully_completed_villages: int = 0
    total_esr: int = 0
    esr_integrated: int = 0
    fully_completed_esr: int = 0
    balance_esr: int = 0
    flow_meters_connected: int = 0
    pressure_transmitters_connected: int = 0
    residual_chlorine_connected: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Row outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Accepted:
    row_number: int
    record: SchemeRecord
    created: bool
    events: tuple[ChangeEvent, ...] = ()


@dataclass(frozen=True)
class Skipped:
    row_number: int
    reason: str
    detail: str | None = None


@dataclass(frozen=True)
class Failed:
    row_number: int
    error: str
    raw: str


RowOutcome = Union[Accepted, Skipped, Failed]


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass
class SheetReport:
    """
    Per-sheet processing report.
    """

    sheet_name: str
    region: str | None = None
    header_row_index: int | None = None
    skip_reason: str | None = None
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def processed(self) -> bool:
        return self.skip_reason is None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["processed"] = self.processed
        return payload


@dataclass
class ImportSummary:
    """
    End-of-run import summary handed to the HTTP layer.
    """

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    skip_reasons: dict[str, int] = field(default_factory=dict)
    sheets: list[SheetReport] = field(default_factory=list)
    events: list[ChangeEvent] = field(default_factory=list)
    regions_refreshed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "skip_reasons": dict(self.skip_reasons),
            "sheets": [sheet.to_dict() for sheet in self.sheets],
            "events": [event.to_dict() for event in self.events],
            "regions_refreshed": list(self.regions_refreshed),
        }
