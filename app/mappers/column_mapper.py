"""
app/mappers/column_mapper.py

Column mapping from scheme report headers to canonical fields.

Every canonical field owns an ordered alias list. A header is matched in
three tiers: exact text, then case-insensitive text with spacing and
punctuation ignored ("Non- Functional" equals "Non-Functional"), then
whole-word containment. Tiers are resolved best first and left to right; a
column whose field is already taken is offered its next candidate. Columns
with no pattern candidate at all are then offered to the standard template
layout by position.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Sequence

from app.domain.scheme_import import (
    CANONICAL_FIELDS,
    IDENTIFIER_FIELD,
    CellValue,
    RawSheet,
    SheetRow,
)
from app.mappers.header_detector import is_filled
from app.validators.mapping_validator import MappingValidator

STRATEGY_EXACT = "exact"
STRATEGY_CASE_INSENSITIVE = "case_insensitive"
STRATEGY_SUBSTRING = "substring"
STRATEGY_POSITIONAL = "positional"

# Order matters for the substring tier: narrower phrases sit above the broad
# ones they contain ("Non Functional Village" before "Functional Village",
# "Sub Division" before "Division", "Functional Status" before "Status").
DEFAULT_FIELD_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("sr_no", ("Sr No.", "Sr. No.", "Sr No", "Sr.No", "S.No", "S. No.", "Serial No")),
    (
        "scheme_id",
        (
            "Scheme ID",
            "Scheme Id",
            "scheme_id",
            "SchemeId",
            "SCHEME ID",
            "Scheme_Id",
            "Scheme Code",
            "SchemeID",
        ),
    ),
    ("scheme_name", ("Scheme Name", "SchemeName", "scheme_name", "Name of Scheme")),
    (
        "non_functional_villages",
        (
            "No. of Non- Functional Village",
            "No. of Non-Functional Village",
            "Non-Functional Villages",
            "Non Functional Villages",
            "Non-Functional Village",
            "Non Functional Village",
        ),
    ),
    ("partial_villages", ("No. of Partial Village", "Partial Villages", "Partial Village")),
    (
        "functional_villages",
        ("No. of Functional Village", "Functional Villages", "Functional Village"),
    ),
    (
        "fully_completed_villages",
        (
            "No. of Fully Completed Village",
            "Fully completed Villages",
            "Fully Completed Villages",
            "Completed Villages",
        ),
    ),
    ("villages_integrated", ("Total Villages Integrated", "Villages Integrated")),
    (
        "total_villages",
        ("Number of Village", "No. of Village", "Total Villages", "Number of Villages", "Villages"),
    ),
    (
        "fully_completed_esr",
        ("No. Fully Completed ESR", "No. of Fully Completed ESR", "Fully Completed ESR", "ESR Fully Completed"),
    ),
    ("balance_esr", ("Balance to Complete ESR", "Balance ESR", "ESR Balance")),
    (
        "esr_integrated",
        ("Total ESR Integrated", "ESR Integrated", "Total Number of ESR Integrated", "ESR Integrated on IoT"),
    ),
    ("total_esr", ("Total Number of ESR", "Total ESR", "Number of ESR", "ESR Total")),
    (
        "flow_meters_connected",
        (
            "Flow Meters Connected",
            " Flow Meters Conneted",
            "Flow Meter Connected",
            "Flow Meters",
            "FM Connected",
        ),
    ),
    (
        "pressure_transmitters_connected",
        (
            "Pressure Transmitter Connected",
            "Pressure Transmitters Connected",
            "Pressure Transmitter Conneted",
            "PT Connected",
            "Pressure Transmitters",
            "Pressure Transmitter",
        ),
    ),
    (
        "residual_chlorine_connected",
        (
            "Residual Chlorine Analyzer Connected",
            "Residual Chlorine Connected",
            "Residual Chlorine Conneted",
            "RCA Connected",
            "Residual Chlorine Analyzers",
            "Residual Chlorine",
        ),
    ),
    ("functional_status", ("Scheme Functional Status", "Functional Status")),
    ("status", ("Fully completion Scheme Status", "Scheme Status", "Scheme Completion Status", "Status")),
    ("agency", ("Implementing Agency", "Agency")),
    ("sub_division", ("Sub Division", "Sub-Division", "SubDivision", "Sub Divison")),
    ("division", ("Division",)),
    ("circle", ("Circle",)),
    ("block", ("Block", "Taluka")),
    ("region", ("Region", "RegionName", "Region Name")),
)

# Standard template layout (0-based column index -> field).
POSITIONAL_FALLBACK: dict[int, str] = {
    0: "sr_no",
    1: "region",
    2: "circle",
    3: "division",
    4: "sub_division",
    5: "block",
    6: "scheme_id",
    7: "scheme_name",
    8: "total_villages",
    9: "functional_villages",
    10: "partial_villages",
    11: "non_functional_villages",
    12: "fully_completed_villages",
    13: "total_esr",
    14: "functional_status",
    15: "fully_completed_esr",
    16: "balance_esr",
    17: "flow_meters_connected",
    18: "pressure_transmitters_connected",
    19: "residual_chlorine_connected",
    20: "status",
}

TEMPLATE_IDENTIFIER_COLUMN = 6


def normalize_header(header: str) -> str:
    """
    Compact form used for equality: lower case, letters and digits only.
    """

    return "".join(ch for ch in header.casefold() if ch.isalnum())


def fold_header(header: str) -> str:
    """
    Word form used for containment: punctuation becomes a word break.
    """

    return " ".join("".join(ch if ch.isalnum() else " " for ch in header.casefold()).split())


def header_text(value: CellValue, column_index: int) -> str:
    """
    Render a header cell as text; blank cells get a synthetic column name.
    """

    if not is_filled(value):
        return f"column_{column_index + 1}"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


@dataclass(frozen=True)
class ColumnMapping:
    """
    Resolved mapping between sheet header text and canonical fields.
    """

    headers: tuple[str, ...]
    header_to_field: dict[str, str]
    field_to_column: dict[str, int]
    match_strategies: dict[str, str]

    def column_for(self, field_name: str) -> int | None:
        return self.field_to_column.get(field_name)


class ColumnMapper:
    """
    Maps scheme report columns to canonical schema fields.
    """

    def __init__(
        self,
        *,
        patterns: Sequence[tuple[str, Sequence[str]]] | None = None,
        positional_fallback: Mapping[int, str] | None = None,
        validator: MappingValidator | None = None,
    ) -> None:
        self._patterns: tuple[tuple[str, tuple[str, ...]], ...] = tuple(
            (field_name, tuple(aliases))
            for field_name, aliases in (patterns if patterns is not None else DEFAULT_FIELD_PATTERNS)
        )
        self._positional = dict(
            positional_fallback if positional_fallback is not None else POSITIONAL_FALLBACK
        )
        self._validator = validator or MappingValidator(canonical_fields=CANONICAL_FIELDS)

    @property
    def patterns(self) -> tuple[tuple[str, tuple[str, ...]], ...]:
        return self._patterns

    def candidates(self, header: str) -> list[tuple[str, str]]:
        """
        Return every ``(field, strategy)`` a header could take, best tier first.

        A field appears once, under the best tier it reaches.
        """

        stripped = header.strip()
        if not stripped:
            return []
        compact = normalize_header(stripped)
        words = f" {fold_header(stripped)} "

        found: list[tuple[str, str]] = []
        seen: set[str] = set()

        def _offer(field_name: str, strategy: str) -> None:
            if field_name not in seen:
                seen.add(field_name)
                found.append((field_name, strategy))

        for field_name, aliases in self._patterns:
            if stripped in aliases:
                _offer(field_name, STRATEGY_EXACT)
        for field_name, aliases in self._patterns:
            if any(normalize_header(alias) == compact for alias in aliases):
                _offer(field_name, STRATEGY_CASE_INSENSITIVE)
        for field_name, aliases in self._patterns:
            for alias in aliases:
                folded_alias = fold_header(alias)
                if folded_alias and f" {folded_alias} " in words:
                    _offer(field_name, STRATEGY_SUBSTRING)
                    break
        return found

    def match_header(self, header: str) -> tuple[str, str] | None:
        """
        Return the best ``(field, strategy)`` for one header, or None.
        """

        found = self.candidates(header)
        return found[0] if found else None

    def build_mapping(self, header_cells: Sequence[CellValue]) -> ColumnMapping:
        """
        Resolve header text to canonical fields for one sheet.

        Raises ``SchemaMappingError`` when no identifier-capable field is
        reachable, which the import service turns into a skipped sheet.
        """

        headers = tuple(header_text(value, index) for index, value in enumerate(header_cells))
        header_to_field: dict[str, str] = {}
        field_to_column: dict[str, int] = {}
        strategies: dict[str, str] = {}
        column_field: dict[int, str] = {}

        options: dict[int, list[tuple[str, str]]] = {}
        for index, value in enumerate(header_cells):
            if is_filled(value):
                found = self.candidates(headers[index])
                if found:
                    options[index] = found

        for tier in (STRATEGY_EXACT, STRATEGY_CASE_INSENSITIVE, STRATEGY_SUBSTRING):
            for index, found in options.items():
                if index in column_field:
                    continue
                for field_name, strategy in found:
                    if strategy == tier and field_name not in field_to_column:
                        field_to_column[field_name] = index
                        strategies[field_name] = strategy
                        column_field[index] = field_name
                        break

        # A column that lost every candidate keeps its best label for reporting
        # but is not reused positionally; its header names another field.
        for index, found in options.items():
            header_to_field.setdefault(headers[index], column_field.get(index, found[0][0]))

        for index in range(len(headers)):
            if index in options:
                continue
            field_name = self._positional.get(index)
            if field_name is None or field_name in field_to_column:
                continue
            header_to_field.setdefault(headers[index], field_name)
            field_to_column[field_name] = index
            strategies[field_name] = STRATEGY_POSITIONAL

        mapping = ColumnMapping(
            headers=headers,
            header_to_field=header_to_field,
            field_to_column=field_to_column,
            match_strategies=strategies,
        )
        self._validator.validate(mapping=field_to_column, source_headers=headers)
        return mapping

    def iter_rows(
        self,
        sheet: RawSheet,
        *,
        header_row_index: int,
        mapping: ColumnMapping,
    ) -> Iterator[SheetRow]:
        """
        Yield every row below the header as ``(header, value)`` pairs.
        """

        for row_index in range(header_row_index + 1, sheet.row_count):
            raw = sheet.row(row_index)
            width = max(len(mapping.headers), len(raw))
            cells = tuple(
                (
                    mapping.headers[column] if column < len(mapping.headers) else f"column_{column + 1}",
                    raw[column] if column < len(raw) else None,
                )
                for column in range(width)
            )
            yield SheetRow(row_number=row_index + 1, cells=cells)

    def map_row(self, row: SheetRow, mapping: ColumnMapping) -> dict[str, CellValue]:
        """
        Convert one sheet row into canonical raw fields.

        A blank identifier is recovered from the template identifier column
        when that column is not claimed by a different field.
        """

        mapped: dict[str, CellValue] = {
            field_name: row.value_at(column)
            for field_name, column in mapping.field_to_column.items()
        }

        if not is_filled(mapped.get(IDENTIFIER_FIELD)):
            claimed_by = {column: name for name, column in mapping.field_to_column.items()}
            owner = claimed_by.get(TEMPLATE_IDENTIFIER_COLUMN)
            if owner in (None, IDENTIFIER_FIELD):
                recovered = row.value_at(TEMPLATE_IDENTIFIER_COLUMN)
                if is_filled(recovered):
                    mapped[IDENTIFIER_FIELD] = recovered
        return mapped
