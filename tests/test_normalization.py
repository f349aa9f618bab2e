"""
tests/test_normalization.py

Status vocabulary, value coercion, and region resolution.
"""

from __future__ import annotations

import pytest

from app.normalization.region_resolver import RegionResolver, default_agency
from app.normalization.status_normalizer import (
    FULLY_COMPLETED,
    IN_PROGRESS,
    NON_FUNCTIONAL,
    NOT_CONNECTED,
    is_fully_completed,
    normalize_functional_status,
    normalize_status,
)
from app.normalization.value_coercer import ValueCoercer


# ---------------------------------------------------------------------------
# Status normalization
# ---------------------------------------------------------------------------


class TestStatusNormalizer:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("completed", FULLY_COMPLETED),
            ("  Fully   Completed ", FULLY_COMPLETED),
            ("Scheme completed on 12 Oct", FULLY_COMPLETED),
            ("in-progress", IN_PROGRESS),
            ("Partially completed", IN_PROGRESS),
            ("Incomplete", IN_PROGRESS),
            ("not connected", NOT_CONNECTED),
            ("NON-FUNCTIONAL", NON_FUNCTIONAL),
            ("awaiting survey", "Awaiting Survey"),
        ],
    )
    def test_normalize_status(self, raw: str, expected: str) -> None:
        assert normalize_status(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["completed", "in progress", "NOT-CONNECTED", "awaiting  survey", "Non Functional", "partial"],
    )
    def test_normalize_status_is_idempotent(self, raw: str) -> None:
        once = normalize_status(raw)
        assert normalize_status(once) == once

    def test_blank_status_is_none(self) -> None:
        assert normalize_status(None) is None
        assert normalize_status("   ") is None

    def test_functional_status_vocabulary(self) -> None:
        assert normalize_functional_status("non functional") == NON_FUNCTIONAL
        assert normalize_functional_status("Partially Functional") == "Partial"
        assert normalize_functional_status("functional") == "Functional"

    def test_completion_predicate(self) -> None:
        assert is_fully_completed(FULLY_COMPLETED)
        assert is_fully_completed("Completed Late")
        assert not is_fully_completed(IN_PROGRESS)
        assert not is_fully_completed(None)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


@pytest.fixture()
def coercer() -> ValueCoercer:
    return ValueCoercer()


class TestValueCoercer:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (12, 12),
            (12.5, 13),
            ("7", 7),
            (" 1,204 ", 1204),
            ("3 nos", 3),
            ("N/A", 0),
            ("-", 0),
            ("", 0),
            (None, 0),
            (-4, 0),
            (True, 0),
        ],
    )
    def test_coerce_count(self, coercer: ValueCoercer, raw: object, expected: int) -> None:
        assert coercer.coerce_count(raw) == expected

    def test_serial_placeholder_becomes_none(self, coercer: ValueCoercer) -> None:
        assert coercer.coerce_serial("N/A") is None
        assert coercer.coerce_serial(None) is None
        assert coercer.coerce_serial(4.0) == 4

    def test_identifier_stays_text(self, coercer: ValueCoercer) -> None:
        assert coercer.coerce_identifier(2010045.0) == "2010045"
        assert coercer.coerce_identifier(" 00123 ") == "00123"
        assert coercer.coerce_identifier("  ") is None
        assert coercer.coerce_identifier(None) is None

    def test_coerce_row_fills_every_canonical_field(self, coercer: ValueCoercer) -> None:
        values = coercer.coerce_row({"scheme_id": 101.0, "status": "complete", "total_esr": "4"})

        assert values["scheme_id"] == "101"
        assert values["status"] == FULLY_COMPLETED
        assert values["total_esr"] == 4
        assert values["flow_meters_connected"] == 0
        assert values["block"] is None
        assert values["sr_no"] is None

    def test_text_collapses_whitespace(self, coercer: ValueCoercer) -> None:
        assert coercer.coerce_text("  Ozar   RR  WSS ") == "Ozar RR WSS"
        assert coercer.coerce_text(3.0) == "3"


# ---------------------------------------------------------------------------
# Region resolution
# ---------------------------------------------------------------------------


class TestRegionResolver:
    @pytest.mark.parametrize(
        "sheet_name, expected",
        [
            ("Region - Nashik Data", "Nashik"),
            ("AMRAVATI", "Amravati"),
            ("pune_region", "Pune"),
            ("CS Region", "Chhatrapati Sambhajinagar"),
            ("Chhatrapati Sambhajinagar", "Chhatrapati Sambhajinagar"),
        ],
    )
    def test_resolves_from_sheet_name(self, sheet_name: str, expected: str) -> None:
        assert RegionResolver().resolve(sheet_name) == expected

    def test_sheet_name_wins_over_region_column(self) -> None:
        assert RegionResolver().resolve("Nagpur", "Konkan") == "Nagpur"

    def test_falls_back_to_region_column(self) -> None:
        resolver = RegionResolver()

        assert resolver.resolve("Sheet1", "konkan division") == "Konkan"
        assert resolver.resolve("Sheet1", "  Latur  ") == "Latur"

    def test_unresolvable_sheet_returns_none(self) -> None:
        resolver = RegionResolver()

        assert resolver.resolve("Summary") is None
        assert resolver.resolve("Summary", "   ") is None

    def test_word_boundaries_prevent_false_matches(self) -> None:
        assert RegionResolver().resolve("Statistics") is None

    def test_default_agency(self) -> None:
        assert default_agency("Nashik") == "M/s Ceinsys"
        assert default_agency("Latur") is None
        assert default_agency(None) is None
