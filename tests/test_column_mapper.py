from __future__ import annotations

import unittest

from app.domain.scheme_import import RawSheet, SheetRow
from app.mappers.column_mapper import (
    STRATEGY_CASE_INSENSITIVE,
    STRATEGY_EXACT,
    STRATEGY_POSITIONAL,
    STRATEGY_SUBSTRING,
    ColumnMapper,
    fold_header,
    normalize_header,
)
from app.validators.mapping_validator import SchemaMappingError


class TestColumnMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = ColumnMapper()

    def test_exact_headers_map_to_canonical_fields(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Sr No", "Scheme ID", "Scheme Name", "Total ESR", "Flow Meters Connected", "Scheme Status"]
        )

        self.assertEqual(mapping.column_for("sr_no"), 0)
        self.assertEqual(mapping.column_for("scheme_id"), 1)
        self.assertEqual(mapping.column_for("scheme_name"), 2)
        self.assertEqual(mapping.column_for("total_esr"), 3)
        self.assertEqual(mapping.column_for("flow_meters_connected"), 4)
        self.assertEqual(mapping.column_for("status"), 5)
        self.assertEqual(mapping.match_strategies["scheme_id"], STRATEGY_EXACT)

    def test_case_and_whitespace_differences_use_case_insensitive_tier(self) -> None:
        mapping = self.mapper.build_mapping(["scheme id", "SCHEME   NAME"])

        self.assertEqual(mapping.column_for("scheme_id"), 0)
        self.assertEqual(mapping.column_for("scheme_name"), 1)
        self.assertEqual(mapping.match_strategies["scheme_name"], STRATEGY_CASE_INSENSITIVE)

    def test_substring_tier_prefers_narrower_phrases(self) -> None:
        mapping = self.mapper.build_mapping(
            [
                "Scheme ID",
                "No. of Non- Functional Village (as on date)",
                "Functional Village Count",
                "Scheme Functional Status (Oct)",
            ]
        )

        self.assertEqual(mapping.column_for("non_functional_villages"), 1)
        self.assertEqual(mapping.column_for("functional_villages"), 2)
        self.assertEqual(mapping.column_for("functional_status"), 3)
        self.assertEqual(mapping.match_strategies["functional_villages"], STRATEGY_SUBSTRING)

    def test_better_tier_wins_when_two_columns_claim_one_field(self) -> None:
        mapping = self.mapper.build_mapping(["Scheme ID", "Name of Scheme (Marathi)", "Scheme Name"])

        self.assertEqual(mapping.column_for("scheme_name"), 2)
        self.assertEqual(mapping.match_strategies["scheme_name"], STRATEGY_EXACT)
        self.assertEqual(mapping.header_to_field["Name of Scheme (Marathi)"], "scheme_name")

    def test_spaced_hyphen_spelling_keeps_non_functional_villages(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Scheme ID", "Scheme Name", "Functional Villages", "Non- Functional Villages"]
        )

        self.assertEqual(mapping.column_for("functional_villages"), 2)
        self.assertEqual(mapping.column_for("non_functional_villages"), 3)
        self.assertEqual(mapping.header_to_field["Non- Functional Villages"], "non_functional_villages")
        self.assertEqual(mapping.match_strategies["non_functional_villages"], STRATEGY_CASE_INSENSITIVE)

    def test_column_that_loses_its_field_takes_its_next_candidate(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Scheme ID", "Scheme Name", "Villages Integrated", "Villages Integrated (Total Villages)"]
        )

        self.assertEqual(mapping.column_for("villages_integrated"), 2)
        self.assertEqual(mapping.column_for("total_villages"), 3)
        self.assertEqual(mapping.match_strategies["total_villages"], STRATEGY_SUBSTRING)

    def test_substring_tier_matches_whole_words_only(self) -> None:
        mapping = self.mapper.build_mapping(["Scheme ID", "Scheme Name", "Status Notes"])

        self.assertIsNone(mapping.column_for("sr_no"))
        self.assertEqual(mapping.column_for("status"), 2)

    def test_header_forms(self) -> None:
        self.assertEqual(normalize_header(" No. of Non- Functional Village "), "noofnonfunctionalvillage")
        self.assertEqual(fold_header("Sub-Division (Pune)"), "sub division pune")

    def test_positional_fallback_fills_unmatched_template_columns(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Sr No", "Region", "Circle", "Division", "Sub Division", "Block", None, "Scheme Name"]
        )

        self.assertEqual(mapping.column_for("scheme_id"), 6)
        self.assertEqual(mapping.match_strategies["scheme_id"], STRATEGY_POSITIONAL)
        self.assertEqual(mapping.headers[6], "column_7")
        self.assertEqual(mapping.column_for("sub_division"), 4)
        self.assertEqual(mapping.column_for("division"), 3)

    def test_positional_fallback_never_overrides_a_claimed_field(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Scheme ID", "Scheme Name", "Circle", "Division", "Block", "Taluka Code", "Remarks"]
        )

        self.assertEqual(mapping.column_for("scheme_id"), 0)
        self.assertNotIn("Remarks", mapping.header_to_field)

    def test_mapping_is_deterministic(self) -> None:
        headers = ["Sr. No.", "Scheme Id", "Name of Scheme", "Total ESR", "ESR Integrated", "Status"]

        first = self.mapper.build_mapping(headers)
        second = ColumnMapper().build_mapping(list(headers))

        self.assertEqual(first, second)

    def test_missing_identifier_columns_raise_structured_error(self) -> None:
        with self.assertRaises(SchemaMappingError) as ctx:
            self.mapper.build_mapping(["Remarks", "Total ESR"])

        self.assertIn("identifier_unmapped", ctx.exception.codes)
        payload = ctx.exception.to_dict()
        self.assertEqual(payload["errors"][0]["code"], "identifier_unmapped")

    def test_map_row_recovers_identifier_from_unclaimed_template_column(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Scheme ID", "Scheme Name", "Total ESR", "Circle", "Division", "Block", "Remarks"]
        )
        row = SheetRow(
            row_number=5,
            cells=tuple(zip(mapping.headers, (None, "Ozar RR", 3, "Nashik", "Niphad", "Niphad", "555"))),
        )

        mapped = self.mapper.map_row(row, mapping)

        self.assertEqual(mapped["scheme_id"], "555")
        self.assertEqual(mapped["scheme_name"], "Ozar RR")

    def test_map_row_does_not_recover_from_column_owned_by_another_field(self) -> None:
        mapping = self.mapper.build_mapping(
            ["Scheme ID", "Scheme Name", "Circle", "Division", "Sub Division", "Block", "Total ESR"]
        )
        row = SheetRow(
            row_number=3,
            cells=tuple(zip(mapping.headers, (None, "Ozar RR", None, None, None, None, "7"))),
        )

        mapped = self.mapper.map_row(row, mapping)

        self.assertIsNone(mapped["scheme_id"])
        self.assertEqual(mapped["total_esr"], "7")

    def test_iter_rows_pads_and_numbers_rows_from_one(self) -> None:
        sheet = RawSheet.from_rows(
            "Pune",
            [
                ["Report"],
                ["Scheme ID", "Scheme Name", "Total ESR"],
                ["101"],
            ],
        )
        mapping = self.mapper.build_mapping(sheet.row(1))

        rows = list(self.mapper.iter_rows(sheet, header_row_index=1, mapping=mapping))

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].row_number, 3)
        self.assertEqual(rows[0].cells[2], ("Total ESR", None))


if __name__ == "__main__":
    unittest.main()
