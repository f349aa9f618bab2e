"""
app/mappers/header_detector.py

Locates the header row inside a raw sheet grid.
"""

from __future__ import annotations

from typing import Sequence

from app.domain.scheme_import import CellValue, RawSheet

DEFAULT_SCAN_DEPTH = 20


def is_filled(value: CellValue) -> bool:
    return value is not None and str(value).strip() != ""


def count_filled_cells(row: Sequence[CellValue]) -> int:
    return sum(1 for value in row if is_filled(value))


def detect_header_row(sheet: RawSheet, *, max_scan_rows: int = DEFAULT_SCAN_DEPTH) -> int:
    """
    Return the index of the densest row within the first ``max_scan_rows`` rows.

    Reports often carry a title block and merged banner rows above the real
    header, so the row with the most non-empty cells wins. Ties go to the
    earliest row. An empty sheet yields 0.
    """

    depth = max(1, max_scan_rows)
    best_index = 0
    best_count = -1
    for index, row in enumerate(sheet.rows[:depth]):
        filled = count_filled_cells(row)
        if filled > best_count:
            best_index = index
            best_count = filled
    return best_index
