"""
app/normalization/region_resolver.py

Determines the region a sheet belongs to.
"""

from __future__ import annotations

import logging
import re
from typing import Pattern, Sequence

from app.domain.scheme_import import CellValue

logger = logging.getLogger(__name__)

CHHATRAPATI_SAMBHAJINAGAR = "Chhatrapati Sambhajinagar"

DEFAULT_REGION_PATTERNS: tuple[tuple[Pattern[str], str], ...] = (
    (re.compile(r"\bamravati\b", re.IGNORECASE), "Amravati"),
    (re.compile(r"\bnashik\b", re.IGNORECASE), "Nashik"),
    (re.compile(r"\bnagpur\b", re.IGNORECASE), "Nagpur"),
    (re.compile(r"\bpune\b", re.IGNORECASE), "Pune"),
    (re.compile(r"\bkonkan\b", re.IGNORECASE), "Konkan"),
    (re.compile(r"\bcs\b", re.IGNORECASE), CHHATRAPATI_SAMBHAJINAGAR),
    (re.compile(r"\bsambhajinagar\b", re.IGNORECASE), CHHATRAPATI_SAMBHAJINAGAR),
    (re.compile(r"\bchhatrapati\b", re.IGNORECASE), CHHATRAPATI_SAMBHAJINAGAR),
)

REGION_AGENCIES: dict[str, str] = {
    "Amravati": "M/s Ceinsys",
    "Nashik": "M/s Ceinsys",
    "Nagpur": "M/s Rite Water",
    CHHATRAPATI_SAMBHAJINAGAR: "M/s Rite Water",
    "Konkan": "M/s Indo/Chetas",
    "Pune": "M/s Indo/Chetas",
}


def default_agency(region: str | None) -> str | None:
    if not region:
        return None
    return REGION_AGENCIES.get(region)


class RegionResolver:
    """
    Resolve a region from the sheet name, then from a region column value.
    """

    def __init__(self, patterns: Sequence[tuple[Pattern[str], str]] | None = None) -> None:
        self._patterns = tuple(patterns if patterns is not None else DEFAULT_REGION_PATTERNS)

    def match(self, text: str | None) -> str | None:
        """
        Return the canonical region named in ``text``, if any pattern matches.
        """

        if not text:
            return None
        # Underscores are word characters for \b; treat them as separators.
        candidate = text.replace("_", " ")
        for pattern, region in self._patterns:
            if pattern.search(candidate):
                return region
        return None

    def resolve(self, sheet_name: str, region_cell: CellValue = None) -> str | None:
        """
        Return the sheet's region or None when the sheet must be skipped.
        """

        from_name = self.match(sheet_name)
        if from_name is not None:
            return from_name

        if region_cell is None:
            return None
        cell_text = " ".join(str(region_cell).split())
        if not cell_text:
            return None

        from_column = self.match(cell_text)
        if from_column is None:
            logger.debug("Region column value %r matched no known region; using it verbatim.", cell_text)
            return cell_text
        return from_column
