"""
app/services/aggregation_service.py

Region summary rollups for scheme records.

Recompute design
----------------
A region summary is always rebuilt from every record currently tagged with
that region and then written over the previous row. It is never derived by
adding a batch's deltas to the last summary: a record corrected downward in
a later import would otherwise be counted twice.

Region scope
------------
``recompute_all`` covers every region known to the store (regions with
records plus regions that already own a summary row). A region whose last
record moved away therefore ends up with an all-zero summary instead of a
stale one.
"""

from __future__ import annotations

import logging
from typing import Final, Iterable, Mapping

from app.domain.scheme_import import COUNT_FIELDS, RegionSummary, SchemeRecord
from app.logging_utils import log_event
from app.normalization.status_normalizer import is_fully_completed
from app.repositories.scheme_store import SchemeStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure rollup
# ---------------------------------------------------------------------------

SUMMED_FIELDS: Final[tuple[str, ...]] = COUNT_FIELDS
"""Count fields copied into the summary as plain sums."""


def summarize_region(region: str, records: Iterable[SchemeRecord]) -> RegionSummary:
    """
    Build one region summary from ground-truth records.

    Args:
        region:  Region the summary belongs to. Records tagged with another
                 region are ignored.
        records: Current records; any iterable is consumed once.

    Returns:
        A fully populated ``RegionSummary``. ``partial_esr`` is the sum of
        ``max(0, esr_integrated - fully_completed_esr)`` per scheme so a
        single inconsistent row cannot pull the total negative.
    """

    totals: dict[str, int] = {name: 0 for name in SUMMED_FIELDS}
    total_schemes = 0
    fully_completed = 0
    partial_esr = 0

    for record in records:
        if record.region != region:
            continue
        total_schemes += 1
        if is_fully_completed(record.status):
            fully_completed += 1
        partial_esr += max(0, record.esr_integrated - record.fully_completed_esr)
        for name in SUMMED_FIELDS:
            totals[name] += getattr(record, name)

    return RegionSummary(
        region=region,
        total_schemes=total_schemes,
        fully_completed_schemes=fully_completed,
        partial_esr=partial_esr,
        **totals,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class AggregationEngine:
    """
    Recomputes and replaces region summaries through the store contract.
    """

    def __init__(self, store: SchemeStore) -> None:
        self._store = store

    def recompute_region(self, region: str) -> RegionSummary:
        """
        Rebuild and replace the summary for a single region.
        """

        summary = summarize_region(region, self._store.list_by_region(region))
        self._store.replace_summary(region, summary)
        logger.debug(
            "Replaced summary for region=%s schemes=%d completed=%d",
            region,
            summary.total_schemes,
            summary.fully_completed_schemes,
        )
        return summary

    def recompute_all(self) -> Mapping[str, RegionSummary]:
        """
        Rebuild every region known to the store.

        Returns:
            Region name -> freshly written summary, in sorted region order.
        """

        summaries: dict[str, RegionSummary] = {}
        for region in sorted(set(self._store.list_regions())):
            summaries[region] = self.recompute_region(region)

        log_event(
            logger,
            logging.INFO,
            "region_summaries_replaced",
            regions=len(summaries),
            schemes=sum(summary.total_schemes for summary in summaries.values()),
        )
        return summaries
