from __future__ import annotations

from app.domain.scheme_import import RegionSummary, SchemeRecord
from app.services.aggregation_service import AggregationEngine, summarize_region

from conftest import InMemorySchemeStore


def _record(scheme_id: str, region: str = "Nashik", **counts: object) -> SchemeRecord:
    return SchemeRecord(scheme_id=scheme_id, scheme_name=f"Scheme {scheme_id}", region=region, **counts)


class TestSummarizeRegion:
    def test_sums_counts_and_counts_completed_schemes(self) -> None:
        records = [
            _record("1", total_esr=4, esr_integrated=3, fully_completed_esr=1, status="Fully Completed"),
            _record("2", total_esr=2, esr_integrated=2, fully_completed_esr=2, status="In Progress"),
            _record("3", total_esr=1, flow_meters_connected=5, status=None),
        ]

        summary = summarize_region("Nashik", records)

        assert summary.total_schemes == 3
        assert summary.fully_completed_schemes == 1
        assert summary.total_esr == 7
        assert summary.esr_integrated == 5
        assert summary.partial_esr == 2
        assert summary.flow_meters_connected == 5

    def test_partial_esr_never_goes_negative_per_scheme(self) -> None:
        summary = summarize_region(
            "Nashik",
            [
                _record("1", esr_integrated=1, fully_completed_esr=4),
                _record("2", esr_integrated=3, fully_completed_esr=1),
            ],
        )

        assert summary.partial_esr == 2

    def test_records_of_other_regions_are_ignored(self) -> None:
        summary = summarize_region("Pune", [_record("1"), _record("2", region="Pune", total_villages=6)])

        assert summary.total_schemes == 1
        assert summary.total_villages == 6

    def test_empty_region_is_all_zero(self) -> None:
        assert summarize_region("Konkan", []) == RegionSummary(region="Konkan")


class TestAggregationEngine:
    def test_recompute_replaces_instead_of_accumulating(self) -> None:
        store = InMemorySchemeStore([_record("1", flow_meters_connected=7)])
        engine = AggregationEngine(store)
        engine.recompute_all()

        store.records["1"] = _record("1", flow_meters_connected=3)
        engine.recompute_all()

        assert store.summaries["Nashik"].flow_meters_connected == 3

    def test_region_without_records_is_zeroed(self) -> None:
        store = InMemorySchemeStore([_record("1", region="Pune", total_esr=2)])
        engine = AggregationEngine(store)
        engine.recompute_all()

        store.records["1"] = _record("1", region="Nashik", total_esr=2)
        refreshed = engine.recompute_all()

        assert list(refreshed) == ["Nashik", "Pune"]
        assert store.summaries["Pune"].total_schemes == 0
        assert store.summaries["Nashik"].total_esr == 2

    def test_recompute_region_returns_written_summary(self) -> None:
        store = InMemorySchemeStore([_record("1", villages_integrated=4), _record("2", villages_integrated=1)])

        summary = AggregationEngine(store).recompute_region("Nashik")

        assert summary.villages_integrated == 5
        assert store.summaries["Nashik"] is summary
