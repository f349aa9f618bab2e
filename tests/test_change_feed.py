from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

from app.domain.scheme_import import ChangeEvent, MetricType
from app.services.change_feed import ChangeFeed, warm_change_feed

from conftest import FIXED_NOW, fixed_clock


def _event(delta: int = 1, *, at: datetime = FIXED_NOW, region: str = "Nashik") -> ChangeEvent:
    return ChangeEvent(
        metric_type=MetricType.FLOW_METER,
        delta_count=delta,
        region=region,
        scheme_id="101",
        timestamp=at,
    )


class TestChangeFeed:
    def test_today_returns_events_in_append_order(self, feed: ChangeFeed) -> None:
        feed.extend([_event(1), _event(2), _event(3)])

        assert [event.delta_count for event in feed.today()] == [1, 2, 3]

    def test_each_day_is_bounded(self) -> None:
        feed = ChangeFeed(max_events_per_day=2, clock=fixed_clock)

        feed.extend([_event(1), _event(2), _event(3)])

        assert [event.delta_count for event in feed.today()] == [2, 3]

    def test_events_are_partitioned_by_utc_day(self, feed: ChangeFeed) -> None:
        yesterday = FIXED_NOW - timedelta(days=1)
        feed.append(_event(5, at=yesterday))
        feed.append(_event(1))

        assert [event.delta_count for event in feed.today()] == [1]
        assert [event.delta_count for event in feed.events_for_day(yesterday.date())] == [5]
        assert len(feed) == 2

    def test_non_utc_timestamps_are_bucketed_by_utc_day(self, feed: ChangeFeed) -> None:
        ist = timezone(timedelta(hours=5, minutes=30))
        # 02:00 IST on the 20th is still the 19th in UTC.
        feed.append(_event(4, at=datetime(2026, 10, 20, 2, 0, tzinfo=ist)))

        assert [event.delta_count for event in feed.today()] == [4]

    def test_recent_is_newest_first_across_days(self, feed: ChangeFeed) -> None:
        feed.append(_event(9, at=FIXED_NOW - timedelta(days=1)))
        feed.extend([_event(1), _event(2)])

        assert [event.delta_count for event in feed.recent(limit=2)] == [2, 1]
        assert [event.delta_count for event in feed.recent(limit=10)] == [2, 1, 9]

    def test_prune_drops_partitions_outside_retention(self, feed: ChangeFeed) -> None:
        feed.append(_event(1, at=FIXED_NOW - timedelta(days=5)))
        feed.append(_event(2, at=FIXED_NOW - timedelta(days=2)))
        feed.append(_event(3))

        removed = feed.prune()

        assert removed == 1
        assert len(feed) == 2

    def test_reset_clears_one_day(self, feed: ChangeFeed) -> None:
        feed.append(_event(1, at=FIXED_NOW - timedelta(days=1)))
        feed.append(_event(2))

        feed.reset(FIXED_NOW.date())

        assert feed.today() == ()
        assert len(feed) == 1

    def test_snapshots_do_not_change_after_later_appends(self, feed: ChangeFeed) -> None:
        feed.append(_event(1))
        snapshot = feed.today()
        feed.append(_event(2))

        assert len(snapshot) == 1

    def test_concurrent_appends_are_all_recorded(self) -> None:
        feed = ChangeFeed(max_events_per_day=10_000, clock=fixed_clock)

        def _writer() -> None:
            for _ in range(200):
                feed.append(_event(1))

        threads = [threading.Thread(target=_writer) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(feed.today()) == 1000


class _EventRowSession:
    """Session stand-in returning persisted change-event rows."""

    def __init__(self, rows: list[SimpleNamespace]) -> None:
        self.rows = rows
        self.statements: list[Any] = []

    def scalars(self, stmt: Any) -> list[SimpleNamespace]:
        self.statements.append(stmt)
        return list(self.rows)


def _row(delta: int, *, at: datetime = FIXED_NOW) -> SimpleNamespace:
    return SimpleNamespace(
        metric_type=MetricType.PRESSURE_TRANSMITTER,
        delta_count=delta,
        status="updated",
        region="Pune",
        scheme_id="601",
        scheme_name="Daund",
        occurred_at=at,
    )


class TestWarmChangeFeed:
    def test_replaces_today_with_persisted_events(self, feed: ChangeFeed) -> None:
        yesterday = FIXED_NOW - timedelta(days=1)
        feed.append(_event(99))
        feed.append(_event(7, at=yesterday))
        session = _EventRowSession([_row(2), _row(3)])

        loaded = warm_change_feed(session, feed, now=FIXED_NOW)

        assert loaded == 2
        assert [event.delta_count for event in feed.today()] == [2, 3]
        assert feed.today()[0].scheme_name == "Daund"
        assert [event.delta_count for event in feed.events_for_day(yesterday.date())] == [7]
        assert len(session.statements) == 1

    def test_empty_table_clears_today(self, feed: ChangeFeed) -> None:
        feed.append(_event(4))

        loaded = warm_change_feed(_EventRowSession([]), feed, now=FIXED_NOW)

        assert loaded == 0
        assert list(feed.today()) == []
