"""
app/services/change_feed.py

In-memory "recent activity" feed of change events.

Events are partitioned by UTC day and each day is bounded, so a process that
runs for weeks keeps a fixed memory footprint. Appends are serialized by a
lock; readers receive tuples that later appends cannot mutate.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Callable, Iterable

from sqlalchemy.orm import Session

from app.config import get_change_feed_settings
from app.domain.scheme_import import ChangeEvent, utc_now
from app.repositories.change_event_repository import ChangeEventRepository

logger = logging.getLogger(__name__)


def _utc_day(moment: datetime) -> date:
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


class ChangeFeed:
    """
    Thread-safe, day-partitioned, bounded collection of change events.
    """

    def __init__(
        self,
        *,
        max_events_per_day: int = 1000,
        retention_days: int = 7,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._max_events_per_day = max(1, max_events_per_day)
        self._retention_days = max(1, retention_days)
        self._clock = clock
        self._lock = threading.Lock()
        self._days: dict[date, deque[ChangeEvent]] = {}

    def append(self, event: ChangeEvent) -> None:
        with self._lock:
            self._append_locked(event)

    def extend(self, events: Iterable[ChangeEvent]) -> int:
        """
        Append events in order; returns how many were offered.
        """

        count = 0
        with self._lock:
            for event in events:
                self._append_locked(event)
                count += 1
        return count

    def events_for_day(self, day: date) -> tuple[ChangeEvent, ...]:
        with self._lock:
            return tuple(self._days.get(day, ()))

    def today_key(self) -> date:
        return _utc_day(self._clock())

    def today(self) -> tuple[ChangeEvent, ...]:
        return self.events_for_day(self.today_key())

    def recent(self, limit: int = 50) -> tuple[ChangeEvent, ...]:
        """
        Newest events first, across all retained days.
        """

        with self._lock:
            ordered: list[ChangeEvent] = []
            for day in sorted(self._days, reverse=True):
                ordered.extend(reversed(self._days[day]))
                if len(ordered) >= limit:
                    break
        return tuple(ordered[: max(0, limit)])

    def prune(self, now: datetime | None = None) -> int:
        """
        Drop day partitions older than the retention window.
        """

        cutoff = _utc_day(now or self._clock()) - timedelta(days=self._retention_days - 1)
        with self._lock:
            stale = [day for day in self._days if day < cutoff]
            for day in stale:
                del self._days[day]
        if stale:
            logger.info("Pruned %d change feed day partition(s) older than %s.", len(stale), cutoff)
        return len(stale)

    def reset(self, day: date | None = None) -> None:
        with self._lock:
            if day is None:
                self._days.clear()
            else:
                self._days.pop(day, None)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(events) for events in self._days.values())

    def _append_locked(self, event: ChangeEvent) -> None:
        day = _utc_day(event.timestamp)
        bucket = self._days.get(day)
        if bucket is None:
            bucket = deque(maxlen=self._max_events_per_day)
            self._days[day] = bucket
        bucket.append(event)


@lru_cache(maxsize=1)
def get_change_feed() -> ChangeFeed:
    """
    Return the process-wide change feed.
    """

    settings = get_change_feed_settings()
    return ChangeFeed(
        max_events_per_day=settings.max_events_per_day,
        retention_days=settings.retention_days,
    )


def warm_change_feed(session: Session, feed: ChangeFeed, *, now: datetime | None = None) -> int:
    """
    Reload today's persisted events into ``feed`` (replacing today's partition).
    """

    moment = now or utc_now()
    start_of_day = datetime.combine(_utc_day(moment), time.min, tzinfo=timezone.utc)
    events = ChangeEventRepository(session).list_since(start_of_day)
    feed.reset(_utc_day(moment))
    loaded = feed.extend(events)
    logger.info("Warmed change feed with %d event(s) since %s.", loaded, start_of_day.isoformat())
    return loaded
