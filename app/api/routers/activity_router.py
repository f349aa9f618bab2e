"""
app/api/routers/activity_router.py

Read-only "today's updates" endpoint backed by the change feed.
"""

from __future__ import annotations

from collections import Counter

from fastapi import APIRouter, Depends, Query

from app.schemas.scheme_import import ActivityFeedResponse, ChangeEventResponse
from app.services.change_feed import ChangeFeed, get_change_feed

router = APIRouter(tags=["activity"])


@router.get("/updates/today", response_model=ActivityFeedResponse)
def get_todays_updates(
    region: str | None = Query(default=None, description="Only return events for this region"),
    limit: int = Query(default=200, ge=1, le=1000),
    feed: ChangeFeed = Depends(get_change_feed),
) -> ActivityFeedResponse:
    """
    Return today's change events, newest first.
    """

    events = [event for event in reversed(feed.today()) if region is None or event.region == region]
    totals: Counter[str] = Counter()
    for event in events:
        totals[event.metric_type] += event.delta_count

    return ActivityFeedResponse(
        day=feed.today_key().isoformat(),
        count=len(events),
        totals_by_metric=dict(totals),
        events=[ChangeEventResponse.from_domain(event) for event in events[:limit]],
    )
