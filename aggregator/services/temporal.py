"""
Temporal filtering and ordering of merged items.

Events: only upcoming ones (start at or after now), soonest first, ties broken
by source label. Articles: newest first, undated last, capped for display.
Python's sort is stable, so equal keys keep merge order.
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from aggregator.models import Article, Event


def filter_and_sort_events(events: Sequence[Event], now: datetime | None = None) -> list[Event]:
    """Keep events starting at or after `now`, ordered by (start_time, source_label)."""
    now = now or datetime.now(UTC)
    upcoming = [event for event in events if event.start_time >= now]
    return sorted(upcoming, key=lambda event: (event.start_time, event.source_label))


def sort_articles(articles: Sequence[Article]) -> list[Article]:
    """Newest first; articles without a timestamp go last."""
    dated = [article for article in articles if article.published_at is not None]
    undated = [article for article in articles if article.published_at is None]
    dated.sort(key=lambda article: article.published_at, reverse=True)
    return dated + undated


def sort_and_cap_articles(articles: Sequence[Article], cap: int) -> list[Article]:
    """Sort articles by recency and keep the first `cap`."""
    return sort_articles(articles)[: max(cap, 0)]


def cap_events(events: Sequence[Event], cap: int) -> list[Event]:
    """Keep the first `cap` events of an already ordered list."""
    return list(events[: max(cap, 0)])
