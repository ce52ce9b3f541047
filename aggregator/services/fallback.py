"""
Static fallback datasets.

Used when every source of a profile comes back empty, so a page always has
something to render. The rows go through the same normalizer as live data;
event start times are relative to the current time so they are never filtered
out as past events.
"""

from datetime import UTC, datetime, timedelta

from aggregator.models import ContentKind, NormalizedItem
from aggregator.services.normalizer import normalize_records
from aggregator.services.parsers.base import RawRecord

FALLBACK_SOURCE_LABEL = "Inswinger"

# (title, sport, thumbnail, hours from now)
_FEATURED = [
    (
        "NFL Sunday Night Football",
        "NFL",
        "https://images.unsplash.com/photo-1560272564-c83b66b1ad12?w=800&h=450&fit=crop",
        2,
    ),
    (
        "Premier League Highlights",
        "Football",
        "https://images.unsplash.com/photo-1574623452334-1e0ac2b3ccb4?w=800&h=450&fit=crop",
        6,
    ),
    (
        "NBA Finals Game 7",
        "Basketball",
        "https://images.unsplash.com/photo-1571019613454-1cb2f99b2d8b?w=800&h=450&fit=crop",
        24,
    ),
    (
        "F1 Monaco Grand Prix",
        "F1",
        "https://images.unsplash.com/photo-1581833971358-2c8b550f87b3?w=800&h=450&fit=crop",
        48,
    ),
    (
        "Cricket World Cup Final",
        "Cricket",
        "https://images.unsplash.com/photo-1531415074968-036ba1b575da?w=800&h=450&fit=crop",
        72,
    ),
    (
        "Tennis Masters Final",
        "Tennis",
        "https://images.unsplash.com/photo-1551698618-1dfe5d97d256?w=800&h=450&fit=crop",
        120,
    ),
]


def _article_records() -> list[RawRecord]:
    return [
        RawRecord(
            title=title,
            link=f"/browse?category={sport}",
            snippet=f"Catch {title} live on Inswinger. Browse {sport} streams from top streamers.",
            thumbnail=thumbnail,
        )
        for title, sport, thumbnail, _ in _FEATURED
    ]


def _event_records(now: datetime) -> list[RawRecord]:
    return [
        RawRecord(
            title=title,
            link=f"/browse?category={sport}",
            start_time=now + timedelta(hours=hours),
            sport_type=sport,
            thumbnail=thumbnail,
        )
        for title, sport, thumbnail, hours in _FEATURED
    ]


def fallback_items(content_kind: ContentKind, now: datetime | None = None) -> list[NormalizedItem]:
    """Build the fallback dataset for a content kind."""
    now = now or datetime.now(UTC)
    if content_kind == ContentKind.EVENT:
        records = _event_records(now)
    else:
        records = _article_records()
    return normalize_records(records, content_kind, FALLBACK_SOURCE_LABEL, is_external=False)
