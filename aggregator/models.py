# aggregator/models.py
"""
Domain types shared by the aggregation engine.

Source descriptors are static configuration; articles and events are immutable
value objects produced fresh for every aggregation call; cache entries belong
to the fetcher.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class SourceKind(str, Enum):
    """Upstream payload formats."""

    RSS = "rss"
    SCOREBOARD_JSON = "scoreboard_json"
    INTERNAL_STORE = "internal_store"


class ContentKind(str, Enum):
    """Canonical item shape a profile renders."""

    ARTICLE = "article"
    EVENT = "event"


@dataclass(frozen=True)
class SourceDescriptor:
    """
    Configuration for one upstream.

    Attributes:
        kind: Payload format of the upstream
        endpoint: Absolute URL fetched with a single GET
        label: Provenance label copied onto every produced item
        freshness_window_seconds: How long a fetched payload is served from cache
        fetch_timeout_ms: Hard timeout for the request
        headers: Extra request headers (store credentials)
        content_kind: Shape internal-store rows map to
    """

    kind: SourceKind
    endpoint: str
    label: str
    freshness_window_seconds: int
    fetch_timeout_ms: int
    headers: tuple[tuple[str, str], ...] = ()
    content_kind: ContentKind = ContentKind.ARTICLE

    @property
    def key(self) -> str:
        """Stable cache key for this upstream."""
        return f"{self.kind.value}:{self.endpoint}"

    @property
    def is_internal(self) -> bool:
        return self.kind == SourceKind.INTERNAL_STORE


@dataclass(frozen=True)
class Article:
    """A blog post or news article ready for display."""

    id: str
    title: str
    source_label: str
    link: str | None = None
    published_at: datetime | None = None
    snippet: str | None = None
    thumbnail: str | None = None
    is_external: bool = True


@dataclass(frozen=True)
class Event:
    """A scheduled sports event ready for display."""

    id: str
    title: str
    start_time: datetime
    source_label: str
    link: str | None = None
    sport_type: str | None = None
    thumbnail: str | None = None


NormalizedItem = Article | Event


@dataclass(frozen=True)
class CacheEntry:
    """One cached upstream payload. Replaced wholesale, never patched."""

    source_key: str
    fetched_at: datetime
    payload: bytes
    ttl_seconds: int

    def expires_at(self) -> datetime:
        return self.fetched_at + timedelta(seconds=self.ttl_seconds)

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at()


@dataclass(frozen=True)
class AggregationProfile:
    """
    What one page aggregates.

    Attributes:
        name: Profile identifier (blog, news, events)
        content_kind: Whether the output is articles or events
        descriptors: Upstreams in precedence order
        display_cap: Maximum number of items returned
    """

    name: str
    content_kind: ContentKind
    descriptors: tuple[SourceDescriptor, ...] = field(default_factory=tuple)
    display_cap: int = 30
