# aggregator/sources.py
"""
Profile catalog.

Each page of the site aggregates a fixed set of upstreams:
- blog: internal blog posts + sports news feeds (articles)
- news: sports news feeds only (articles)
- events: internal custom events + league scoreboards (events)

Internal-store sources need STORE_URL and STORE_ANON_KEY; without them they
are left out of every profile.
"""

from aggregator.config import Settings
from aggregator.constants import DisplayLimits
from aggregator.models import AggregationProfile, ContentKind, SourceDescriptor, SourceKind

BLOG_PROFILE = "blog"
NEWS_PROFILE = "news"
EVENTS_PROFILE = "events"

INTERNAL_BLOG_LABEL = "internal"
INTERNAL_EVENT_LABEL = "Inswinger (Custom)"

# (label, url)
NEWS_FEEDS = [
    ("BBC Sport", "https://feeds.bbci.co.uk/sport/football/rss.xml"),
    ("The Guardian", "https://www.theguardian.com/uk/sport/rss"),
    ("ESPN", "https://www.espn.com/espn/rss/soccer/news"),
]

SCOREBOARDS = [
    ("ESPN NFL", "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"),
    ("ESPN Soccer (EPL)", "https://site.api.espn.com/apis/site/v2/sports/soccer/eng.1/scoreboard"),
]

STORE_BLOG_QUERY = (
    "blogs?select=id,slug,title,excerpt,featured_image,published_at,author_id"
    "&published=eq.true&order=published_at.desc&limit=50"
)
STORE_EVENT_QUERY = (
    "events?select=id,title,start_time,sport_type,event_url,thumbnail_url,description"
    f"&order=start_time.asc&limit={DisplayLimits.STORE_ROW_LIMIT}"
)


def store_headers(settings: Settings) -> tuple[tuple[str, str], ...]:
    """Credential headers for the internal content store."""
    return (
        ("apikey", settings.STORE_ANON_KEY or ""),
        ("Authorization", f"Bearer {settings.STORE_ANON_KEY or ''}"),
        ("Accept", "application/json"),
    )


def feed_descriptors(settings: Settings) -> list[SourceDescriptor]:
    return [
        SourceDescriptor(
            kind=SourceKind.RSS,
            endpoint=url,
            label=label,
            freshness_window_seconds=settings.FEED_FRESHNESS_SECONDS,
            fetch_timeout_ms=settings.FETCH_TIMEOUT_MS,
        )
        for label, url in NEWS_FEEDS
    ]


def scoreboard_descriptors(settings: Settings) -> list[SourceDescriptor]:
    return [
        SourceDescriptor(
            kind=SourceKind.SCOREBOARD_JSON,
            endpoint=url,
            label=label,
            freshness_window_seconds=settings.SCOREBOARD_FRESHNESS_SECONDS,
            fetch_timeout_ms=settings.FETCH_TIMEOUT_MS,
            content_kind=ContentKind.EVENT,
        )
        for label, url in SCOREBOARDS
    ]


def store_descriptor(
    settings: Settings,
    query: str,
    label: str,
    freshness_window_seconds: int,
    content_kind: ContentKind,
) -> SourceDescriptor | None:
    """Descriptor for one store table, or None when the store is not configured."""
    if not settings.store_configured:
        return None
    return SourceDescriptor(
        kind=SourceKind.INTERNAL_STORE,
        endpoint=f"{settings.STORE_URL}/rest/v1/{query}",
        label=label,
        freshness_window_seconds=freshness_window_seconds,
        fetch_timeout_ms=settings.FETCH_TIMEOUT_MS,
        headers=store_headers(settings),
        content_kind=content_kind,
    )


def build_profiles(settings: Settings) -> dict[str, AggregationProfile]:
    """
    Build every aggregation profile from settings.

    Returns:
        Profiles keyed by name
    """
    feeds = feed_descriptors(settings)

    internal_blogs = store_descriptor(
        settings,
        STORE_BLOG_QUERY,
        INTERNAL_BLOG_LABEL,
        settings.STORE_BLOG_FRESHNESS_SECONDS,
        ContentKind.ARTICLE,
    )
    internal_events = store_descriptor(
        settings,
        STORE_EVENT_QUERY,
        INTERNAL_EVENT_LABEL,
        settings.STORE_EVENT_FRESHNESS_SECONDS,
        ContentKind.EVENT,
    )

    blog_sources = ([internal_blogs] if internal_blogs else []) + feeds
    event_sources = ([internal_events] if internal_events else []) + scoreboard_descriptors(settings)

    return {
        BLOG_PROFILE: AggregationProfile(
            name=BLOG_PROFILE,
            content_kind=ContentKind.ARTICLE,
            descriptors=tuple(blog_sources),
            display_cap=settings.ARTICLE_DISPLAY_CAP,
        ),
        NEWS_PROFILE: AggregationProfile(
            name=NEWS_PROFILE,
            content_kind=ContentKind.ARTICLE,
            descriptors=tuple(feeds),
            display_cap=settings.NEWS_DISPLAY_CAP,
        ),
        EVENTS_PROFILE: AggregationProfile(
            name=EVENTS_PROFILE,
            content_kind=ContentKind.EVENT,
            descriptors=tuple(event_sources),
            display_cap=settings.EVENT_DISPLAY_CAP,
        ),
    }
