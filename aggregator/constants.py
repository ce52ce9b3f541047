# aggregator/constants.py
"""
Centralized magic constants organized by domain.

Hardcoded numbers used by the aggregation engine live here so the parsers,
the orchestrator and the settings defaults agree on them.
"""


class TextLimits:
    """Character limits applied while normalizing upstream text."""

    ITEM_ID_MAX_CHARS = 200             # Derived id (link or title) is cut here
    SNIPPET_MAX_CHARS = 300             # Feed descriptions shown under a title
    SCOREBOARD_NAME_ID_CHARS = 64       # Fallback event id taken from the name
    DEFAULT_ARTICLE_TITLE = "Untitled"
    DEFAULT_EVENT_TITLE = "Event"


class FreshnessDefaults:
    """Per-source freshness windows and fetch timeout."""

    FEED_SECONDS = 3600                 # Syndication feeds: 1 hour
    SCOREBOARD_SECONDS = 600            # Scoreboard JSON: 10 minutes
    STORE_BLOG_SECONDS = 300            # Internal blog rows: 5 minutes
    STORE_EVENT_SECONDS = 600           # Internal event rows: 10 minutes
    FETCH_TIMEOUT_MS = 8000             # Single upstream request


class DisplayLimits:
    """Display caps per aggregation profile."""

    BLOG_ARTICLES = 30
    NEWS_ARTICLES = 20
    EVENTS = 80
    STORE_ROW_LIMIT = 200               # Rows requested from the content store


class DedupeThresholds:
    """Near-duplicate reporting."""

    TITLE_SIMILARITY = 0.85             # Jaccard similarity of normalized titles


class CacheConfig:
    """Cache size and TTL constants."""

    SOURCE_MAX_ENTRIES = 64             # One entry per source descriptor
    FEED_RESPONSE_TTL_SECONDS = 60      # /v1/feeds response cache
    FEED_RESPONSE_MAX_ENTRIES = 10
