# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import os
from datetime import UTC, datetime

import pytest

# Set test environment
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.pop("STORE_URL", None)
os.environ.pop("STORE_ANON_KEY", None)

from aggregator.models import ContentKind, SourceDescriptor, SourceKind  # noqa: E402

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    """A fixed reference time (2024-06-01 12:00 UTC)."""
    return FIXED_NOW


@pytest.fixture
def make_descriptor():
    """Factory for source descriptors with short test defaults."""

    def _make(
        label: str = "Test Feed",
        kind: SourceKind = SourceKind.RSS,
        endpoint: str | None = None,
        freshness_window_seconds: int = 600,
        fetch_timeout_ms: int = 1000,
        content_kind: ContentKind | None = None,
    ) -> SourceDescriptor:
        if content_kind is None:
            content_kind = ContentKind.EVENT if kind == SourceKind.SCOREBOARD_JSON else ContentKind.ARTICLE
        return SourceDescriptor(
            kind=kind,
            endpoint=endpoint or f"https://example.com/{label.lower().replace(' ', '-')}",
            label=label,
            freshness_window_seconds=freshness_window_seconds,
            fetch_timeout_ms=fetch_timeout_ms,
            content_kind=content_kind,
        )

    return _make


@pytest.fixture
def sample_rss():
    """A small RSS 2.0 document with three entries."""
    return b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Sport</title>
    <link>https://example.com/sport</link>
    <item>
      <title><![CDATA[Arsenal &amp; Chelsea draw]]></title>
      <link>https://example.com/sport/1</link>
      <pubDate>Sat, 01 Jun 2024 10:00:00 GMT</pubDate>
      <description><![CDATA[<p>A tense <b>London</b> derby.</p>]]></description>
      <media:thumbnail url="https://example.com/img/1.jpg" width="240" height="135"/>
    </item>
    <item>
      <title>Transfer news roundup</title>
      <link>https://example.com/sport/2</link>
      <pubDate>Sat, 01 Jun 2024 11:00:00 GMT</pubDate>
      <description>All the latest moves.</description>
    </item>
    <item>
      <title>Undated preview</title>
      <link>https://example.com/sport/3</link>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_scoreboard():
    """A scoreboard document with one fully populated and one sparse event."""
    return {
        "leagues": [{"name": "National Football League"}],
        "events": [
            {
                "id": "401",
                "name": "Kansas City Chiefs at Baltimore Ravens",
                "date": "2024-06-02T00:20Z",
                "links": [{"href": "https://example.com/game/401"}],
                "competitions": [
                    {
                        "competitors": [
                            {"team": {"displayName": "Baltimore Ravens", "logo": "https://example.com/bal.png"}},
                            {"team": {"displayName": "Kansas City Chiefs"}},
                        ],
                    }
                ],
            },
            {
                "id": "402",
                "competitions": [
                    {
                        "date": "2024-06-03T18:00Z",
                        "competitors": [
                            {"team": {"displayName": "Team A"}},
                            {"team": {"displayName": "Team B"}},
                        ],
                    }
                ],
            },
        ],
    }
