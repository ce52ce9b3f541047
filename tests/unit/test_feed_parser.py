# tests/unit/test_feed_parser.py
"""
Unit tests for the syndication feed parser.

Tests field extraction, fallbacks, and tolerance of malformed feeds.
"""

from datetime import UTC, datetime

import pytest

from aggregator.models import SourceKind
from aggregator.services.parsers import FeedParser


class TestFeedParser:
    """Tests for FeedParser class."""

    @pytest.fixture
    def parser(self):
        return FeedParser()

    def test_source_kind(self, parser):
        assert parser.source_kind == SourceKind.RSS

    def test_parse_rss(self, parser, sample_rss):
        """Entries come back in document order with sanitized fields."""
        articles = parser.parse(sample_rss, "BBC Sport")

        assert len(articles) == 3
        first, second, third = articles

        assert first.title == "Arsenal & Chelsea draw"
        assert first.id == "https://example.com/sport/1"
        assert first.link == "https://example.com/sport/1"
        assert first.published_at == datetime(2024, 6, 1, 10, 0, tzinfo=UTC)
        assert first.thumbnail == "https://example.com/img/1.jpg"
        assert "London derby" in first.snippet
        assert "<b>" not in first.snippet
        assert first.source_label == "BBC Sport"
        assert first.is_external is True

        assert second.title == "Transfer news roundup"
        assert second.snippet == "<p>All the latest moves.</p>"
        assert second.thumbnail is None

        assert third.published_at is None

    def test_parse_accepts_text(self, parser, sample_rss):
        assert len(parser.parse(sample_rss.decode("utf-8"), "Feed")) == 3

    def test_parse_atom(self, parser):
        """Atom entries use <updated> and <content> when nothing else is present."""
        payload = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Sport</title>
  <id>https://example.com/atom</id>
  <updated>2024-06-01T09:00:00Z</updated>
  <entry>
    <title>Atom entry</title>
    <id>https://example.com/atom/1</id>
    <link href="https://example.com/atom/1"/>
    <updated>2024-06-01T09:00:00Z</updated>
    <content type="html">&lt;p&gt;Body text&lt;/p&gt;</content>
  </entry>
</feed>
"""
        articles = parser.parse(payload, "Atom")

        assert len(articles) == 1
        assert articles[0].link == "https://example.com/atom/1"
        assert articles[0].published_at == datetime(2024, 6, 1, 9, 0, tzinfo=UTC)
        assert "Body text" in articles[0].snippet

    def test_snippet_truncated(self, parser):
        long_text = "word " * 200
        payload = f"""<rss version="2.0"><channel><title>T</title>
<item><title>Long</title><link>https://example.com/long</link>
<description>{long_text}</description></item></channel></rss>""".encode()

        articles = parser.parse(payload, "Feed")

        # 300 characters of text, escaped and wrapped in <p></p>
        assert len(articles[0].snippet) <= 300 + len("<p></p>")

    def test_html_description_escaped_once(self, parser):
        """Entities inside CDATA markup are decoded before the snippet is escaped."""
        payload = b"""<rss version="2.0"><channel><title>T</title>
<item><title>Cartoon</title><link>https://example.com/cartoon</link>
<description><![CDATA[<p>Tom &amp; Jerry</p>]]></description></item>
</channel></rss>"""

        articles = parser.parse(payload, "Feed")

        assert articles[0].snippet == "<p>Tom &amp; Jerry</p>"

    def test_literal_less_than_keeps_text(self, parser):
        """A decoded "<" that opens no tag does not swallow the rest of the text."""
        payload = b"""<rss version="2.0"><channel><title>T</title>
<item><title>Fans</title><link>https://example.com/fans</link>
<description>Tom &amp; Jerry &lt;3 it</description></item>
<item><title>Maths</title><link>https://example.com/maths</link>
<description>a &lt;3 b</description></item>
</channel></rss>"""

        articles = parser.parse(payload, "Feed")

        assert [article.snippet for article in articles] == [
            "<p>Tom &amp; Jerry &lt;3 it</p>",
            "<p>a &lt;3 b</p>",
        ]

    def test_escaped_markup_stripped(self, parser):
        payload = b"""<rss version="2.0"><channel><title>T</title>
<item><title>Escaped</title><link>https://example.com/escaped</link>
<description>&lt;p&gt;Match &lt;b&gt;report&lt;/b&gt;&lt;/p&gt;</description></item>
</channel></rss>"""

        articles = parser.parse(payload, "Feed")

        assert articles[0].snippet == "<p>Match report</p>"

    def test_entry_without_title_or_link_dropped(self, parser):
        payload = b"""<rss version="2.0"><channel><title>T</title>
<item><description>No title, no link</description></item>
<item><title>Kept</title></item>
</channel></rss>"""

        articles = parser.parse(payload, "Feed")

        assert [article.title for article in articles] == ["Kept"]
        assert articles[0].id == "Kept"

    def test_not_a_feed_returns_empty(self, parser):
        assert parser.parse(b"this is not a feed at all", "Feed") == []

    def test_empty_payload_returns_empty(self, parser):
        assert parser.parse(b"", "Feed") == []
        assert parser.parse(None, "Feed") == []

    def test_malformed_xml_recovers_entries(self, parser):
        """An unescaped ampersand makes the feed ill-formed but still readable."""
        payload = b"""<rss version="2.0"><channel><title>T</title>
<item><title>Fish & Chips</title><link>https://example.com/fish</link></item>
</channel></rss>"""

        articles = parser.parse(payload, "Feed")

        assert len(articles) == 1
        assert "Chips" in articles[0].title

    def test_parse_source_uses_descriptor_label(self, parser, sample_rss, make_descriptor):
        descriptor = make_descriptor(label="The Guardian")

        articles = parser.parse_source(sample_rss, descriptor)

        assert {article.source_label for article in articles} == {"The Guardian"}
