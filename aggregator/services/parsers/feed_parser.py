"""
Syndication feed parser (RSS 2.0 / RSS 1.0 / Atom).

Upstream feeds are malformed in practice, so parsing goes through
feedparser's lenient mode: a feed that is not well-formed XML still yields
whatever entries could be recovered. Per entry:

- title
- link, falling back to the guid
- published date, falling back to the updated / dc:date field
- description, falling back to content:encoded
- thumbnail from the enclosure, falling back to media:thumbnail / media:content
"""

import io
import logging
from typing import Any

import feedparser

from aggregator.constants import TextLimits
from aggregator.errors import ParseError
from aggregator.models import Article, ContentKind, SourceDescriptor, SourceKind
from aggregator.services.normalizer import normalize_records
from aggregator.services.parsers.base import BaseParser, RawRecord
from aggregator.utils.content_sanitizer import html_to_text, truncate
from aggregator.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


class FeedParser(BaseParser):
    """Parse feed XML into external articles."""

    @property
    def source_kind(self) -> SourceKind:
        return SourceKind.RSS

    def parse(self, payload: bytes | str | None, source_label: str) -> list[Article]:
        """
        Parse a feed document.

        Args:
            payload: Feed document as fetched
            source_label: Provenance label for every article

        Returns:
            Articles in document order; empty if the feed is unusable
        """
        try:
            records = self.extract_records(payload)
        except Exception as e:
            logger.warning(f"Feed parse failed for {source_label}: {e}", extra={"source": source_label})
            return []

        return normalize_records(records, ContentKind.ARTICLE, source_label, is_external=True)

    def parse_source(self, payload: Any, descriptor: SourceDescriptor) -> list[Article]:
        return self.parse(payload, descriptor.label)

    def extract_records(self, payload: bytes | str | None) -> list[RawRecord]:
        """
        Turn a feed document into raw records.

        Raises:
            ParseError: If nothing resembling a feed could be read
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        if not payload or not payload.strip():
            raise ParseError("empty feed payload")

        # A stream keeps feedparser from treating the document as a URL or path
        parsed = feedparser.parse(io.BytesIO(payload))

        if parsed.get("bozo") and not parsed.entries:
            raise ParseError(f"unreadable feed: {parsed.get('bozo_exception')}")

        records: list[RawRecord] = []
        for entry in parsed.entries:
            try:
                records.append(self._entry_to_record(entry))
            except Exception as e:
                logger.warning(f"Failed to read feed entry: {e}")
                continue
        return records

    def _entry_to_record(self, entry: Any) -> RawRecord:
        link = entry.get("link") or entry.get("id")

        published = entry.get("published_parsed") or entry.get("updated_parsed")
        if published is None:
            published = parse_timestamp(entry.get("published") or entry.get("updated"))

        description = entry.get("summary") or entry.get("description")
        if not description:
            content = entry.get("content") or []
            if content:
                description = content[0].get("value")

        # Plain text only; the normalizer escapes it once
        snippet = truncate(html_to_text(description), TextLimits.SNIPPET_MAX_CHARS) or None

        return RawRecord(
            title=entry.get("title"),
            link=link,
            published_at=published,
            snippet=snippet,
            thumbnail=self._thumbnail(entry),
        )

    @staticmethod
    def _thumbnail(entry: Any) -> str | None:
        for enclosure in entry.get("enclosures") or []:
            href = enclosure.get("href") or enclosure.get("url")
            if href:
                return href
        for key in ("media_thumbnail", "media_content"):
            for media in entry.get(key) or []:
                url = media.get("url")
                if url:
                    return url
        return None
