"""
Internal content store parser.

Rows come back from the store already typed (blogs, events). The only work is
null-coalescing optional columns and handing timestamps to the normalizer,
which converts them to UTC.
"""

import logging
from collections.abc import Mapping
from typing import Any

from aggregator.errors import ParseError
from aggregator.models import ContentKind, NormalizedItem, SourceDescriptor, SourceKind
from aggregator.services.normalizer import normalize_records
from aggregator.services.parsers.base import BaseParser, RawRecord, decode_json

logger = logging.getLogger(__name__)

BLOG_PATH_PREFIX = "/blog/"


def blog_row_to_record(row: Mapping[str, Any]) -> RawRecord:
    """Map a `blogs` row (title, slug, excerpt, featured_image, published_at)."""
    slug = row.get("slug")
    return RawRecord(
        title=row.get("title"),
        link=f"{BLOG_PATH_PREFIX}{slug}" if slug else None,
        published_at=row.get("published_at"),
        snippet=row.get("excerpt") or "",
        thumbnail=row.get("featured_image"),
    )


def event_row_to_record(row: Mapping[str, Any]) -> RawRecord:
    """Map an `events` row (title, start_time, sport_type, event_url, thumbnail_url)."""
    return RawRecord(
        title=row.get("title"),
        link=row.get("event_url"),
        start_time=row.get("start_time"),
        sport_type=row.get("sport_type"),
        thumbnail=row.get("thumbnail_url"),
    )


class StoreParser(BaseParser):
    """Parse content store rows into internal articles or events."""

    @property
    def source_kind(self) -> SourceKind:
        return SourceKind.INTERNAL_STORE

    def parse(
        self,
        rows: Any,
        source_label: str,
        content_kind: ContentKind = ContentKind.ARTICLE,
    ) -> list[NormalizedItem]:
        """
        Parse store rows.

        Args:
            rows: JSON array as bytes/text, or an already decoded list
            source_label: Provenance label for every item
            content_kind: Whether rows are blog posts or events

        Returns:
            Items in row order
        """
        try:
            records = self.extract_records(rows, content_kind)
        except Exception as e:
            logger.warning(f"Store parse failed for {source_label}: {e}", extra={"source": source_label})
            return []

        return normalize_records(records, content_kind, source_label, is_external=False)

    def parse_source(self, payload: Any, descriptor: SourceDescriptor) -> list[NormalizedItem]:
        return self.parse(payload, descriptor.label, descriptor.content_kind)

    def extract_records(self, rows: Any, content_kind: ContentKind) -> list[RawRecord]:
        """
        Raises:
            ParseError: If the payload is not a JSON array
        """
        data = decode_json(rows)
        if not isinstance(data, list):
            raise ParseError("store response is not an array")

        to_record = event_row_to_record if content_kind == ContentKind.EVENT else blog_row_to_record
        return [to_record(row) for row in data if isinstance(row, Mapping)]
