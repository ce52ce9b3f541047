"""
Normalizer: maps parser-level records onto the canonical Article / Event shapes.

Rules:
1. Item id is the link if present, else the sanitized title, cut to a bounded length
2. Titles are always sanitized; an article with a link but no title is "Untitled"
3. Records with neither title nor link are rejected
4. Events without a parseable start time are rejected, never carried as null
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from aggregator.constants import TextLimits
from aggregator.errors import ValidationError
from aggregator.models import Article, ContentKind, Event, NormalizedItem
from aggregator.utils.content_sanitizer import sanitize_snippet, sanitize_title
from aggregator.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


def derive_item_id(link: str | None, title: str | None) -> str:
    """Deterministic dedupe key: link first, title otherwise."""
    return (link or title or "")[: TextLimits.ITEM_ID_MAX_CHARS]


def _clean_optional(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_article(
    record: Mapping[str, Any],
    source_label: str,
    is_external: bool = True,
) -> Article:
    """
    Build an Article from a raw record.

    Raises:
        ValidationError: If the record has neither a title nor a link
    """
    link = _clean_optional(record.get("link"))
    title = sanitize_title(record.get("title"))

    if not title and not link:
        raise ValidationError("record has neither title nor link", source=source_label)

    title = title or TextLimits.DEFAULT_ARTICLE_TITLE
    snippet = sanitize_snippet(record.get("snippet")) or None

    return Article(
        id=derive_item_id(link, title),
        title=title,
        source_label=source_label,
        link=link,
        published_at=parse_timestamp(record.get("published_at")),
        snippet=snippet,
        thumbnail=_clean_optional(record.get("thumbnail")),
        is_external=is_external,
    )


def normalize_event(record: Mapping[str, Any], source_label: str) -> Event:
    """
    Build an Event from a raw record.

    Raises:
        ValidationError: If the start time is missing or unparseable
    """
    start_time = parse_timestamp(record.get("start_time"))
    if start_time is None:
        raise ValidationError("event has no parseable start time", source=source_label)

    link = _clean_optional(record.get("link"))
    title = sanitize_title(record.get("title")) or TextLimits.DEFAULT_EVENT_TITLE

    return Event(
        id=derive_item_id(link, title),
        title=title,
        start_time=start_time,
        source_label=source_label,
        link=link,
        sport_type=_clean_optional(record.get("sport_type")),
        thumbnail=_clean_optional(record.get("thumbnail")),
    )


def normalize_records(
    records: Iterable[Mapping[str, Any]],
    content_kind: ContentKind,
    source_label: str,
    is_external: bool = True,
) -> list[NormalizedItem]:
    """Normalize records in order, dropping the ones that fail validation."""
    items: list[NormalizedItem] = []
    dropped = 0

    for record in records:
        try:
            if content_kind == ContentKind.EVENT:
                items.append(normalize_event(record, source_label))
            else:
                items.append(normalize_article(record, source_label, is_external=is_external))
        except ValidationError as e:
            dropped += 1
            logger.debug(f"Dropped record from {source_label}: {e}")

    if dropped:
        logger.debug(
            f"{source_label}: {dropped} records failed validation",
            extra={"event": "records_dropped", "source": source_label, "items_dropped": dropped},
        )

    return items
