"""
Timestamp parsing for upstream payloads.

Upstreams mix ISO 8601 (with or without "Z", with or without seconds),
RFC 822 feed dates, and time.struct_time values from the feed parser. Every
successful parse returns a timezone-aware UTC datetime; anything else is None.
"""

import calendar
import time
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime


def to_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(value: object) -> datetime | None:
    """Best-effort conversion of an upstream timestamp."""
    if value is None:
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, time.struct_time):
        try:
            return datetime.fromtimestamp(calendar.timegm(value), tz=UTC)
        except (OverflowError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return to_utc(datetime.fromisoformat(iso))
    except ValueError:
        pass

    try:
        return to_utc(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None
