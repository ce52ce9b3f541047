"""
Base classes and types for upstream payload parsers.

Defines the abstract BaseParser interface and the RawRecord TypedDict that
parsers build internally before handing each record to the normalizer.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, TypedDict

from aggregator.errors import ParseError
from aggregator.models import NormalizedItem, SourceDescriptor, SourceKind


class RawRecord(TypedDict, total=False):
    """
    Format-specific intermediate for one upstream item.

    Values are whatever the upstream provided; the normalizer does the
    sanitizing and timestamp conversion.
    """

    title: str | None
    link: str | None
    snippet: str | None
    thumbnail: str | None

    # Articles
    published_at: Any

    # Events
    start_time: Any
    sport_type: str | None


def decode_text(payload: bytes | str | None) -> str:
    """Decode a payload as UTF-8, replacing invalid bytes."""
    if payload is None:
        return ""
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return str(payload)


def decode_json(payload: Any) -> Any:
    """
    Decode a JSON payload. Already decoded lists/dicts pass through.

    Raises:
        ParseError: If the payload is not valid JSON
    """
    if isinstance(payload, (list, dict)):
        return payload
    text = decode_text(payload)
    if not text.strip():
        raise ParseError("empty JSON payload")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e}") from e


class BaseParser(ABC):
    """
    Abstract base class for payload parsers.

    Parsers never raise: a malformed payload yields an empty list.
    """

    @property
    @abstractmethod
    def source_kind(self) -> SourceKind:
        """Return the source kind this parser handles."""
        pass

    @abstractmethod
    def parse_source(self, payload: Any, descriptor: SourceDescriptor) -> list[NormalizedItem]:
        """
        Parse a fetched payload for the given upstream.

        Args:
            payload: Raw bytes (or decoded JSON) returned by the fetcher
            descriptor: The upstream the payload came from

        Returns:
            Normalized items in upstream document order
        """
        pass
