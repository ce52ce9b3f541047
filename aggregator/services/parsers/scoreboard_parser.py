"""
Scoreboard JSON parser.

Scoreboard endpoints nest competition data differently from one league to the
next. Every field is resolved through an ordered list of accessor functions;
the first accessor that returns a non-empty value wins. An accessor that hits
a missing key, a short list or a wrong type simply does not match.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any, NamedTuple

from aggregator.constants import TextLimits
from aggregator.errors import ParseError
from aggregator.models import ContentKind, Event, SourceDescriptor, SourceKind
from aggregator.services.normalizer import normalize_records
from aggregator.services.parsers.base import BaseParser, RawRecord, decode_json
from aggregator.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


class ScoreboardNode(NamedTuple):
    """One event node together with the document root it came from."""

    root: dict[str, Any]
    event: dict[str, Any]


Accessor = Callable[[ScoreboardNode], Any]

_EMPTY = (None, "", [], {})


def first_match(node: ScoreboardNode, accessors: Sequence[Accessor]) -> Any:
    """Return the first non-empty value produced by the accessors, else None."""
    for accessor in accessors:
        try:
            value = accessor(node)
        except (KeyError, IndexError, TypeError, AttributeError):
            continue
        if value not in _EMPTY:
            return value
    return None


def _competitor_names(node: ScoreboardNode) -> str:
    competitors = node.event["competitions"][0]["competitors"]
    names = []
    for competitor in competitors:
        if not isinstance(competitor, dict):
            continue
        name = (competitor.get("team") or {}).get("displayName") or competitor.get("displayName")
        if name:
            names.append(str(name))
    return " vs ".join(names)


ID_ACCESSORS: tuple[Accessor, ...] = (
    lambda n: n.event["id"],
    lambda n: n.event["uid"],
    lambda n: str(n.event["name"])[: TextLimits.SCOREBOARD_NAME_ID_CHARS],
)

TITLE_ACCESSORS: tuple[Accessor, ...] = (
    lambda n: n.event["name"],
    _competitor_names,
    lambda n: n.event["shortName"],
)

LINK_ACCESSORS: tuple[Accessor, ...] = (
    lambda n: n.event["links"][0]["href"],
    lambda n: n.event["links"]["web"]["href"],
)

START_ACCESSORS: tuple[Accessor, ...] = (
    lambda n: n.event["date"],
    lambda n: n.event["startDate"],
    lambda n: n.event["competitions"][0]["date"],
)

SPORT_ACCESSORS: tuple[Accessor, ...] = (
    lambda n: n.root["sport"]["name"],
    lambda n: n.event["league"]["name"],
    lambda n: n.root["leagues"][0]["name"],
)

THUMBNAIL_ACCESSORS: tuple[Accessor, ...] = (
    lambda n: n.event["competitions"][0]["broadcast"]["network"]["logo"],
    lambda n: n.event["competitions"][0]["competitors"][0]["team"]["logo"],
)


class ScoreboardParser(BaseParser):
    """Parse scoreboard JSON into events."""

    @property
    def source_kind(self) -> SourceKind:
        return SourceKind.SCOREBOARD_JSON

    def parse(self, payload: Any, source_label: str) -> list[Event]:
        """
        Parse a scoreboard document.

        Args:
            payload: Raw JSON bytes/text, or an already decoded document
            source_label: Provenance label for every event

        Returns:
            Events in document order; records without a start date are dropped
        """
        try:
            records = self.extract_records(payload, source_label)
        except Exception as e:
            logger.warning(f"Scoreboard parse failed for {source_label}: {e}", extra={"source": source_label})
            return []

        return normalize_records(records, ContentKind.EVENT, source_label)

    def parse_source(self, payload: Any, descriptor: SourceDescriptor) -> list[Event]:
        return self.parse(payload, descriptor.label)

    def extract_records(self, payload: Any, source_label: str = "") -> list[RawRecord]:
        """
        Turn a scoreboard document into raw records.

        Raises:
            ParseError: If the document is not a JSON object
        """
        root = decode_json(payload)
        if not isinstance(root, dict):
            raise ParseError("scoreboard document is not an object")

        nodes = root.get("events")
        if not isinstance(nodes, list):
            nodes = root.get("competitions")
        if not isinstance(nodes, list):
            return []

        records: list[RawRecord] = []
        for event in nodes:
            if not isinstance(event, dict):
                continue
            node = ScoreboardNode(root=root, event=event)
            external_id = first_match(node, ID_ACCESSORS)

            start_time = parse_timestamp(first_match(node, START_ACCESSORS))
            if start_time is None:
                logger.debug(f"{source_label}: event {external_id} has no start date, skipped")
                continue

            records.append(
                RawRecord(
                    title=first_match(node, TITLE_ACCESSORS),
                    link=first_match(node, LINK_ACCESSORS),
                    start_time=start_time,
                    sport_type=first_match(node, SPORT_ACCESSORS),
                    thumbnail=first_match(node, THUMBNAIL_ACCESSORS),
                )
            )
        return records
