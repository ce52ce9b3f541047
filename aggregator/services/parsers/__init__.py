"""
Payload parsers for the aggregation engine.

One parser per upstream format, each producing canonical items:
- FeedParser: RSS / Atom syndication feeds -> Article
- ScoreboardParser: scoreboard JSON -> Event
- StoreParser: internal content store rows -> Article or Event
"""

from aggregator.models import SourceKind
from aggregator.services.parsers.base import BaseParser, RawRecord
from aggregator.services.parsers.feed_parser import FeedParser
from aggregator.services.parsers.scoreboard_parser import ScoreboardParser
from aggregator.services.parsers.store_parser import StoreParser


def default_parsers() -> dict[SourceKind, BaseParser]:
    """One parser instance per source kind."""
    parsers: list[BaseParser] = [FeedParser(), ScoreboardParser(), StoreParser()]
    return {parser.source_kind: parser for parser in parsers}


__all__ = [
    "BaseParser",
    "RawRecord",
    "FeedParser",
    "ScoreboardParser",
    "StoreParser",
    "default_parsers",
]
