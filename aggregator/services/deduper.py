"""
Deduplication service for merged aggregation results.

Dedupe rules:
1. Key is the item id (link-derived, else title-derived)
2. First occurrence wins; callers put higher-precedence sources first
3. Items with an empty key are dropped

Near-duplicates (similar titles, different ids) are reported, not removed.
"""

import logging
import re
from collections.abc import Sequence

from aggregator.constants import DedupeThresholds
from aggregator.models import NormalizedItem

logger = logging.getLogger(__name__)


class Deduper:
    """Deduplication service."""

    # Similarity threshold for near-duplicate title reporting
    TITLE_SIMILARITY_THRESHOLD = DedupeThresholds.TITLE_SIMILARITY

    @staticmethod
    def normalize_text(text: str | None) -> str:
        """Normalize text for comparison."""
        if not text:
            return ""
        # Lowercase
        text = text.lower()
        # Remove punctuation
        text = re.sub(r"[^\w\s]", "", text)
        # Collapse whitespace
        text = re.sub(r"\s+", " ", text).strip()
        return text

    @staticmethod
    def word_set(text: str | None) -> frozenset[str]:
        """Normalized words of a text."""
        return frozenset(Deduper.normalize_text(text).split())

    @staticmethod
    def set_similarity(words1: frozenset[str], words2: frozenset[str]) -> float:
        """Jaccard similarity of two word sets."""
        if not words1 or not words2:
            return 0.0

        intersection = words1 & words2
        union = words1 | words2

        return len(intersection) / len(union)

    @staticmethod
    def jaccard_similarity(text1: str, text2: str) -> float:
        """Calculate Jaccard similarity between two texts."""
        return Deduper.set_similarity(Deduper.word_set(text1), Deduper.word_set(text2))

    def dedupe(self, items: Sequence[NormalizedItem]) -> list[NormalizedItem]:
        """
        Collapse items sharing an id, keeping the earliest.

        Args:
            items: Items in precedence order

        Returns:
            Unique items in input order
        """
        seen: set[str] = set()
        unique: list[NormalizedItem] = []
        dropped_empty = 0

        for item in items:
            key = item.id
            if not key:
                dropped_empty += 1
                continue
            if key in seen:
                continue
            seen.add(key)
            unique.append(item)

        if dropped_empty:
            logger.debug(f"Dropped {dropped_empty} items with an empty dedupe key")

        return unique

    def find_near_duplicates(
        self,
        items: Sequence[NormalizedItem],
    ) -> list[tuple[NormalizedItem, NormalizedItem]]:
        """
        Find pairs with different ids whose titles are near-identical.

        Both items of a pair are kept in the output; this only surfaces
        content that renders twice (e.g. an internal post mirroring a feed item).

        Returns:
            (earlier, later) pairs in input order
        """
        # Titles are normalized once; the pair loop only compares sets
        word_sets = [self.word_set(item.title) for item in items]

        pairs: list[tuple[NormalizedItem, NormalizedItem]] = []
        for i, first in enumerate(items):
            for j in range(i + 1, len(items)):
                second = items[j]
                if first.id == second.id:
                    continue
                similarity = self.set_similarity(word_sets[i], word_sets[j])
                if similarity >= self.TITLE_SIMILARITY_THRESHOLD:
                    pairs.append((first, second))
        return pairs
