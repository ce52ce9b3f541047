# tests/test_deduper.py
"""
Unit tests for deduplication service.
"""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from aggregator.models import Article, Event
from aggregator.services.deduper import Deduper


def _article(id: str, title: str = "Title", source_label: str = "Feed") -> Article:
    return Article(id=id, title=title, source_label=source_label, link=id)


class TestDeduper:
    """Tests for the Deduper service."""

    @pytest.fixture
    def deduper(self):
        return Deduper()

    def test_normalize_text(self, deduper):
        """Test text normalization."""
        # Basic normalization
        assert deduper.normalize_text("Hello World!") == "hello world"
        assert deduper.normalize_text("  Multiple   Spaces  ") == "multiple spaces"

        # Punctuation removal
        assert deduper.normalize_text("What's up?") == "whats up"

        # Empty/None handling
        assert deduper.normalize_text("") == ""
        assert deduper.normalize_text(None) == ""

    def test_jaccard_similarity(self, deduper):
        """Test Jaccard similarity calculation."""
        # Identical
        assert deduper.jaccard_similarity("Arsenal win the league", "arsenal win the league!") == 1.0

        # Disjoint
        assert deduper.jaccard_similarity("Arsenal", "Chelsea") == 0.0

        # Partial: 2 shared of 4 distinct words
        assert deduper.jaccard_similarity("a b c", "b c d") == 0.5

        # Empty
        assert deduper.jaccard_similarity("", "anything") == 0.0

    def test_same_id_first_wins(self, deduper):
        """Two items with the same link collapse to the earlier one."""
        internal = _article("https://example.com/x", title="Internal copy", source_label="internal")
        external = _article("https://example.com/x", title="Feed copy", source_label="BBC Sport")

        result = deduper.dedupe([internal, external])

        assert result == [internal]

    def test_dedupe_preserves_order(self, deduper):
        items = [_article("c"), _article("a"), _article("c"), _article("b"), _article("a")]

        result = deduper.dedupe(items)

        assert [item.id for item in result] == ["c", "a", "b"]

    def test_dedupe_is_stable(self, deduper):
        """Deduping an already unique list changes nothing."""
        items = [_article("a"), _article("b"), _article("c")]

        once = deduper.dedupe(items)

        assert deduper.dedupe(once) == once == items

    def test_dedupe_works_for_events(self, deduper):
        start = datetime(2024, 6, 2, tzinfo=UTC)
        first = Event(id="match", title="Match", start_time=start, source_label="A")
        second = Event(id="match", title="Match", start_time=start, source_label="B")

        assert deduper.dedupe([first, second]) == [first]

    def test_empty_id_dropped(self, deduper):
        result = deduper.dedupe([_article(""), _article("kept")])

        assert [item.id for item in result] == ["kept"]

    def test_near_duplicates_reported_not_removed(self, deduper):
        """Same headline under different links is reported as a pair."""
        a = _article("https://example.com/internal", title="Arsenal sign new striker")
        b = _article("https://example.com/feed", title="Arsenal sign new striker!")
        c = _article("https://example.com/other", title="Cricket world cup schedule")

        pairs = deduper.find_near_duplicates([a, b, c])

        assert pairs == [(a, b)]
        assert deduper.dedupe([a, b, c]) == [a, b, c]

    def test_near_duplicates_normalize_each_title_once(self, deduper):
        """Titles are normalized once per item, not once per pair."""
        items = [_article(f"https://example.com/{i}", title=f"Headline number {i}") for i in range(20)]

        with patch.object(Deduper, "normalize_text", wraps=Deduper.normalize_text) as mock_normalize:
            pairs = deduper.find_near_duplicates(items)

        assert pairs == []
        assert mock_normalize.call_count == len(items)

    def test_word_set(self, deduper):
        assert deduper.word_set("Arsenal win, Arsenal!") == frozenset({"arsenal", "win"})
        assert deduper.word_set(None) == frozenset()
