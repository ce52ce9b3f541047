# tests/unit/test_content_sanitizer.py
"""
Unit tests for content sanitizer utilities.

Covers:
- Title cleaning: CDATA wrappers, surrounding quotes, entity table
- Idempotence of title cleaning
- Snippet safety: script/style removal, escaping of plain text
- strip_tags / html_to_text / truncate helpers
"""

import pytest

from aggregator.utils.content_sanitizer import (
    html_to_text,
    sanitize_snippet,
    sanitize_title,
    strip_tags,
    truncate,
    unwrap_cdata,
)


class TestSanitizeTitle:
    """Tests for sanitize_title()."""

    def test_none_is_empty(self):
        assert sanitize_title(None) == ""

    def test_plain_title_unchanged(self):
        assert sanitize_title("Arsenal beat Chelsea") == "Arsenal beat Chelsea"

    def test_cdata_and_entities(self):
        assert sanitize_title("<![CDATA[Messi &amp; Ronaldo]]>") == "Messi & Ronaldo"

    def test_surrounding_quotes_removed(self):
        assert sanitize_title('"Quoted headline"') == "Quoted headline"
        assert sanitize_title("“Curly quotes”") == "Curly quotes"
        assert sanitize_title("'Single'") == "Single"

    def test_inner_quotes_kept(self):
        assert sanitize_title("Klopp: 'We deserved it' after win") == "Klopp: 'We deserved it' after win"

    def test_entity_table(self):
        assert sanitize_title("Rock &#8211; Paper") == "Rock – Paper"
        assert sanitize_title("It&#39;s over") == "It's over"
        assert sanitize_title("It&#039;s over") == "It's over"
        assert sanitize_title("1 &lt; 2 &gt; 0") == "1 < 2 > 0"
        assert sanitize_title("A&nbsp;B") == "A B"

    def test_unknown_entity_left_alone(self):
        assert sanitize_title("Caf&eacute; league") == "Caf&eacute; league"

    def test_whitespace_trimmed(self):
        assert sanitize_title("   padded   ") == "padded"

    @pytest.mark.parametrize(
        "raw",
        [
            "<![CDATA[Messi &amp; Ronaldo]]>",
            '"&quot;Nested&quot;"',
            "&amp;amp; double encoded",
            "“<![CDATA['x']]>”",
            "plain",
            "",
        ],
    )
    def test_idempotent(self, raw):
        """Sanitizing an already sanitized title changes nothing."""
        once = sanitize_title(raw)
        assert sanitize_title(once) == once

    def test_double_encoded_entity_fully_decoded(self):
        assert sanitize_title("Tom &amp;amp; Jerry") == "Tom & Jerry"


class TestSanitizeSnippet:
    """Tests for sanitize_snippet()."""

    def test_none_and_blank(self):
        assert sanitize_snippet(None) == ""
        assert sanitize_snippet("   ") == ""

    def test_script_removed_from_markup(self):
        result = sanitize_snippet("<p>Match report</p><script>alert(1)</script>")
        assert "<script" not in result
        assert "alert" not in result
        assert "<p>Match report</p>" in result

    def test_style_removed_from_markup(self):
        result = sanitize_snippet("<style>body{display:none}</style><p>Hi</p>")
        assert result == "<p>Hi</p>"

    def test_unclosed_script_removed(self):
        result = sanitize_snippet("<p>Intro</p><script>steal()")
        assert "<script" not in result
        assert "steal" not in result

    def test_plain_text_escaped_and_wrapped(self):
        assert sanitize_snippet("Fish & chips") == "<p>Fish &amp; chips</p>"

    def test_plain_text_paragraphs_and_breaks(self):
        result = sanitize_snippet("Line one\nLine two\n\nSecond paragraph")
        assert result == "<p>Line one<br/>Line two</p><p>Second paragraph</p>"

    def test_angle_brackets_in_plain_text_escaped(self):
        assert sanitize_snippet("3 < 4") == "<p>3 &lt; 4</p>"

    def test_idempotent_on_output(self):
        once = sanitize_snippet("Fish & chips\n\nand peas")
        assert sanitize_snippet(once) == once


class TestHelpers:
    """Tests for unwrap_cdata(), strip_tags(), html_to_text() and truncate()."""

    def test_unwrap_cdata(self):
        assert unwrap_cdata("<![CDATA[a]]> and <![CDATA[b]]>") == "a and b"
        assert unwrap_cdata(None) == ""

    def test_strip_tags(self):
        assert strip_tags("<p>A <b>bold</b>\n\n move</p>") == "A bold move"
        assert strip_tags(None) == ""

    def test_strip_tags_keeps_bare_less_than(self):
        assert strip_tags("I <3 football") == "I <3 football"
        assert strip_tags("a < b and c") == "a < b and c"

    def test_strip_tags_nested_fragments(self):
        assert strip_tags("<<b>img src=x onerror=alert(1)>caption") == "caption"

    def test_html_to_text(self):
        assert html_to_text("<p>Tom &amp; Jerry</p>") == "Tom & Jerry"
        assert html_to_text("&lt;p&gt;Hi&lt;/p&gt;") == "Hi"
        assert html_to_text("<![CDATA[<b>x</b> &lt;3]]>") == "x <3"
        assert html_to_text(None) == ""

    def test_truncate(self):
        assert truncate("abcdef", 3) == "abc"
        assert truncate("abc", 10) == "abc"
        assert truncate(None, 5) == ""
