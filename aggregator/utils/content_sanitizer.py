"""
Shared utilities for cleaning untrusted upstream text.

Handles:
- Titles: literal CDATA wrappers, surrounding quote characters, a fixed table
  of HTML entities
- Snippets: script/style removal for markup, paragraph markup for plain text

Every function here is total: any input (including None) yields a string.
"""

import html
import re

CDATA_PATTERN = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.IGNORECASE | re.DOTALL)

# Straight and curly, single and double
QUOTE_CHARS = "\"'‘’“”"

ENTITY_PATTERN = re.compile(r"&[#A-Za-z0-9]+;")

# Unknown entities are left untouched.
TITLE_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&apos;": "'",
    "&#39;": "'",
    "&#039;": "'",
    "&nbsp;": " ",
    "&#8211;": "–",
    "&#8212;": "—",
    "&#8216;": "'",
    "&#8217;": "'",
    "&#8220;": '"',
    "&#8221;": '"',
}

# Any opening tag means the snippet is already markup
MARKUP_PATTERN = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)\b[^>]*>[\s\S]*?</\1\s*>", re.IGNORECASE)
UNCLOSED_SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)\b[\s\S]*$", re.IGNORECASE)

# Only complete tags; a bare "<" in text (e.g. "<3") is not a tag
TAG_PATTERN = re.compile(r"</?[A-Za-z][^>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")
PARAGRAPH_BREAK_PATTERN = re.compile(r"\n{2,}")


def _decode_entity(match: re.Match) -> str:
    token = match.group(0)
    return TITLE_ENTITIES.get(token, token)


def _sanitize_title_pass(text: str) -> str:
    text = text.strip()
    text = CDATA_PATTERN.sub(r"\1", text, count=1)
    text = text.strip().strip(QUOTE_CHARS).strip()
    return ENTITY_PATTERN.sub(_decode_entity, text)


def sanitize_title(raw: object) -> str:
    """
    Clean a headline for display.

    Repeats the cleaning pass until the text stops changing, so a value that
    was already sanitized comes back unchanged. Each pass that changes the
    text makes it shorter, which bounds the loop.
    """
    if raw is None:
        return ""
    text = str(raw)
    while True:
        cleaned = _sanitize_title_pass(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def sanitize_snippet(raw: object) -> str:
    """
    Make an excerpt safe to embed as HTML.

    Markup input keeps its tags minus any script/style blocks. Plain text is
    escaped and wrapped in <p> paragraphs (blank-line separated) with single
    newlines turned into <br/>.
    """
    if raw is None:
        return ""
    text = str(raw)
    if not text.strip():
        return ""

    if MARKUP_PATTERN.search(text):
        text = SCRIPT_STYLE_PATTERN.sub("", text)
        text = UNCLOSED_SCRIPT_STYLE_PATTERN.sub("", text)
        return text.strip()

    normalized = text.replace("\r\n", "\n").replace("\r", "\n").strip()
    paragraphs = [p.strip() for p in PARAGRAPH_BREAK_PATTERN.split(normalized)]
    return "".join(
        f"<p>{html.escape(p).replace(chr(10), '<br/>')}</p>" for p in paragraphs if p
    )


def unwrap_cdata(text: str | None) -> str:
    """Replace every CDATA section with its content."""
    if not text:
        return ""
    return CDATA_PATTERN.sub(r"\1", text)


def strip_tags(text: str | None) -> str:
    """
    Remove markup tags and collapse whitespace.

    Stripping repeats until no tag is left, so nested fragments such as
    "<<b>img ...>" cannot reassemble into a tag.
    """
    if not text:
        return ""
    text = unwrap_cdata(text)
    while True:
        stripped = TAG_PATTERN.sub("", text)
        if stripped == text:
            break
        text = stripped
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def html_to_text(text: str | None) -> str:
    """
    Reduce an HTML fragment to plain text.

    Entities are decoded before tags are stripped, so escaped markup
    ("&lt;p&gt;") goes too and the result carries no encoded entities.
    """
    if not text:
        return ""
    return strip_tags(html.unescape(unwrap_cdata(text)))


def truncate(text: str | None, limit: int) -> str:
    """Cut text to at most `limit` characters."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip()
