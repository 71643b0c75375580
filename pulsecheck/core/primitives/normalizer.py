"""
Content normalizer: turns source-provided rich text into plain text.

Normalization is always: decode entities first, then strip markup.
Entity-encoded markup ("&lt;p&gt;") must become a literal tag before
stripping, otherwise it would survive as text.

Shared by every source client so filtering behaves identically
across sources.
"""

import html
from dataclasses import dataclass

from bs4 import BeautifulSoup

DEFAULT_MIN_LENGTH = 10

# Upper bound on decode/strip rounds for nested encodings
MAX_DECODE_PASSES = 8

# Bodies the sources substitute for removed content
DELETION_SENTINELS = ("[deleted]", "[removed]")


def decode_entities(text: str) -> str:
    """
    Decode HTML/XML character references into literal characters.

    Handles named (&amp; &lt; &gt; &quot; &apos; ...), decimal (&#39;)
    and hex (&#x27;) forms.
    """
    return html.unescape(text)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace (including non-breaking spaces) to one space."""
    return " ".join(text.split())


def strip_markup(text: str) -> str:
    """
    Remove all markup tags, keeping their text content.

    Uses an HTML parser rather than pattern matching, so attributes
    containing angle brackets and self-closing tags are handled. The
    parser also decodes any character references left in the text.
    """
    soup = BeautifulSoup(text, "html.parser")

    for tag in soup.find_all(["script", "style"]):
        tag.decompose()

    return collapse_whitespace(soup.get_text(" "))


def normalize_text(raw: str | None) -> str:
    """
    Normalize a raw source body: decode entities, then strip markup.

    Repeats until the text stops changing, so bodies encoded more than
    once ("&amp;lt;b&amp;gt;") come out without tags or references.

    Args:
        raw: Raw text as delivered by the source (may be None).

    Returns:
        Plain text with collapsed whitespace ("" for missing input).
    """
    if not raw:
        return ""

    text = raw
    for _ in range(MAX_DECODE_PASSES):
        normalized = strip_markup(decode_entities(text))
        if normalized == text:
            break
        text = normalized
    return text


@dataclass(frozen=True)
class ContentFilter:
    """Minimum-quality filter applied to normalized text."""

    min_length: int = DEFAULT_MIN_LENGTH
    sentinels: tuple[str, ...] = DELETION_SENTINELS

    def is_deleted(self, text: str) -> bool:
        """True if the text is exactly a removed/deleted marker."""
        return text.strip() in self.sentinels

    def passes(self, text: str) -> bool:
        """True if normalized text is long enough and not a deletion marker."""
        if self.is_deleted(text):
            return False
        return len(text) >= self.min_length
