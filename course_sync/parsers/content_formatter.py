"""
Reduction of LearnDash post content to lightweight plain text.

The export carries Gutenberg block markup with a small, predictable set
of inline and structural tags.  :func:`format_content` folds that subset
into a markdown-like text (``**bold**``, ``*italic*``, ``[text](href)``
and ``•`` bullets) that can be stored directly in a module description
or a lesson body.  Embedded players are dropped from the text; their
URLs are collected by :mod:`course_sync.parsers.media_extractor`, which
reads the same raw string independently.
"""

from __future__ import annotations

import re
from typing import List, Tuple

# Only this fixed table is decoded; any other entity is left untouched.
_ENTITIES: List[Tuple[str, str]] = [
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
    ("&#8217;", "'"),
    ("&#8216;", "'"),
    ("&#8211;", "–"),
    ("&#8212;", "—"),
    ("&#8220;", '"'),
    ("&#8221;", '"'),
    ("&nbsp;", " "),
]

_BLOCK_COMMENT = re.compile(r"<!--\s*/?wp:[^>]*?-->")
_BOLD = re.compile(r"<(strong|b)>([^<]*)</\1>", re.IGNORECASE)
_ITALIC = re.compile(r"<(em|i)>([^<]*)</\1>", re.IGNORECASE)
_LINK = re.compile(r"<a\b[^>]*href=\"([^\"]*)\"[^>]*>([^<]*)</a>", re.IGNORECASE)
_LIST_ITEM = re.compile(r"<li\b[^>]*>([^<]*)</li>", re.IGNORECASE)
_STRUCTURAL = re.compile(r"</?(?:ul|ol|p|div|span|figure|figcaption|blockquote|h[1-6])\b[^>]*>|<br\s*/?>", re.IGNORECASE)
_PLAYERS = re.compile(
    r"<(iframe|video)\b[^>]*>[\s\S]*?</\1>|<(?:iframe|video|embed)\b[^>]*/?>",
    re.IGNORECASE,
)
_EXTRA_NEWLINES = re.compile(r"\n{3,}")


def decode_entities(text: str) -> str:
    """Decode the HTML entities WordPress emits in titles and content."""
    if not text:
        return ""
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def format_content(raw_content: str) -> str:
    """
    Convert WordPress block content into markdown-like plain text.

    The steps are order sensitive: entities are decoded before any tag
    pattern runs, inline tags are rewritten before the structural ones
    are collapsed, and whitespace is normalized last.

    :param raw_content: The ``content:encoded`` body of an export item.
    :return: The reduced text, or an empty string.
    """
    content = decode_entities(raw_content)
    if not content:
        return ""

    content = _BLOCK_COMMENT.sub("", content)

    content = _BOLD.sub(r"**\2**", content)
    content = _ITALIC.sub(r"*\2*", content)
    content = _LINK.sub(r"[\2](\1)", content)

    content = _LIST_ITEM.sub(r"\n• \1", content)

    content = _STRUCTURAL.sub("\n", content)

    content = _PLAYERS.sub("", content)

    content = _EXTRA_NEWLINES.sub("\n\n", content)
    content = "\n".join(line.strip() for line in content.split("\n"))
    # Trimming lines can leave fresh runs of blank lines behind.
    content = _EXTRA_NEWLINES.sub("\n\n", content)
    return content.strip()
