from __future__ import annotations
import re


_TAG_RE = re.compile(r"</?[^>]+(>|$)")
_BR_RE = re.compile(r"<\s*br\s*/?>", re.IGNORECASE)
_ANY_TAG_RE = re.compile(r"<[^>]*>")


def strip_tags(html) -> str:
    """Remove tag-like substrings, leaving the text untouched otherwise."""
    return _TAG_RE.sub("", str(html or ""))


def html_to_text(html) -> str:
    """Plain-text rendering of a product description.

    ``<br>`` becomes a newline, all other tags are dropped, whitespace before a
    newline is removed and runs of three or more newlines collapse to one
    blank line.
    """
    s = _BR_RE.sub("\n", str(html or ""))
    s = _ANY_TAG_RE.sub("", s)
    s = re.sub(r"\s+\n", "\n", s)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()
