"""Text cleanup for titles and summaries."""

import re
from html import unescape
from typing import Optional

SUMMARY_MAX_CHARS = 220
ELLIPSIS = "…"

# "Headline - Publisher", "Headline – Publisher", "Headline | Publisher"
_TITLE_SUFFIX = re.compile(r"^(?P<head>.+?)\s+[-–—|]\s+(?P<suffix>[^-–—|]+?)\s*$")


def clean_text(text: Optional[str]) -> str:
    """Strip HTML tags, decode entities and collapse whitespace."""
    if not text:
        return ""
    # Strip HTML tags (keep text content)
    text = re.sub(r"<[^>]+>", " ", text)
    # Entities may be double encoded (&amp;amp;) in some feeds
    text = unescape(unescape(text))
    # Decoding can surface markup that was entity-encoded
    text = re.sub(r"<[^>]+>", " ", text)
    # Remove escaped quotes
    text = text.replace('\\"', '"')
    # Collapse whitespace
    return re.sub(r"\s+", " ", text).strip()


def truncate_summary(summary: str, limit: int = SUMMARY_MAX_CHARS) -> str:
    """Cap a summary at `limit` characters, marking truncation with an ellipsis."""
    if len(summary) <= limit:
        return summary
    return summary[:limit].rstrip() + ELLIPSIS


def trim_source_suffix(title: str, source_name: str = "", any_suffix: bool = False) -> str:
    """Drop a trailing " - Publisher" from a headline.

    Google News appends the publisher to every headline, so with
    `any_suffix` the last segment is removed whatever it says. Otherwise it is
    only removed when it repeats `source_name`. The title is never emptied.
    """
    m = _TITLE_SUFFIX.match(title)
    if not m:
        return title
    head, suffix = m.group("head").strip(), m.group("suffix").strip()
    if not head:
        return title
    if any_suffix or (source_name and suffix.casefold() == source_name.strip().casefold()):
        return head
    return title
