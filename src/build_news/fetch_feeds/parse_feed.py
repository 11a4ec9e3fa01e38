"""Feed parsing: raw RSS/Atom bytes to RawEntry records."""

import logging
import re
from typing import Optional
from urllib.parse import urljoin

import feedparser

from common.utils import get_value
from build_news.clean_items.clean import clean_text
from build_news.models import RawEntry

logger = logging.getLogger(__name__)

_IMG_SRC = re.compile(r"""<img\b[^>]*?\bsrc\s*=\s*["']([^"']+)["']""", re.IGNORECASE)


def parse_feed(content: bytes) -> list[RawEntry]:
    """Parse feed bytes into RawEntry records in document order.

    RSS 2.0, RSS 1.0 and Atom are told apart by feedparser from the document
    structure. Entries without an extractable title are dropped. Input that
    is not a feed yields an empty list.
    """
    feed = feedparser.parse(content)

    if not feed.entries:
        if feed.get("bozo"):
            logger.warning("Document is not a readable feed: %s", feed.get("bozo_exception"))
        return []

    if feed.get("bozo"):
        # Recovered from malformed XML; whatever was salvaged is still used
        logger.debug("Feed parsed with errors: %s", feed.get("bozo_exception"))

    entries = []
    for entry in feed.entries:
        try:
            raw = parse_entry(entry)
        except Exception as e:
            logger.warning("Failed to parse entry: %s", e)
            continue
        if raw is not None:
            entries.append(raw)
    return entries


def parse_entry(entry) -> Optional[RawEntry]:
    """Extract one RawEntry, or None if the entry has no title."""
    title = clean_text(entry.get("title"))
    if not title:
        return None

    link = (entry.get("link") or "").strip()
    return RawEntry(
        title=title,
        link=link,
        summary=_entry_html(entry, prefer_content=False),
        published=(
            entry.get("published") or entry.get("updated") or entry.get("created") or ""
        ).strip(),
        image=absolute_url(extract_image(entry), link),
    )


def absolute_url(url: str, base: str = "") -> str:
    """Resolve relative and protocol-relative (//host/...) URLs against `base`."""
    if not url:
        return ""
    if url.startswith("//") and not base:
        base = "https:"
    if not base:
        return url
    try:
        return urljoin(base, url)
    except ValueError:
        return url


def extract_image(entry) -> str:
    """Pick the entry's image URL.

    Preference: image enclosure, media:content, media:thumbnail, then the
    first <img> in the full content or the description.
    """
    for enclosure in entry.get("enclosures") or []:
        href = get_value(enclosure, "href") or get_value(enclosure, "url")
        kind = (get_value(enclosure, "type") or "").lower()
        if href and (not kind or kind.startswith("image/")):
            return href.strip()

    for media in entry.get("media_content") or []:
        url = get_value(media, "url")
        medium = (get_value(media, "medium") or "").lower()
        kind = (get_value(media, "type") or "").lower()
        if not url or medium not in ("", "image"):
            continue
        if kind and not kind.startswith("image/"):
            continue
        return url.strip()

    for thumbnail in entry.get("media_thumbnail") or []:
        url = get_value(thumbnail, "url")
        if url:
            return url.strip()

    for html in (_entry_html(entry, prefer_content=True), entry.get("summary") or ""):
        m = _IMG_SRC.search(html)
        if m:
            return m.group(1).strip()

    return ""


def _entry_html(entry, prefer_content: bool) -> str:
    """Description/summary markup, or the full content:encoded body."""
    content = ""
    for block in entry.get("content") or []:
        value = get_value(block, "value")
        if value:
            content = value
            break
    summary = entry.get("summary") or entry.get("description") or ""
    if prefer_content:
        return content or summary
    return summary or content
