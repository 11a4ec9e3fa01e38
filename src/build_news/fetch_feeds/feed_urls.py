"""Feed URL construction for configured sources."""

from __future__ import annotations

from typing import Mapping, Optional
from urllib.parse import quote, urlparse

from build_news.models import (
    DEFAULT_LOCALE,
    KIND_GOOGLE_NEWS,
    KIND_RSS,
    SourceConfig,
    SourceConfigError,
)

GOOGLE_NEWS_SEARCH = "https://news.google.com/rss/search"
GOOGLE_NEWS_TOPICS = "https://news.google.com/rss/topics"
FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={host}&sz=64"


def build_feed_url(source: SourceConfig, defaults: Optional[Mapping[str, str]] = None) -> str:
    """Return the feed URL to fetch for `source`.

    Raises:
        SourceConfigError: If the source lacks the URL or query its kind needs.
    """
    if source.kind == KIND_RSS:
        if not source.url:
            raise SourceConfigError("missing rss url")
        return source.url

    if source.kind == KIND_GOOGLE_NEWS:
        locale = _locale(source, defaults or {})
        if source.query:
            return google_news_search_url(source.query, **locale)
        if source.topic:
            return google_news_topic_url(source.topic, **locale)
        raise SourceConfigError("missing query")

    raise SourceConfigError(f"unknown source type: {source.kind}")


def google_news_search_url(query: str, hl: str, gl: str, ceid: str) -> str:
    """Google News search-results RSS URL for `query`."""
    return f"{GOOGLE_NEWS_SEARCH}?q={quote(query, safe='')}&{_locale_params(hl, gl, ceid)}"


def google_news_topic_url(topic: str, hl: str, gl: str, ceid: str) -> str:
    """Google News topic RSS URL for a topic ID."""
    return f"{GOOGLE_NEWS_TOPICS}/{quote(topic, safe='')}?{_locale_params(hl, gl, ceid)}"


def favicon_for_url(url: str) -> str:
    """Favicon URL for the article's host, or "" if the URL has no host."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return ""
    if not host:
        return ""
    return FAVICON_SERVICE.format(host=host)


def _locale(source: SourceConfig, defaults: Mapping[str, str]) -> dict[str, str]:
    return {
        key: getattr(source, key) or defaults.get(key) or DEFAULT_LOCALE[key]
        for key in ("hl", "gl", "ceid")
    }


def _locale_params(hl: str, gl: str, ceid: str) -> str:
    return f"hl={quote(hl, safe='')}&gl={quote(gl, safe='')}&ceid={quote(ceid, safe='')}"
