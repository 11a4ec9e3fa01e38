"""Feed fetching."""

import logging

from common import http
from build_news.fetch_feeds.parse_feed import parse_feed
from build_news.models import RawEntry

logger = logging.getLogger(__name__)


def fetch_feed_bytes(url: str, timeout: float, user_agent: str | None = None) -> bytes:
    """Download a feed document.

    Raises:
        requests.RequestException: On network errors and HTTP error statuses.
    """
    response = http.get(url, timeout, user_agent=user_agent, accept=http.FEED_ACCEPT)
    response.raise_for_status()
    return response.content


def fetch_feed(url: str, timeout: float, user_agent: str | None = None) -> list[RawEntry]:
    """Download and parse a feed into RawEntry records."""
    content = fetch_feed_bytes(url, timeout, user_agent)
    entries = parse_feed(content)
    logger.info("Parsed %d entries from %s", len(entries), url)
    return entries
