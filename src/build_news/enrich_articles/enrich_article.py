"""Article enrichment: recover image and publish time from the article page.

Used only when the feed itself did not provide them. Every step may fail on
its own; a failure just leaves the corresponding field empty.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

import requests

from common import http
from build_news.enrich_articles.extract_metadata import (
    extract_image,
    extract_published,
    parse_html,
)

logger = logging.getLogger(__name__)

READER_PROXY = "https://r.jina.ai/http://"


@dataclass
class Enrichment:
    """What the article page told us."""
    image_url: str = ""
    published: str = ""
    final_url: str = ""


class FetchStrategy:
    """One way of obtaining an article's HTML."""

    name = "base"

    def fetch(self, url: str, timeout: float, user_agent: Optional[str]) -> str:
        raise NotImplementedError


class DirectFetch(FetchStrategy):
    """GET the article itself."""

    name = "direct"

    def fetch(self, url: str, timeout: float, user_agent: Optional[str]) -> str:
        response = http.get(url, timeout, user_agent=user_agent, accept=http.HTML_ACCEPT)
        response.raise_for_status()
        return response.text


class ReaderProxyFetch(FetchStrategy):
    """Read-only rendering proxy, for publishers that block bots."""

    name = "reader-proxy"

    def __init__(self, prefix: str = READER_PROXY):
        self.prefix = prefix

    def proxy_url(self, url: str) -> str:
        return self.prefix + re.sub(r"^https?://", "", url, flags=re.IGNORECASE)

    def fetch(self, url: str, timeout: float, user_agent: Optional[str]) -> str:
        response = http.get(self.proxy_url(url), timeout, user_agent=user_agent)
        response.raise_for_status()
        return response.text


DEFAULT_STRATEGIES: tuple[FetchStrategy, ...] = (DirectFetch(), ReaderProxyFetch())


class ArticleEnricher:
    """Resolves redirects and scrapes og:image / published time from articles."""

    def __init__(
        self,
        timeout: float = 20.0,
        user_agent: Optional[str] = None,
        strategies: Sequence[FetchStrategy] = DEFAULT_STRATEGIES,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.strategies = tuple(strategies)

    def enrich(self, url: str) -> Enrichment:
        """Never raises; missing data comes back as empty strings."""
        if not url:
            return Enrichment()

        final_url = self.resolve_final_url(url)
        page = self.fetch_html(final_url)
        if not page:
            return Enrichment(final_url=final_url)

        tree = parse_html(page)
        if tree is None:
            return Enrichment(final_url=final_url)

        try:
            return Enrichment(
                image_url=extract_image(tree, final_url),
                published=extract_published(tree),
                final_url=final_url,
            )
        except Exception as e:
            logger.warning("Metadata extraction failed for %s: %s", final_url, e)
            return Enrichment(final_url=final_url)

    def resolve_final_url(self, url: str) -> str:
        """Follow redirects with a GET (HEAD is often blocked); body is not read."""
        try:
            response = http.get(url, self.timeout, user_agent=self.user_agent, stream=True)
            try:
                return response.url or url
            finally:
                response.close()
        except requests.RequestException as e:
            logger.debug("Could not resolve %s: %s", url, e)
            return url

    def fetch_html(self, url: str) -> str:
        """First non-empty page from the strategies, in order."""
        for strategy in self.strategies:
            try:
                page = strategy.fetch(url, self.timeout, self.user_agent)
            except Exception as e:
                logger.warning("%s fetch failed for %s: %s", strategy.name, url, e)
                continue
            if page and page.strip():
                return page
            logger.debug("%s fetch returned no content for %s", strategy.name, url)
        return ""
