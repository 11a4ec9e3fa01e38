"""Shared HTTP settings for outbound requests."""

from __future__ import annotations

import requests

USER_AGENT = "news-feeds/1.0 (RSS reader; news builder)"

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
FEED_ACCEPT = "application/rss+xml,application/atom+xml,application/xml;q=0.9,*/*;q=0.8"
IMAGE_ACCEPT = "image/*"


def build_headers(user_agent: str | None = None, accept: str | None = None) -> dict[str, str]:
    """Headers sent with every request: a bot user agent plus an Accept value."""
    headers = {"User-Agent": user_agent or USER_AGENT}
    if accept:
        headers["Accept"] = accept
    return headers


def get(
    url: str,
    timeout: float,
    *,
    user_agent: str | None = None,
    accept: str | None = None,
    stream: bool = False,
) -> requests.Response:
    """GET with redirects followed and an explicit timeout."""
    return requests.get(
        url,
        timeout=timeout,
        headers=build_headers(user_agent, accept),
        allow_redirects=True,
        stream=stream,
    )
