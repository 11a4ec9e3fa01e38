"""Per-source collection: feed entries to normalized manifest items."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from common.datetime import normalize_date, to_iso
from common.hashing import generate_item_id, url_hash
from common.utils import Deadline
from build_news.clean_items.blocklist import is_blocked
from build_news.clean_items.clean import clean_text, trim_source_suffix, truncate_summary
from build_news.enrich_articles.enrich_article import ArticleEnricher
from build_news.fetch_feeds.feed_urls import favicon_for_url
from build_news.fetch_feeds.fetch_feed import fetch_feed
from build_news.image_cache.image_cache import ImageCache
from build_news.models import (
    KIND_GOOGLE_NEWS,
    BuildConfig,
    NormalizedItem,
    RawEntry,
    SourceConfig,
)

logger = logging.getLogger(__name__)


def collect_source(
    source: SourceConfig,
    feed_url: str,
    config: BuildConfig,
    *,
    budget: int,
    image_cache: ImageCache,
    enricher: ArticleEnricher,
    seen_urls: Optional[set[str]] = None,
    deadline: Optional[Deadline] = None,
    fetch: Callable[..., list[RawEntry]] = fetch_feed,
    sleep: Callable[[float], None] = time.sleep,
) -> list[NormalizedItem]:
    """Fetch one source's feed and normalize its entries in document order.

    Stops at the per-source cap, at `budget` (the global slots still open)
    or when the deadline passes. Entry-level problems are logged and the
    entry skipped; feed-level errors propagate to the caller.
    """
    entries = fetch(feed_url, config.request_timeout, config.user_agent)
    limit = min(config.max_items_per_source, budget)
    seen_urls = seen_urls if seen_urls is not None else set()

    items = []
    for entry in entries:
        if len(items) >= limit:
            break
        if deadline is not None and deadline.expired():
            logger.warning("Run deadline reached while collecting %s", source.name)
            break
        if entry.link and url_hash(entry.link) in seen_urls:
            logger.debug("Skipping duplicate %s", entry.link)
            continue

        try:
            item = normalize_entry(entry, source, config, image_cache, enricher, sleep=sleep)
        except Exception as e:
            logger.warning("Failed to normalize entry %r from %s: %s", entry.title, source.name, e)
            continue
        if item is None:
            continue

        key = url_hash(item.url or item.title)
        if key in seen_urls:
            logger.debug("Skipping duplicate %s", item.url)
            continue
        seen_urls.add(key)
        if entry.link:
            seen_urls.add(url_hash(entry.link))
        items.append(item)

    logger.info("Collected %d items from %s", len(items), source.name)
    return items


def normalize_entry(
    entry: RawEntry,
    source: SourceConfig,
    config: BuildConfig,
    image_cache: ImageCache,
    enricher: ArticleEnricher,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[NormalizedItem]:
    """Build the manifest item for one entry, or None if it is filtered out."""
    title = trim_source_suffix(
        clean_text(entry.title), source.name, any_suffix=source.kind == KIND_GOOGLE_NEWS
    )
    if not title:
        return None
    summary = clean_text(entry.summary)

    # Cheap rejection before any network call
    if is_blocked(title, summary):
        logger.debug("Blocked: %s", title)
        return None

    published = normalize_date(entry.published)
    image_url = entry.image
    url = entry.link

    if source.enrich and url and (not image_url or published is None):
        enrichment = enricher.enrich(url)
        if not image_url:
            image_url = enrichment.image_url
        if published is None:
            published = normalize_date(enrichment.published)
        url = enrichment.final_url or url
        if config.enrich_delay > 0:
            sleep(config.enrich_delay)

    image = image_cache.fetch_and_cache(image_url) if image_url else ""

    return NormalizedItem(
        id=generate_item_id(source.name, url or title),
        title=title,
        summary=truncate_summary(summary),
        source=source.name,
        scope=source.scope,
        city=source.city,
        published_at=to_iso(published),
        url=url,
        image=image,
        logo=source.logo or (favicon_for_url(url) if url else ""),
    )
