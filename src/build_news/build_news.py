"""Build the news manifest from all configured sources."""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from common.datetime import to_iso
from common.utils import Deadline
from build_news.collect_sources.collect_source import collect_source
from build_news.enrich_articles.enrich_article import ArticleEnricher
from build_news.fetch_feeds.feed_urls import build_feed_url
from build_news.fetch_feeds.fetch_feed import fetch_feed
from build_news.image_cache.image_cache import ImageCache
from build_news.models import (
    BuildConfig,
    Manifest,
    ManifestStats,
    NormalizedItem,
    RawEntry,
    SourceConfigError,
    SourceCount,
    SourceFailure,
)

logger = logging.getLogger(__name__)

RUN_TIMEOUT_ERROR = "run timeout exceeded"


def build_news(
    config: BuildConfig,
    image_cache: ImageCache,
    enricher: Optional[ArticleEnricher] = None,
    *,
    fetch: Callable[..., list[RawEntry]] = fetch_feed,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    now: Optional[datetime] = None,
) -> Manifest:
    """Collect every source in order and return the capped, sorted manifest.

    A failing source is recorded in the stats and never stops the run. When
    the run timeout passes, the sources not reached yet are recorded as
    failures and whatever was collected so far is kept.
    """
    if enricher is None:
        enricher = ArticleEnricher(timeout=config.request_timeout, user_agent=config.user_agent)
    deadline = Deadline(config.run_timeout, clock)

    logger.info("Building news from %d sources", len(config.sources))

    items: list[NormalizedItem] = []
    per_source: list[SourceCount] = []
    failures: list[SourceFailure] = []
    seen_urls: set[str] = set()

    for index, source in enumerate(config.sources):
        if deadline.expired():
            skipped = config.sources[index:]
            logger.warning("Run timeout reached, skipping %d sources", len(skipped))
            failures.extend(SourceFailure(source=s.name, error=RUN_TIMEOUT_ERROR) for s in skipped)
            break

        try:
            feed_url = build_feed_url(source, config.defaults)
        except SourceConfigError as e:
            logger.error("Invalid source %s: %s", source.name, e)
            failures.append(SourceFailure(source=source.name, error=str(e)))
            continue

        # Sources past the budget are validated but not fetched
        budget = config.max_items - len(items)
        if budget <= 0:
            logger.info("Item budget of %d reached, not fetching %s", config.max_items, source.name)
            continue

        logger.info("Fetching %s from %s", source.name, feed_url)
        try:
            collected = collect_source(
                source,
                feed_url,
                config,
                budget=budget,
                image_cache=image_cache,
                enricher=enricher,
                seen_urls=seen_urls,
                deadline=deadline,
                fetch=fetch,
                sleep=sleep,
            )
        except Exception as e:
            logger.error("Failed to collect %s: %s", source.name, e)
            failures.append(SourceFailure(source=source.name, error=str(e), url=feed_url))
            continue

        items.extend(collected)
        per_source.append(SourceCount(source=source.name, count=len(collected)))

    items_before_limit = len(items)
    final_items = sort_items(items)[: config.max_items]

    logger.info(
        "%d items kept (%d collected), %d sources failed",
        len(final_items),
        items_before_limit,
        len(failures),
    )
    return Manifest(
        generated_at=to_iso(now or datetime.now(timezone.utc)),
        items=final_items,
        stats=ManifestStats(
            sources=len(config.sources),
            items_before_limit=items_before_limit,
            per_source=per_source,
            failures=failures,
        ),
    )


def sort_items(items: list[NormalizedItem]) -> list[NormalizedItem]:
    """Newest first; undated items last; ties keep collection order.

    Canonical ISO strings compare lexically in time order and "" is the
    smallest string, so a stable reverse sort is enough.
    """
    return sorted(items, key=lambda item: item.published_at, reverse=True)


def shuffle_items(items: list[NormalizedItem], seed: Optional[int] = None) -> list[NormalizedItem]:
    """Shuffled copy of `items`, for display variety. Opt-in only."""
    shuffled = list(items)
    random.Random(seed).shuffle(shuffled)
    return shuffled
