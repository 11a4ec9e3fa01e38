"""CLI for building the news manifest."""

from __future__ import annotations

import logging
import sys
from typing import Sequence

from dotenv import load_dotenv

from common.cli_helpers import setup_logging
from build_news.build_news import build_news, shuffle_items
from build_news.config import load_config
from build_news.enrich_articles.enrich_article import ArticleEnricher
from build_news.helpers import parse_build_news_args
from build_news.image_cache.image_cache import ImageCache
from build_news.image_cache.store import LocalImageStore
from build_news.manifest import write_manifest, write_missing_config_manifest

load_dotenv()

logger = logging.getLogger(__name__)


def run(args) -> int:
    if not args.sources.exists():
        write_missing_config_manifest(args.out, args.sources)
        return 0

    config = load_config(args.sources)
    if args.max_items is not None:
        config.max_items = args.max_items
    if args.timeout is not None:
        config.run_timeout = float(args.timeout)

    image_cache = ImageCache(
        LocalImageStore(args.img_dir),
        url_prefix=config.image_url_prefix,
        timeout=config.image_timeout,
        max_bytes=config.max_image_bytes,
        user_agent=config.user_agent,
    )
    enricher = ArticleEnricher(timeout=config.request_timeout, user_agent=config.user_agent)

    manifest = build_news(config, image_cache, enricher)
    if args.shuffle:
        manifest.items = shuffle_items(manifest.items, args.seed)

    write_manifest(manifest, args.out)
    # Only once the new manifest is live
    image_cache.sweep(manifest.items)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_build_news_args(argv)
    setup_logging(args.log_level)
    try:
        return run(args)
    except Exception:
        logger.exception("News build failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
