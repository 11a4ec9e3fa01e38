"""Helper functions for the build_news CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from common.cli_helpers import positive_int
from common.config import env_path

DEFAULT_SOURCES_PATH = Path("data") / "news_sources.yaml"
DEFAULT_OUT_PATH = Path("docs") / "data" / "news.json"
DEFAULT_IMG_DIR = Path("docs") / "data" / "img"


def parse_build_news_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    '''Parse CLI arguments for build_news.'''

    parser = argparse.ArgumentParser(
        description="Build the news manifest from the configured feeds."
    )
    parser.add_argument(
        "--sources",
        type=Path,
        default=None,
        help="Sources document, YAML or JSON (default: $NEWS_SOURCES or data/news_sources.yaml).",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Manifest path (default: $NEWS_OUT or docs/data/news.json).",
    )
    parser.add_argument(
        "--img-dir",
        type=Path,
        default=None,
        help="Image cache directory (default: $NEWS_IMG_DIR or docs/data/img).",
    )
    parser.add_argument("--max-items", type=positive_int, default=None)
    parser.add_argument(
        "--timeout",
        type=positive_int,
        default=None,
        help="Run time budget in seconds; partial results are still written.",
    )
    parser.add_argument(
        "--shuffle",
        action="store_true",
        help="Shuffle the final item list (off by default; output is otherwise deterministic).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for --shuffle.")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    # Environment (and .env) fill in whatever was not given on the command line
    if args.sources is None:
        args.sources = env_path("NEWS_SOURCES", DEFAULT_SOURCES_PATH)
    if args.out is None:
        args.out = env_path("NEWS_OUT", DEFAULT_OUT_PATH)
    if args.img_dir is None:
        args.img_dir = env_path("NEWS_IMG_DIR", DEFAULT_IMG_DIR)
    return args
