"""Data models for the build_news pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

KIND_RSS = "rss"
KIND_GOOGLE_NEWS = "google_news"
KIND_ALIASES = {
    "rss": KIND_RSS,
    "atom": KIND_RSS,
    "google_news": KIND_GOOGLE_NEWS,
    "google_news_search": KIND_GOOGLE_NEWS,
}

DEFAULT_LOCALE = {"hl": "pt-BR", "gl": "BR", "ceid": "BR:pt-419"}


class SourceConfigError(ValueError):
    """A configured source cannot be turned into a feed URL."""


class ConfigError(ValueError):
    """The sources document exists but cannot be used."""


@dataclass(frozen=True)
class SourceConfig:
    """One configured feed."""
    name: str
    kind: str = KIND_RSS
    url: str = ""
    query: str = ""
    topic: str = ""
    hl: str = ""
    gl: str = ""
    ceid: str = ""
    scope: str = ""
    city: str = ""
    logo: str = ""
    enrich: bool = True


@dataclass
class BuildConfig:
    """Run configuration: sources plus limits and network budgets."""
    sources: list[SourceConfig] = field(default_factory=list)
    defaults: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LOCALE))
    max_items: int = 80
    max_items_per_source: int = 18
    request_timeout: float = 20.0
    image_timeout: float = 20.0
    max_image_bytes: int = 1_500_000
    enrich_delay: float = 0.25
    run_timeout: float = 900.0
    image_url_prefix: str = "./data/img/"
    user_agent: Optional[str] = None


@dataclass
class RawEntry:
    """Entry as extracted from a feed, before normalization."""
    title: str
    link: str = ""
    summary: str = ""
    published: str = ""
    image: str = ""


@dataclass
class NormalizedItem:
    """Item as published in the manifest."""
    id: str
    title: str
    summary: str
    source: str
    scope: str
    city: str
    published_at: str
    url: str
    image: str
    logo: str


@dataclass
class SourceCount:
    source: str
    count: int


@dataclass
class SourceFailure:
    source: str
    error: str
    url: Optional[str] = None


@dataclass
class ManifestStats:
    sources: int
    items_before_limit: int
    per_source: list[SourceCount] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)


@dataclass
class Manifest:
    """Output of one run, written as JSON for the presentation layer."""
    generated_at: str
    items: list[NormalizedItem]
    stats: ManifestStats
