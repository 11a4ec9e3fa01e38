"""Tests for build_news.build_news module."""

from datetime import datetime, timezone
from unittest.mock import Mock

import requests

from build_news.build_news import RUN_TIMEOUT_ERROR, build_news, shuffle_items, sort_items
from build_news.enrich_articles.enrich_article import ArticleEnricher, Enrichment
from build_news.image_cache.image_cache import ImageCache
from build_news.models import (
    BuildConfig,
    NormalizedItem,
    RawEntry,
    SourceConfig,
    SourceCount,
    SourceFailure,
)

NOW = datetime(2025, 12, 5, 12, 0, tzinfo=timezone.utc)

VALID = SourceConfig(name="G1", kind="rss", url="https://g1.globo.com/rss")
BROKEN = SourceConfig(name="Cidade", kind="google_news")
OTHER = SourceConfig(name="Folha", kind="rss", url="https://folha.uol.com.br/rss")


def _entries(prefix: str, count: int, start_day: int = 1) -> list[RawEntry]:
    return [
        RawEntry(
            title=f"{prefix} notícia {n}",
            link=f"https://{prefix.lower()}.example.com/{n}",
            summary="Resumo",
            published=f"2025-12-{start_day + n:02d}T10:00:00Z",
            image=f"https://cdn.example.com/{prefix}{n}.jpg",
        )
        for n in range(count)
    ]


def _fetch(feeds: dict):
    def fetch(url, timeout, user_agent=None):
        result = feeds[url]
        if isinstance(result, Exception):
            raise result
        return result
    return fetch


def _image_cache() -> Mock:
    cache = Mock(spec=ImageCache)
    cache.fetch_and_cache.side_effect = lambda url: "./data/img/" + url.rsplit("/", 1)[-1]
    cache.sweep.return_value = 0
    return cache


def _enricher() -> Mock:
    enricher = Mock(spec=ArticleEnricher)
    enricher.enrich.return_value = Enrichment()
    return enricher


def _config(sources, **overrides) -> BuildConfig:
    config = BuildConfig(sources=sources, enrich_delay=0)
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


def _item(title: str, published_at: str) -> NormalizedItem:
    return NormalizedItem(
        id=title, title=title, summary="", source="s", scope="", city="",
        published_at=published_at, url="", image="", logo="",
    )


class TestBuildNews:
    def test_broken_source_recorded_and_valid_source_kept(self) -> None:
        config = _config([VALID, BROKEN], max_items=5)
        fetch = _fetch({VALID.url: _entries("G1", 8)})

        manifest = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert manifest.stats.failures == [SourceFailure(source="Cidade", error="missing query")]
        assert len(manifest.items) == 5
        assert {item.source for item in manifest.items} == {"G1"}
        published = [item.published_at for item in manifest.items]
        assert published == sorted(published, reverse=True)
        assert manifest.stats.sources == 2
        assert manifest.stats.items_before_limit == 5
        assert manifest.stats.per_source == [SourceCount(source="G1", count=5)]
        assert manifest.generated_at == "2025-12-05T12:00:00Z"

    def test_unreachable_feed_recorded_with_url(self) -> None:
        config = _config([OTHER, VALID])
        fetch = _fetch({
            OTHER.url: requests.ConnectionError("connection refused"),
            VALID.url: _entries("G1", 2),
        })

        manifest = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert manifest.stats.failures == [
            SourceFailure(source="Folha", error="connection refused", url=OTHER.url)
        ]
        assert [item.title for item in manifest.items] == ["G1 notícia 1", "G1 notícia 0"]

    def test_sorted_across_sources(self) -> None:
        config = _config([VALID, OTHER])
        fetch = _fetch({
            VALID.url: _entries("G1", 2, start_day=1),
            OTHER.url: _entries("Folha", 2, start_day=2),
        })

        manifest = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert [item.published_at for item in manifest.items] == [
            "2025-12-03T10:00:00Z",
            "2025-12-02T10:00:00Z",
            "2025-12-02T10:00:00Z",
            "2025-12-01T10:00:00Z",
        ]
        # Equal instants keep collection order
        assert manifest.items[1].source == "G1"
        assert manifest.items[2].source == "Folha"

    def test_global_budget_stops_collection(self) -> None:
        third = SourceConfig(name="Terceira", url="https://terceira.example.com/rss")
        fetch = Mock(side_effect=_fetch({
            VALID.url: _entries("G1", 2),
            OTHER.url: _entries("Folha", 5),
            third.url: _entries("Terceira", 5),
        }))
        config = _config([VALID, OTHER, third], max_items=3)

        manifest = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert len(manifest.items) == 3
        assert manifest.stats.items_before_limit == 3
        assert manifest.stats.per_source == [
            SourceCount(source="G1", count=2),
            SourceCount(source="Folha", count=1),
        ]
        assert fetch.call_count == 2

    def test_duplicate_urls_across_sources(self) -> None:
        config = _config([VALID, OTHER])
        fetch = _fetch({VALID.url: _entries("G1", 2), OTHER.url: _entries("G1", 2)})

        manifest = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert len(manifest.items) == 2
        assert {item.source for item in manifest.items} == {"G1"}
        assert manifest.stats.per_source[1] == SourceCount(source="Folha", count=0)

    def test_ids_stable_across_runs(self) -> None:
        config = _config([VALID, OTHER])
        fetch = _fetch({VALID.url: _entries("G1", 3), OTHER.url: _entries("Folha", 3)})

        first = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)
        second = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert [item.id for item in first.items] == [item.id for item in second.items]
        assert len({item.id for item in first.items}) == 6

    def test_does_not_sweep_image_cache(self) -> None:
        cache = _image_cache()
        config = _config([VALID], max_items=1)
        build_news(config, cache, _enricher(), fetch=_fetch({VALID.url: _entries("G1", 3)}), now=NOW)
        cache.sweep.assert_not_called()

    def test_sources_after_spent_budget_still_validated(self) -> None:
        fetch = Mock(side_effect=_fetch({VALID.url: _entries("G1", 8), OTHER.url: _entries("Folha", 2)}))
        config = _config([VALID, OTHER, BROKEN], max_items=3)

        manifest = build_news(config, _image_cache(), _enricher(), fetch=fetch, now=NOW)

        assert manifest.stats.failures == [SourceFailure(source="Cidade", error="missing query")]
        assert len(manifest.items) == 3
        fetch.assert_called_once()

    def test_run_timeout_keeps_partial_results(self) -> None:
        clock = Mock(return_value=0.0)
        cache = _image_cache()

        def slow_download(url):
            clock.return_value = 1000.0
            return "./data/img/slow.jpg"

        cache.fetch_and_cache.side_effect = slow_download
        config = _config([VALID, OTHER], run_timeout=10)
        fetch = _fetch({VALID.url: _entries("G1", 3), OTHER.url: _entries("Folha", 3)})

        manifest = build_news(config, cache, _enricher(), fetch=fetch, clock=clock, now=NOW)

        assert [item.title for item in manifest.items] == ["G1 notícia 0"]
        assert manifest.stats.failures == [SourceFailure(source="Folha", error=RUN_TIMEOUT_ERROR)]
        assert manifest.stats.per_source == [SourceCount(source="G1", count=1)]

    def test_no_sources(self) -> None:
        manifest = build_news(_config([]), _image_cache(), _enricher(), fetch=_fetch({}), now=NOW)
        assert manifest.items == []
        assert manifest.stats.sources == 0
        assert manifest.stats.failures == []


class TestSortItems:
    def test_newest_first_undated_last(self) -> None:
        items = [
            _item("a", "2025-12-01T10:00:00Z"),
            _item("b", ""),
            _item("c", "2025-12-03T10:00:00Z"),
            _item("d", ""),
            _item("e", "2025-12-02T10:00:00Z"),
        ]
        assert [i.title for i in sort_items(items)] == ["c", "e", "a", "b", "d"]

    def test_does_not_mutate_input(self) -> None:
        items = [_item("a", "2025-12-01T10:00:00Z"), _item("b", "2025-12-02T10:00:00Z")]
        sort_items(items)
        assert [i.title for i in items] == ["a", "b"]


class TestShuffleItems:
    def test_same_seed_same_order(self) -> None:
        items = [_item(str(n), "") for n in range(20)]
        first = shuffle_items(items, seed=7)
        assert [i.title for i in first] == [i.title for i in shuffle_items(items, seed=7)]
        assert sorted(i.title for i in first) == sorted(i.title for i in items)
        assert [i.title for i in items] == [str(n) for n in range(20)]
