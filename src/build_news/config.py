"""Configuration loader for build_news.

The sources document is YAML or JSON (PyYAML reads both)::

    max_items: 80
    defaults: {hl: pt-BR, gl: BR, ceid: "BR:pt-419"}
    sources:
      - {name: G1, type: rss, rss: "https://g1.globo.com/rss/g1/"}
      - {name: Cidade, type: google_news, query: "Curitiba prefeitura", scope: LOCAL}
"""

from __future__ import annotations

import logging
from pathlib import Path

from common.config import load_yaml
from build_news.models import (
    DEFAULT_LOCALE,
    KIND_ALIASES,
    BuildConfig,
    ConfigError,
    SourceConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_NAME = "Fonte"

# Top-level run settings that may be overridden from the sources document
_SETTINGS = {
    "max_items": int,
    "max_items_per_source": int,
    "request_timeout": float,
    "image_timeout": float,
    "max_image_bytes": int,
    "enrich_delay": float,
    "run_timeout": float,
    "image_url_prefix": str,
    "user_agent": str,
}


def load_config(path: Path) -> BuildConfig:
    """Load the sources document at `path` into a BuildConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: If the document is not a mapping or has no usable sources list.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        data = load_yaml(path)
    except Exception as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    return parse_config(data)


def parse_config(data: dict) -> BuildConfig:
    """Parse a config dictionary into a BuildConfig."""
    if not isinstance(data, dict):
        raise ConfigError("Config document must be a mapping")

    raw_sources = data.get("sources") or []
    if not isinstance(raw_sources, list):
        raise ConfigError("'sources' must be a list")

    defaults = dict(DEFAULT_LOCALE)
    defaults.update({k: str(v) for k, v in (data.get("defaults") or {}).items() if v})

    sources = []
    for index, raw in enumerate(raw_sources):
        if not isinstance(raw, dict):
            logger.warning("Ignoring source #%d: expected a mapping, got %r", index + 1, raw)
            continue
        sources.append(_parse_source(raw))

    config = BuildConfig(sources=sources, defaults=defaults)
    for key, convert in _SETTINGS.items():
        if data.get(key) is None:
            continue
        try:
            setattr(config, key, convert(data[key]))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {key}: {data[key]!r}") from e

    if config.max_items <= 0:
        raise ConfigError(f"max_items must be positive, got {config.max_items}")

    _warn_duplicate_names(config.sources)
    return config


def _parse_source(raw: dict) -> SourceConfig:
    kind = str(raw.get("type") or raw.get("kind") or "rss").strip().lower()
    return SourceConfig(
        name=str(raw.get("name") or DEFAULT_SOURCE_NAME).strip(),
        kind=KIND_ALIASES.get(kind, kind),
        url=str(raw.get("rss") or raw.get("url") or "").strip(),
        query=str(raw.get("query") or raw.get("q") or "").strip(),
        topic=str(raw.get("topic") or "").strip(),
        hl=str(raw.get("hl") or ""),
        gl=str(raw.get("gl") or ""),
        ceid=str(raw.get("ceid") or ""),
        scope=str(raw.get("scope") or ""),
        city=str(raw.get("city") or ""),
        logo=str(raw.get("logo") or ""),
        enrich=_as_bool(raw.get("enrich", True)),
    )


def _warn_duplicate_names(sources: list[SourceConfig]) -> None:
    seen = set()
    for source in sources:
        if source.name in seen:
            logger.warning("Duplicate source name: %s (item IDs will share a namespace)", source.name)
        seen.add(source.name)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)
