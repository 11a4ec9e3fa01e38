"""Manifest serialization and writing."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from common.datetime import to_iso
from common.serialization import serialize_dataclass
from build_news.models import Manifest, NormalizedItem

logger = logging.getLogger(__name__)


def item_to_dict(item: NormalizedItem) -> dict:
    """Manifest shape of an item, with the keys the news page reads."""
    return {
        "id": item.id,
        "title": item.title,
        "summary": item.summary,
        "source": item.source,
        "scope": item.scope,
        "city": item.city,
        "publishedAt": item.published_at,
        "url": item.url,
        "image": item.image,
        "logo": item.logo,
    }


def manifest_to_dict(manifest: Manifest) -> dict:
    stats = manifest.stats
    return {
        "generatedAt": manifest.generated_at,
        "items": [item_to_dict(item) for item in manifest.items],
        "stats": {
            "sources": stats.sources,
            "items_before_limit": stats.items_before_limit,
            "per_source": [serialize_dataclass(count) for count in stats.per_source],
            "failures": [serialize_dataclass(failure, drop_none=True) for failure in stats.failures],
        },
    }


def write_json(payload: dict[str, Any], path: Path) -> None:
    """Write JSON atomically: a temp file in the same directory, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        # mkstemp files are 0600
        os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def write_manifest(manifest: Manifest, path: Path) -> None:
    write_json(manifest_to_dict(manifest), path)
    logger.info("Wrote %s with %d items", path, len(manifest.items))


def write_missing_config_manifest(path: Path, sources_path: Path) -> None:
    """Empty manifest noting that the sources document was not found."""
    payload = {
        "generatedAt": to_iso(datetime.now(timezone.utc)),
        "items": [],
        "stats": {"error": f"missing {sources_path}"},
    }
    write_json(payload, path)
    logger.warning("Missing sources file %s; wrote empty manifest to %s", sources_path, path)
