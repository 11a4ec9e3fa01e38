"""Content-addressed image cache.

Images are keyed by a hash of their remote URL so each distinct URL is
downloaded at most once, however many runs reference it. After a run,
`sweep` removes everything the new manifest no longer points at.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional
from urllib.parse import urlparse

from common import http
from common.hashing import image_key
from build_news.image_cache.store import ImageStore, key_of
from build_news.models import NormalizedItem

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 1_500_000
DEFAULT_EXT = ".jpg"

CONTENT_TYPE_EXT = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/avif": ".avif",
    "image/svg+xml": ".svg",
}
_URL_EXT = re.compile(r"\.(jpe?g|png|webp|gif|avif)$", re.IGNORECASE)


class ImageTooLarge(Exception):
    """Image exceeds the size ceiling."""


def guess_ext(content_type: str, url: str = "") -> str:
    """Extension from the content type, then the URL path, defaulting to .jpg."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime in CONTENT_TYPE_EXT:
        return CONTENT_TYPE_EXT[mime]
    m = _URL_EXT.search(urlparse(url).path) if url else None
    if m:
        return "." + m.group(1).lower().replace("jpeg", "jpg")
    return DEFAULT_EXT


class ImageCache:
    """Downloads remote images into an ImageStore and hands out local paths."""

    def __init__(
        self,
        store: ImageStore,
        url_prefix: str = "./data/img/",
        timeout: float = 20.0,
        max_bytes: int = MAX_IMAGE_BYTES,
        user_agent: Optional[str] = None,
    ):
        self.store = store
        self.url_prefix = url_prefix
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.user_agent = user_agent

    def fetch_and_cache(self, remote_url: str) -> str:
        """Local path for `remote_url`, downloading it if not cached yet.

        Returns "" when the URL is empty or the download fails or is rejected.
        """
        remote_url = (remote_url or "").strip()
        if not remote_url.lower().startswith(("http://", "https://")):
            return ""

        key = image_key(remote_url)
        existing = self.store.find(key)
        if existing:
            return self.url_prefix + existing

        try:
            data, content_type, final_url = self.download(remote_url)
        except ImageTooLarge as e:
            logger.info("Skipping image %s: %s", remote_url, e)
            return ""
        except Exception as e:
            logger.warning("Image download failed for %s: %s", remote_url, e)
            return ""

        ext = guess_ext(content_type, final_url or remote_url)
        try:
            filename = self.store.put(key, data, ext)
        except OSError as e:
            logger.warning("Could not store image %s: %s", remote_url, e)
            return ""
        return self.url_prefix + filename

    def download(self, url: str) -> tuple[bytes, str, str]:
        """Fetch image bytes, enforcing the size ceiling while streaming.

        Raises:
            requests.RequestException: On network or HTTP errors.
            ImageTooLarge: If the image is bigger than max_bytes.
            ValueError: If the response is a text document, not an image.
        """
        response = http.get(
            url, self.timeout, user_agent=self.user_agent, accept=http.IMAGE_ACCEPT, stream=True
        )
        try:
            response.raise_for_status()
            content_type = response.headers.get("Content-Type", "")
            if content_type.lower().startswith("text/"):
                raise ValueError(f"not an image: {content_type}")

            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise ImageTooLarge(f"{declared} bytes declared")

            chunks = []
            size = 0
            for chunk in response.iter_content(chunk_size=64 * 1024):
                size += len(chunk)
                if size > self.max_bytes:
                    raise ImageTooLarge(f"more than {self.max_bytes} bytes")
                chunks.append(chunk)
            if not size:
                raise ValueError("empty response")
            return b"".join(chunks), content_type, response.url or url
        finally:
            response.close()

    def key_for_path(self, path: str) -> Optional[str]:
        """Cache key referenced by a manifest image path, if it is one of ours."""
        if not path or not path.startswith(self.url_prefix):
            return None
        return key_of(path[len(self.url_prefix):])

    def sweep(self, items: Iterable[NormalizedItem]) -> int:
        """Delete cached images not referenced by `items`; returns how many."""
        keep = {self.key_for_path(item.image) for item in items}
        keep.discard(None)

        removed = 0
        for key in self.store.list_keys():
            if key in keep:
                continue
            try:
                self.store.delete(key)
                removed += 1
            except OSError as e:
                logger.warning("Could not delete cached image %s: %s", key, e)
        logger.info("Image cache sweep: kept %d, removed %d", len(keep), removed)
        return removed
