"""Hashing utilities."""

import hashlib


def generate_item_id(source: str, url: str) -> str:
    """Generate a stable item ID from source and URL (or title when no URL)."""
    return hashlib.sha256(f"{source}:{url}".encode()).hexdigest()[:16]


def image_key(url: str) -> str:
    """Cache key for a remote image: SHA-1 of the remote URL, not its bytes."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


def url_hash(url: str) -> str:
    """Dedup key for an article URL."""
    return hashlib.sha256(url.strip().encode("utf-8")).hexdigest()[:16]
