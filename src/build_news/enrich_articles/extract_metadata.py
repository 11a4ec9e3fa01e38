"""Metadata extraction from article HTML."""

import logging
from typing import Optional
from urllib.parse import urljoin

from lxml import etree
from lxml import html as lxml_html

logger = logging.getLogger(__name__)

IMAGE_META = ("og:image", "og:image:url", "og:image:secure_url", "twitter:image", "twitter:image:src")
TIME_META = ("article:published_time", "og:updated_time")


def parse_html(page: str) -> Optional[lxml_html.HtmlElement]:
    """Parse an HTML page, or return None if lxml cannot make sense of it."""
    if not page or not page.strip():
        return None
    try:
        return lxml_html.fromstring(page)
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        logger.debug("Unparseable HTML: %s", e)
        return None


def meta_content(tree: lxml_html.HtmlElement, key: str) -> str:
    """Content of the first <meta property=key> or <meta name=key> tag."""
    wanted = key.lower()
    for meta in tree.iter("meta"):
        name = (meta.get("property") or meta.get("name") or "").strip().lower()
        if name == wanted:
            content = (meta.get("content") or "").strip()
            if content:
                return content
    return ""


def extract_image(tree: lxml_html.HtmlElement, base_url: str = "") -> str:
    """og:image, then twitter:image; relative URLs resolved against base_url."""
    for key in IMAGE_META:
        content = meta_content(tree, key)
        if not content:
            continue
        if not base_url:
            return content
        try:
            return urljoin(base_url, content)
        except ValueError:
            logger.debug("Malformed %s URL: %s", key, content)
    return ""


def extract_published(tree: lxml_html.HtmlElement) -> str:
    """article:published_time, og:updated_time, then the first <time datetime>."""
    for key in TIME_META:
        content = meta_content(tree, key)
        if content:
            return content
    for node in tree.iter("time"):
        value = (node.get("datetime") or "").strip()
        if value:
            return value
    return ""
