# === FILE: site_binder/parser/html_parser.py ===
"""HTML helpers shared by discovery and rendering.

* :func:`extract_links` — absolute, fragment-free http(s) targets of every
  ``<a href>`` in document order (duplicates kept; the caller owns the
  seen-set).
* :func:`extract_title` — document title with the same fallbacks the page
  header uses.
* :func:`page_text` — visible text of the whole body, whitespace collapsed.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import List
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_binder.utils import normalize_url

__all__: Sequence[str] = ("extract_links", "extract_title", "page_text", "make_soup")

_WS_RE = re.compile(r"\s+")
_INVISIBLE = ["script", "style", "noscript", "template", "nav", "footer"]


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def extract_links(html: str, page_url: str) -> List[str]:
    """Extract http(s) links from *html*, resolved against *page_url*."""
    soup = make_soup(html)
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith(("mailto:", "javascript:", "tel:", "#")):
            continue
        try:
            absolute = urljoin(page_url, raw)
        except ValueError:
            continue
        if urlparse(absolute).scheme in ("http", "https"):
            links.append(normalize_url(absolute))
    return links


def extract_title(html: str, url: str = "") -> str:
    """``<title>``, else the first ``<h1>``, else the URL path."""
    soup = make_soup(html)
    for name in ("title", "h1"):
        tag = soup.find(name)
        if tag is not None:
            text = _WS_RE.sub(" ", tag.get_text(" ")).strip()
            if text:
                return text
    return urlparse(url).path or url or "Documentation Page"


def page_text(html: str) -> str:
    """Visible body text with scripts and navigation chrome removed."""
    soup = make_soup(html)
    for element in soup(_INVISIBLE):
        element.decompose()
    root = soup.body or soup
    return _WS_RE.sub(" ", root.get_text(" ")).strip()
