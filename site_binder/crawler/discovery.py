# site_binder/crawler/discovery.py
"""
URL discovery: sitemap first, breadth-first crawl when no sitemap is usable.

Everything runs in one coroutine, one request at a time, so the resulting
order depends only on the site, never on network latency.
"""
from __future__ import annotations

import time
from collections import deque
from typing import Deque, List, Set
from urllib.parse import urljoin, urlparse, urlunparse

from site_binder.config import BinderConfig
from site_binder.crawler.fetcher import Fetcher
from site_binder.logger import logger
from site_binder.parser.html_parser import extract_links
from site_binder.parser.sitemap_parser import parse_sitemap
from site_binder.utils import is_excluded, is_http_url, normalize_url, remove_duplicates, same_origin

__all__ = ("Discoverer", "sitemap_candidates")


def sitemap_candidates(seed: str) -> List[str]:
    """``sitemap.xml`` next to the seed, then at the site root."""
    parsed = urlparse(seed)
    root = urlunparse((parsed.scheme, parsed.netloc, "/sitemap.xml", "", "", ""))
    return remove_duplicates([urljoin(seed, "sitemap.xml"), root])


class Discoverer:
    """Produces the ordered, duplicate-free list of page URLs for one seed."""

    def __init__(self, fetcher: Fetcher, config: BinderConfig) -> None:
        self.fetcher = fetcher
        self.config = config

    async def discover(self, seed: str) -> List[str]:
        seed = normalize_url(seed)
        logger.info("Старт обнаружения: %s", seed)
        start = time.monotonic()
        urls = await self.from_sitemap(seed)
        source = "sitemap"
        if not urls:
            urls = await self.crawl(seed)
            source = "crawl"
        logger.info(
            "Обнаружено %d URL (%s) за %.2f с", len(urls), source, time.monotonic() - start
        )
        return urls

    # ------------------------------------------------------------------ #
    # Scope                                                              #
    # ------------------------------------------------------------------ #

    def in_scope(self, seed: str, url: str) -> bool:
        if not is_http_url(url):
            return False
        if self.config.same_origin_only and not same_origin(seed, url):
            return False
        return not is_excluded(url, self.config.exclude_patterns)

    def accepts(self, seed: str, url: str) -> bool:
        return self.in_scope(seed, url) and bool(self.config.url_filter(url))

    # ------------------------------------------------------------------ #
    # Sitemap                                                            #
    # ------------------------------------------------------------------ #

    async def from_sitemap(self, seed: str) -> List[str]:
        """Return sitemap URLs in scope, truncated to the budget; ``[]`` if none usable."""
        for candidate in sitemap_candidates(seed):
            locs = await self._sitemap_pages(candidate)
            if not locs:
                continue
            urls = [u for u in remove_duplicates([normalize_url(u) for u in locs]) if self.accepts(seed, u)]
            logger.debug("Sitemap %s: %d entries, %d in scope", candidate, len(locs), len(urls))
            if not urls:
                continue
            return urls[: self.config.max_pages]
        return []

    async def _sitemap_pages(self, sitemap_url: str) -> List[str]:
        result = await self.fetcher.fetch(sitemap_url, self.config.timeout)
        if not result.ok or not result.is_xml:
            return []
        sitemap = parse_sitemap(result.body)
        pages = list(sitemap.pages)
        # sitemap index: follow one level only
        for child in sitemap.children:
            if len(pages) >= self.config.max_pages:
                break
            if not is_http_url(child) or (self.config.same_origin_only and not same_origin(sitemap_url, child)):
                logger.debug("Skip child sitemap out of scope: %s", child)
                continue
            child_result = await self.fetcher.fetch(child, self.config.timeout)
            if child_result.ok and child_result.is_xml:
                pages.extend(parse_sitemap(child_result.body).pages)
        return pages

    # ------------------------------------------------------------------ #
    # Breadth-first crawl                                                #
    # ------------------------------------------------------------------ #

    async def crawl(self, seed: str) -> List[str]:
        seen: Set[str] = set()
        discovered: List[str] = []
        queue: Deque[str] = deque([seed])

        while queue and len(discovered) < self.config.max_pages:
            url = normalize_url(queue.popleft())
            if url in seen or not self.accepts(seed, url):
                continue
            seen.add(url)

            result = await self.fetcher.fetch(url, self.config.timeout)
            if not result.ok or not result.is_html or not result.body:
                logger.debug("Skip %s: %s", url, result.error or result.mime or "empty body")
                continue

            # after a redirect the page lives at its final URL
            page_url = normalize_url(result.location)
            if page_url != url:
                if page_url in seen or not self.accepts(seed, page_url):
                    logger.debug("Skip %s: redirected to %s", url, page_url)
                    continue
                seen.add(page_url)
            discovered.append(page_url)

            for link in extract_links(result.body, page_url):
                if link not in seen and self.in_scope(seed, link):
                    queue.append(link)
        return discovered
