# site_binder/crawler/models.py
"""
Data models for the SiteBinder transport layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

_HTML_TYPES = ("text/html", "application/xhtml+xml")


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Outcome of one fetch: either a 2xx response or a failure reason."""

    url: str
    status: Optional[int] = None
    body: str = ""
    content_type: str = ""
    error: Optional[str] = None
    via_proxy: bool = False
    final_url: Optional[str] = None

    @property
    def location(self) -> str:
        """URL the content actually came from, after redirects."""
        return self.final_url or self.url

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300

    @property
    def mime(self) -> str:
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def is_html(self) -> bool:
        return self.mime in _HTML_TYPES

    @property
    def is_xml(self) -> bool:
        if "xml" in self.mime and self.mime not in _HTML_TYPES:
            return True
        # some servers send sitemaps as text/plain or octet-stream
        head = self.body.lstrip()[:200].lower()
        return head.startswith("<?xml") or head.startswith(("<urlset", "<sitemapindex"))
