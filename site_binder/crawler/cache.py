# site_binder/crawler/cache.py
"""
In-memory response cache, keyed by exact URL.

One instance belongs to one run (it is passed to :class:`Fetcher`), so two
runs never observe each other's responses.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Optional

from site_binder.crawler.models import FetchResult


class FetchCache:
    """Bounded LRU store of successful :class:`FetchResult` objects."""

    def __init__(self, max_entries: int = 512) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, FetchResult] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, url: str) -> Optional[FetchResult]:
        entry = self._entries.get(url)
        if entry is None:
            self.misses += 1
            return None
        self._entries.move_to_end(url)
        self.hits += 1
        return entry

    def put(self, result: FetchResult) -> None:
        """Store *result* if it is a success; failures are never cached."""
        if not result.ok:
            return
        self._entries[result.url] = result
        self._entries.move_to_end(result.url)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, url: object) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)
