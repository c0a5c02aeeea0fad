# File: site_binder/crawler/__init__.py
"""site_binder.crawler: Загрузка страниц и обнаружение URL сайта."""

from .cache import FetchCache
from .discovery import Discoverer
from .fetcher import Fetcher, ProxyRelay
from .models import FetchResult

__all__ = ["FetchCache", "Discoverer", "Fetcher", "FetchResult", "ProxyRelay"]
