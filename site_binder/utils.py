# File: site_binder/utils.py
"""site_binder.utils: Нормализация URL и фильтр области обхода."""

from __future__ import annotations

import re
from typing import Collection, Iterable, List, Sequence
from urllib.parse import urlparse, urlsplit, urlunsplit

from site_binder.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "same_origin",
    "is_excluded",
    "is_http_url",
    "remove_duplicates",
)

_EXCLUDED_RE = re.compile(
    r"(\.(png|jpe?g|gif|svg|ico|pdf|zip|mp4|webm|mp3)$)"
    r"|/(search|tags?|category|assets|_next|static|fonts?)\b",
    re.IGNORECASE,
)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """Убирает фрагмент, приводит схему и хост к нижнему регистру.

    Порт по умолчанию для схемы (80, 443) убирается. Путь и query не
    меняются, кроме пустого пути у корня сайта, который становится ``/``
    (``https://a.io`` и ``https://a.io:443/`` — одна страница).
    """
    base = url.strip().partition("#")[0]
    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        return base
    scheme, netloc = parts.scheme.lower(), parts.netloc.lower()
    default = f":{_DEFAULT_PORTS[scheme]}" if scheme in _DEFAULT_PORTS else None
    if default and netloc.endswith(default):
        netloc = netloc[: -len(default)]
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def _origin(url: str) -> tuple[str, str, int | None]:
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    try:
        port = parts.port
    except ValueError:
        port = None
    return scheme, parts.hostname or "", port or _DEFAULT_PORTS.get(scheme)


def same_origin(a: str, b: str) -> bool:
    """Совпадают ли схема, хост и порт (порт по умолчанию можно не указывать)."""
    return _origin(a) == _origin(b)


def is_excluded(url: str, extra_patterns: Iterable[str] = ()) -> bool:
    """Ассеты и служебные разделы (поиск, теги, статика) в документ не попадают."""
    path = urlparse(url).path
    if _EXCLUDED_RE.search(path):
        return True
    return any(re.search(p, url) for p in extra_patterns)


def is_http_url(url: str) -> bool:
    """Проверяет, что URL абсолютный и использует http(s)."""
    parsed = urlparse(url)
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.netloc)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
