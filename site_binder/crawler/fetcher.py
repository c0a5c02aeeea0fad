# site_binder/crawler/fetcher.py
"""
Fetcher module: direct HTTP requests with one fallback through a proxy relay.

:meth:`Fetcher.fetch` never raises; every outcome comes back as a
:class:`~site_binder.crawler.models.FetchResult`.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional
from urllib.parse import quote

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_binder.config import BinderConfig, ProxyConfig
from site_binder.crawler.cache import FetchCache
from site_binder.crawler.models import FetchResult
from site_binder.errors import TransportFailure
from site_binder.logger import logger

__all__ = ("Fetcher", "ProxyRelay")

_TEXT_HINTS = ("html", "xml", "text", "json")


class ProxyRelay:
    """Relay service that answers with the target body wrapped in a JSON envelope."""

    def __init__(self, config: ProxyConfig) -> None:
        self.url_template = config.url_template
        self.envelope_key = config.envelope_key

    def relay_url(self, url: str) -> str:
        return self.url_template.replace("{url}", quote(url, safe=""))

    def unwrap(self, url: str, envelope: Any) -> FetchResult:
        """Turn a decoded envelope into a result, or raise :class:`TransportFailure`."""
        if not isinstance(envelope, dict):
            raise TransportFailure(url, "proxy envelope is not a JSON object")
        contents = envelope.get(self.envelope_key)
        if not contents or not isinstance(contents, str):
            raise TransportFailure(url, f"proxy envelope has no {self.envelope_key!r}")
        status, content_type = 200, "text/html"
        meta = envelope.get("status")
        if isinstance(meta, dict):
            if isinstance(meta.get("http_code"), int):
                status = meta["http_code"]
            if isinstance(meta.get("content_type"), str) and meta["content_type"]:
                content_type = meta["content_type"]
        error = None if 200 <= status < 300 else f"HTTP {status} (via proxy)"
        return FetchResult(url, status, contents, content_type, error=error, via_proxy=True)


class Fetcher:
    """Fetches URLs for discovery and rendering; owns the aiohttp session."""

    def __init__(
        self,
        config: BinderConfig,
        cache: Optional[FetchCache] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config
        self.cache = cache
        self.session = session
        self._owns_session = session is None
        self.proxy = ProxyRelay(config.proxy) if config.proxy else None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Fetch *url* directly; on a network-level error retry once via the proxy.

        Non-2xx answers are failures but are not retried: the server did respond.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")
        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                logger.debug("Cache hit: %s", url)
                return cached

        seconds = timeout if timeout is not None else self.config.timeout
        try:
            result = await self._direct(url, seconds)
        except (ClientError, asyncio.TimeoutError) as exc:
            reason = str(exc) or type(exc).__name__
            logger.debug("Direct fetch failed for %s: %s", url, reason)
            result = await self._fallback(url, seconds, reason)

        if result.ok:
            if self.cache is not None:
                self.cache.put(result)
        else:
            logger.debug("Fetch of %s unusable: %s", url, result.error)
        return result

    async def _direct(self, url: str, seconds: float) -> FetchResult:
        assert self.session is not None
        async with self.session.get(url, timeout=ClientTimeout(total=seconds)) as resp:
            content_type = resp.headers.get("Content-Type", "")
            body = ""
            if not content_type or any(h in content_type.lower() for h in _TEXT_HINTS):
                body = await resp.text(errors="replace")
            error = None if 200 <= resp.status < 300 else f"HTTP {resp.status}"
            return FetchResult(url, resp.status, body, content_type, error=error, final_url=str(resp.url))

    async def _fallback(self, url: str, seconds: float, reason: str) -> FetchResult:
        if self.proxy is None:
            return FetchResult(url, error=reason)
        logger.info("Direct request to %s failed, trying proxy relay", url)
        try:
            return await self._via_proxy(url, seconds)
        except (ClientError, asyncio.TimeoutError, TransportFailure) as exc:
            logger.warning("Proxy relay failed for %s: %s", url, exc)
            return FetchResult(url, error=f"{reason}; proxy: {exc or type(exc).__name__}", via_proxy=True)

    async def _via_proxy(self, url: str, seconds: float) -> FetchResult:
        assert self.session is not None and self.proxy is not None
        relay = self.proxy.relay_url(url)
        async with self.session.get(relay, timeout=ClientTimeout(total=seconds)) as resp:
            if not 200 <= resp.status < 300:
                raise TransportFailure(url, f"proxy answered HTTP {resp.status}", resp.status)
            try:
                envelope = await resp.json(content_type=None)
            except ValueError as exc:
                raise TransportFailure(url, f"proxy envelope is not JSON: {exc}") from exc
        return self.proxy.unwrap(url, envelope)
