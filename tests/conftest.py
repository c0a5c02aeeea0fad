# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Dict

import pytest
import pytest_asyncio
from aiohttp import web

from site_binder.config import BinderConfig

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def html_page(body: str, title: str = "") -> str:
    head = f"<head><title>{title}</title></head>" if title else ""
    return f"<html>{head}<body>{body}</body></html>"


def html_response(body: str, title: str = "", status: int = 200) -> Handler:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(text=html_page(body, title), content_type="text/html", status=status)

    return handler


def status_response(status: int) -> Handler:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(status=status, text="nope", content_type="text/plain")

    return handler


def sitemap_xml(base: str, paths: list[str]) -> str:
    urls = "".join(f"<url><loc>{base}{p}</loc></url>" for p in paths)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{urls}</urlset>'
    )


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[Callable[..., Awaitable[str]]]:
    """
    Factory fixture: ``base = await serve({"/": handler, ...})``.

    Route values may also be callables taking the base URL and returning a
    handler, for pages that need absolute links to their own server.
    """
    runners: list[web.AppRunner] = []

    async def _start(routes: Dict[str, object]) -> str:
        port = unused_tcp_port_factory()
        base = f"http://127.0.0.1:{port}"
        app = web.Application()
        for path, handler in routes.items():
            if getattr(handler, "needs_base", False):
                handler = handler(base)  # type: ignore[operator]
            app.router.add_get(path, handler)  # type: ignore[arg-type]
        runner = web.AppRunner(app)
        await runner.setup()
        await web.TCPSite(runner, "127.0.0.1", port).start()
        runners.append(runner)
        return base

    yield _start
    for runner in runners:
        await runner.cleanup()


def with_base(factory: Callable[[str], Handler]) -> Callable[[str], Handler]:
    """Mark a handler factory that needs the server's base URL."""
    factory.needs_base = True  # type: ignore[attr-defined]
    return factory


@pytest.fixture()
def sitemap_route() -> Callable[[list[str]], Callable[[str], Handler]]:
    def _make(paths: list[str]) -> Callable[[str], Handler]:
        @with_base
        def factory(base: str) -> Handler:
            async def handler(_request: web.Request) -> web.Response:
                return web.Response(text=sitemap_xml(base, paths), content_type="application/xml")

            return handler

        return factory

    return _make


@pytest.fixture()
def basic_config() -> BinderConfig:
    """Fast timeouts, no cache, no proxy."""
    return BinderConfig(timeout=2.0, render_timeout=2.0, cache=False)


@pytest.fixture()
def dead_url(unused_tcp_port_factory) -> str:
    """URL on a port nobody listens on."""
    return f"http://127.0.0.1:{unused_tcp_port_factory()}/page"
