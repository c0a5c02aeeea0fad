# File: site_binder/errors.py
"""site_binder.errors: Failure taxonomy of a crawl-to-document run.

Only :class:`InvalidSeed`, :class:`NoPagesDiscovered` and
:class:`NoPagesRendered` escape :func:`site_binder.engine.crawl_to_document`;
the rest are recovered where they are raised and only logged.
"""
from __future__ import annotations

__all__ = (
    "BinderError",
    "InvalidSeed",
    "TransportFailure",
    "ExtractionFailure",
    "NoPagesDiscovered",
    "NoPagesRendered",
    "MergeFailure",
)


class BinderError(Exception):
    """Base class for every SiteBinder failure."""


class InvalidSeed(BinderError, ValueError):
    """The seed does not parse as an http(s) URL."""

    def __init__(self, seed: str) -> None:
        super().__init__(f"Seed must be an http(s) URL, got {seed!r}")
        self.seed = seed


class TransportFailure(BinderError):
    """A single URL could not be fetched (network, timeout, non-2xx, proxy)."""

    def __init__(self, url: str, reason: str, status: int | None = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class ExtractionFailure(BinderError):
    """Fetched markup holds no usable content container or text."""


class NoPagesDiscovered(BinderError):
    """Discovery produced zero in-scope URLs."""

    def __init__(self, seed: str) -> None:
        super().__init__(
            f"No crawlable HTML pages were discovered from {seed}. "
            "The site may block direct requests or expose no links."
        )
        self.seed = seed


class NoPagesRendered(BinderError):
    """Every discovered URL failed to render."""

    def __init__(self, attempted: int) -> None:
        super().__init__(
            f"No pages could be rendered: attempted {attempted} URL(s) and all failed."
        )
        self.attempted = attempted


class MergeFailure(BinderError):
    """A per-page PDF could not be appended to the combined document."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Cannot merge render of {url}: {reason}")
        self.url = url
        self.reason = reason
