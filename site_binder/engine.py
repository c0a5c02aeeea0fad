# File: site_binder/engine.py
"""site_binder.engine: Orchestration — обнаружение, рендер страниц и склейка PDF."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

from aiohttp import ClientSession
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from site_binder.config import BinderConfig
from site_binder.crawler.cache import FetchCache
from site_binder.crawler.discovery import Discoverer
from site_binder.crawler.fetcher import Fetcher
from site_binder.errors import (
    ExtractionFailure,
    InvalidSeed,
    MergeFailure,
    NoPagesDiscovered,
    NoPagesRendered,
)
from site_binder.extractor import extract
from site_binder.layout.engine import PAGE_SIZES, layout, layout_fallback, render_pdf
from site_binder.logger import logger
from site_binder.parser.html_parser import extract_title, page_text
from site_binder.utils import is_http_url, normalize_url, same_origin

__all__ = (
    "PageRender",
    "CombinedDocument",
    "DocumentAssembler",
    "validate_seed",
    "merge_renders",
    "build_document",
    "crawl_to_document",
)


@dataclass(slots=True)
class PageRender:
    """Standalone PDF rendered for one source URL."""

    url: str
    title: str
    pdf: bytes
    page_count: int
    fallback: bool = False


@dataclass(slots=True)
class CombinedDocument:
    """Итоговый PDF и сведения о том, из чего он собран."""

    pdf: bytes
    sources: List[PageRender] = field(default_factory=list)
    discovered: List[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return sum(s.page_count for s in self.sources)

    def save(self, path: Union[str, Path]) -> Path:
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(self.pdf)
        return output


def validate_seed(seed: Any) -> str:
    """Нормализует seed или бросает InvalidSeed."""
    if not isinstance(seed, str):
        raise InvalidSeed(repr(seed))
    normalized = normalize_url(seed)
    if not is_http_url(normalized):
        raise InvalidSeed(seed)
    return normalized


def _append(writer: PdfWriter, render: PageRender) -> None:
    try:
        reader = PdfReader(BytesIO(render.pdf))
        pages = list(reader.pages)
    except (PyPdfError, ValueError, OSError) as exc:
        raise MergeFailure(render.url, str(exc)) from exc
    if not pages:
        raise MergeFailure(render.url, "render has no pages")
    first = len(writer.pages)
    for page in pages:
        writer.add_page(page)
    writer.add_outline_item(render.title, first)


def merge_renders(renders: List[PageRender], title: Optional[str] = None) -> Tuple[bytes, List[PageRender]]:
    """Склеивает PDF страниц по порядку; нечитаемые пропускаются.

    Returns:
        Байты итогового PDF и список реально вошедших в него рендеров.
    """
    writer = PdfWriter()
    merged: List[PageRender] = []
    for render in renders:
        try:
            _append(writer, render)
        except MergeFailure as exc:
            logger.error("! Skipping a page render: %s", exc)
            continue
        merged.append(render)
    writer.add_metadata({"/Producer": "SiteBinder", "/Title": title or "Documentation"})
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue(), merged


class DocumentAssembler:
    """Фасад: seed → Discoverer → (fetch, extract, layout) на каждую страницу → один PDF."""

    def __init__(
        self,
        config: Optional[BinderConfig] = None,
        cache: Optional[FetchCache] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config or BinderConfig()
        if cache is None and self.config.cache:
            cache = FetchCache()
        self.cache = cache
        self.session = session

    async def assemble(self, seed: str) -> CombinedDocument:
        seed = validate_seed(seed)
        start = time.monotonic()
        async with Fetcher(self.config, cache=self.cache, session=self.session) as fetcher:
            urls = await Discoverer(fetcher, self.config).discover(seed)
            if not urls:
                raise NoPagesDiscovered(seed)
            logger.info("Discovered %d URLs", len(urls))

            renders: List[PageRender] = []
            for i, url in enumerate(urls, 1):
                logger.info("[%d/%d] Rendering %s", i, len(urls), url)
                render = await self.render_page(fetcher, url)
                if render is not None:
                    renders.append(render)

        logger.info("Successfully rendered %d out of %d pages", len(renders), len(urls))
        if not renders:
            raise NoPagesRendered(len(urls))

        pdf, merged = merge_renders(renders, title=renders[0].title)
        if not merged:
            raise NoPagesRendered(len(urls))
        document = CombinedDocument(pdf, merged, urls)
        logger.info(
            "Combined document: %d page(s) from %d URL(s) in %.2f s",
            document.page_count,
            len(merged),
            time.monotonic() - start,
        )
        return document

    async def render_page(self, fetcher: Fetcher, url: str) -> Optional[PageRender]:
        """Render one URL to its own PDF; ``None`` when it has to be skipped."""
        result = await fetcher.fetch(url, self.config.render_timeout)
        if not result.ok:
            logger.warning("! Render skipped for %s: %s", url, result.error)
            return None
        if self.config.same_origin_only and not same_origin(url, result.location):
            logger.warning("! Render skipped for %s: redirected off-site to %s", url, result.location)
            return None

        html = result.body
        title = extract_title(html, url)
        page_size = PAGE_SIZES[self.config.page_format]
        fallback = False
        try:
            blocks = extract(html, self.config.max_blocks)
            logger.debug("%s: %d content blocks", url, len(blocks))
            pages = layout(
                blocks,
                page_size,
                self.config.margin,
                scale=self.config.scale,
                title=title,
                url=url,
            )
        except ExtractionFailure as exc:
            text = page_text(html)
            if not text:
                logger.warning("! Nothing to render for %s: %s", url, exc)
                return None
            logger.warning("Extraction failed for %s (%s), using fallback page", url, exc)
            pages = layout_fallback(title, url, text, page_size, self.config.margin, scale=self.config.scale)
            fallback = True

        return PageRender(url, title, render_pdf(pages, title), len(pages), fallback)


async def build_document(config: BinderConfig, seed_url: str) -> CombinedDocument:
    """Собрать документ в новом DocumentAssembler; точка входа для CLI."""
    return await DocumentAssembler(config).assemble(seed_url)


async def crawl_to_document(
    seed_url: str,
    output_name: Union[str, Path, None] = None,
    options: Union[BinderConfig, Mapping[str, Any], None] = None,
) -> Optional[bytes]:
    """
    Обойти сайт от seed_url и собрать один PDF.

    Если задан output_name, PDF записывается туда и возвращается None;
    иначе возвращаются байты PDF.

    Raises:
        InvalidSeed, NoPagesDiscovered, NoPagesRendered
    """
    if options is None:
        config = BinderConfig()
    elif isinstance(options, BinderConfig):
        config = options
    else:
        config = BinderConfig(**dict(options))

    document = await build_document(config, seed_url)
    if output_name is None:
        return document.pdf
    saved = document.save(output_name)
    logger.info(
        "Saved %s (%d page(s) discovered, %d rendered)",
        saved,
        len(document.discovered),
        len(document.sources),
    )
    return None
