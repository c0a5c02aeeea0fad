# File: site_binder/layout/engine.py
"""Page layout for extracted content.

Layout and painting are separate steps:

* :func:`layout` flows a block sequence onto fixed-size pages and returns
  :class:`RenderedPage` objects holding positioned draw operations. It is a
  pure computation, which keeps pagination testable without a PDF reader.
* :func:`render_pdf` paints those pages onto a :mod:`reportlab` canvas.

Text width is estimated with an average character width of half the font
size, not real glyph metrics, so wrapping is approximate.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.pdfgen import canvas

from site_binder.extractor import BlockKind, ContentBlock
from site_binder.layout.styles import (
    FALLBACK_TITLE_STYLE,
    RGB,
    TITLE_STYLE,
    URL_STYLE,
    StyleRule,
    style_for,
)

__all__ = (
    "PAGE_SIZES",
    "TextLine",
    "Panel",
    "RenderedPage",
    "LayoutCursor",
    "wrap_text",
    "wrap_code",
    "layout",
    "layout_fallback",
    "render_pdf",
)

PAGE_SIZES = {"A4": A4, "Letter": LETTER}

CHAR_WIDTH_RATIO = 0.5
LINE_GAP = 4.0
BLOCK_GAP = 13.0
HEADER_GAP = 10.0
HEADER_AFTER = 20.0
MIN_SPACE = 100.0
CODE_PANEL_MIN = 25.0
CODE_PANEL_PAD = 5.0
FALLBACK_CHARS = 2000
FALLBACK_BOTTOM = 50.0

PageSize = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class TextLine:
    x: float
    y: float
    text: str
    font_name: str
    font_size: float
    color: RGB


@dataclass(frozen=True, slots=True)
class Panel:
    x: float
    y: float
    width: float
    height: float
    color: RGB


DrawOp = Union[TextLine, Panel]


@dataclass(slots=True)
class RenderedPage:
    """One fixed-size page of positioned draw operations (origin bottom-left)."""

    width: float
    height: float
    items: List[DrawOp] = field(default_factory=list)

    @property
    def lines(self) -> List[TextLine]:
        return [i for i in self.items if isinstance(i, TextLine)]

    @property
    def panels(self) -> List[Panel]:
        return [i for i in self.items if isinstance(i, Panel)]

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


@dataclass(slots=True)
class LayoutCursor:
    page: RenderedPage
    y: float


def line_height(font_size: float) -> float:
    return font_size + LINE_GAP


def wrap_text(text: str, font_size: float, max_width: float) -> List[str]:
    """Greedy word wrap; words longer than a whole line are hard-split."""
    max_chars = max(1, int(max_width // (font_size * CHAR_WIDTH_RATIO)))
    lines: List[str] = []
    current = ""
    for word in text.split():
        while len(word) > max_chars:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:max_chars])
            word = word[max_chars:]
        if not word:
            continue
        candidate = f"{current} {word}" if current else word
        if len(candidate) > max_chars and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class _Flow:
    """Vertical flow of lines over as many pages as needed."""

    def __init__(self, page_size: PageSize, margin: float) -> None:
        self.width, self.height = page_size
        self.margin = margin
        self.content_width = self.width - 2 * margin
        if self.content_width <= 0 or self.height - 2 * margin <= 0:
            raise ValueError("margins leave no room for content")
        self.pages: List[RenderedPage] = []
        self.cursor = self._fresh_cursor()

    @property
    def top(self) -> float:
        return self.height - self.margin

    def _fresh_cursor(self) -> LayoutCursor:
        page = RenderedPage(self.width, self.height)
        self.pages.append(page)
        return LayoutCursor(page, self.top)

    def new_page(self) -> None:
        self.cursor = self._fresh_cursor()

    def remaining(self) -> float:
        return self.cursor.y - self.margin

    def at_top(self) -> bool:
        return self.cursor.y >= self.top

    def draw_lines(self, lines: Sequence[str], style: StyleRule, *, overflow: bool = True) -> bool:
        """Draw *lines*; return False if they did not fit and *overflow* is off."""
        step = line_height(style.font_size)
        panel_start: Optional[Tuple[int, float]] = None
        for text in lines:
            if self.cursor.y - step < self.margin and not self.at_top():
                if not overflow:
                    return False
                self._close_panel(style, panel_start)
                self.new_page()
                panel_start = None
            if style.background is not None and panel_start is None:
                panel_start = (len(self.cursor.page.items), self.cursor.y)
            if text:
                self.cursor.page.items.append(
                    TextLine(
                        self.margin,
                        self.cursor.y - style.font_size,
                        text,
                        style.font_name,
                        style.font_size,
                        style.color,
                    )
                )
            self.cursor.y -= step
        self._close_panel(style, panel_start)
        return True

    def _close_panel(self, style: StyleRule, start: Optional[Tuple[int, float]]) -> None:
        if style.background is None or start is None:
            return
        index, top = start
        height = max(top - self.cursor.y, CODE_PANEL_MIN) + CODE_PANEL_PAD
        panel = Panel(
            self.margin - CODE_PANEL_PAD,
            top - height + CODE_PANEL_PAD,
            self.content_width + 2 * CODE_PANEL_PAD,
            height,
            style.background,
        )
        # the panel goes under the text it frames
        self.cursor.page.items.insert(index, panel)

    def header(self, title: str, url: Optional[str], title_style: StyleRule, scale: float) -> None:
        title_rule = title_style.scaled(scale)
        self.draw_lines(wrap_text(title, title_rule.font_size, self.content_width), title_rule)
        if url:
            self.cursor.y -= HEADER_GAP
            url_rule = URL_STYLE.scaled(scale)
            self.draw_lines(wrap_text(url, url_rule.font_size, self.content_width), url_rule)
        self.cursor.y -= HEADER_AFTER


def wrap_code(text: str, font_size: float, max_width: float) -> List[str]:
    """Keep source lines and indentation; only overlong lines are cut."""
    max_chars = max(1, int(max_width // (font_size * CHAR_WIDTH_RATIO)))
    lines: List[str] = []
    for source_line in text.expandtabs(4).splitlines():
        source_line = source_line.rstrip()
        if not source_line:
            lines.append("")
            continue
        while len(source_line) > max_chars:
            lines.append(source_line[:max_chars])
            source_line = source_line[max_chars:]
        lines.append(source_line)
    return lines


def _block_lines(block: ContentBlock, style: StyleRule, width: float) -> List[str]:
    if block.kind is BlockKind.CODE:
        return wrap_code(block.text, style.font_size, width)
    return wrap_text(style.marker + block.text, style.font_size, width)


def layout(
    blocks: Iterable[ContentBlock],
    page_size: PageSize = A4,
    margin: float = 50.0,
    *,
    scale: float = 1.0,
    title: Optional[str] = None,
    url: Optional[str] = None,
    min_space: float = MIN_SPACE,
) -> List[RenderedPage]:
    """Lay out *blocks* onto pages of *page_size* (points).

    When *title* is given, the first page starts with a header made of the
    title and the source *url*. A block never starts on a page with less
    than *min_space* points left; lines that still overflow continue on a
    fresh page with the cursor back at the top.
    """
    flow = _Flow(page_size, margin)
    if title:
        flow.header(title, url, TITLE_STYLE, scale)

    for block in blocks:
        style = style_for(block, scale)
        if flow.remaining() < min_space and not flow.at_top():
            flow.new_page()
        if style.space_before and not flow.at_top():
            flow.cursor.y -= style.space_before
        flow.draw_lines(_block_lines(block, style, flow.content_width), style)
        flow.cursor.y -= BLOCK_GAP
    return flow.pages


def layout_fallback(
    title: str,
    url: str,
    text: str,
    page_size: PageSize = A4,
    margin: float = 50.0,
    *,
    scale: float = 1.0,
    max_chars: int = FALLBACK_CHARS,
) -> List[RenderedPage]:
    """Single page with title, URL and the start of the raw page text."""
    flow = _Flow(page_size, margin)
    flow.header(title or "Documentation Page", url, FALLBACK_TITLE_STYLE, scale)
    body = style_for(ContentBlock(BlockKind.PARAGRAPH, "-"), scale)
    excerpt = " ".join(text[:max_chars].split())
    for line in wrap_text(excerpt, body.font_size, flow.content_width):
        if flow.cursor.y - line_height(body.font_size) < margin + FALLBACK_BOTTOM:
            break
        flow.draw_lines([line], body, overflow=False)
    return flow.pages[:1]


def _pdf_safe(text: str) -> str:
    # base-14 fonts only cover WinAnsi
    return text.encode("cp1252", "replace").decode("cp1252")


def render_pdf(pages: Sequence[RenderedPage], title: Optional[str] = None) -> bytes:
    """Paint *pages* into a standalone PDF and return its bytes."""
    if not pages:
        raise ValueError("nothing to render")
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(pages[0].width, pages[0].height))
    if title:
        pdf.setTitle(title)
    for page in pages:
        pdf.setPageSize((page.width, page.height))
        for item in page.items:
            if isinstance(item, Panel):
                pdf.setFillColorRGB(*item.color)
                pdf.rect(item.x, item.y, item.width, item.height, stroke=0, fill=1)
            else:
                pdf.setFillColorRGB(*item.color)
                pdf.setFont(item.font_name, item.font_size)
                pdf.drawString(item.x, item.y, _pdf_safe(item.text))
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()
