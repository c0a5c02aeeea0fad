# File: site_binder/extractor.py
"""site_binder.extractor: HTML → упорядоченная последовательность блоков контента.

Порядок блоков совпадает с порядком элементов в документе; одинаковая
разметка всегда даёт одинаковый результат.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_binder.errors import ExtractionFailure
from site_binder.logger import logger
from site_binder.parser.html_parser import make_soup

__all__: Sequence[str] = (
    "BlockKind",
    "ContentBlock",
    "extract",
    "detect_language",
    "CONTAINER_SELECTORS",
)

_WS_RE = re.compile(r"\s+")

#: Элементы, которые удаляются до извлечения текста.
CHROME_SELECTORS: Sequence[str] = (
    "script",
    "style",
    "noscript",
    "template",
    "nav",
    "footer",
    ".md-header",
    ".md-footer",
    ".md-sidebar",
    ".md-nav",
    ".md-search",
    ".md-tabs",
)

#: Кандидаты на основной контейнер, в порядке приоритета.
CONTAINER_SELECTORS: Sequence[str] = (
    ".md-content__inner",
    ".md-content",
    "main",
    ".content",
    "article",
)

_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")
_WALKED = _HEADINGS + ("p", "pre", "code", "li")

MIN_PARAGRAPH = 10
MIN_CODE = 3
MIN_FALLBACK_LINE = 10
DEFAULT_MAX_BLOCKS = 20


class BlockKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"
    LIST_ITEM = "list_item"


@dataclass(frozen=True, slots=True)
class ContentBlock:
    """Один типизированный фрагмент текста страницы."""

    kind: BlockKind
    text: str
    level: int = 0
    language: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is BlockKind.HEADING and not 1 <= self.level <= 6:
            raise ValueError(f"heading level must be 1..6, got {self.level}")


# --------------------------------------------------------------------------- #
# Определение языка кода                                                       #
# --------------------------------------------------------------------------- #

_CLASS_PATTERNS: Sequence[re.Pattern[str]] = (
    re.compile(r"language-(\w+)"),
    re.compile(r"lang-(\w+)"),
    re.compile(r"highlight-(\w+)"),
    re.compile(r"(\w+)-code"),
)

_CONTENT_PATTERNS: Sequence[tuple[str, Sequence[re.Pattern[str]]]] = (
    ("javascript", (re.compile(r"^import\s+.*from\s+['\"]"), re.compile(r"^const\s+\w+\s*="))),
    ("python", (re.compile(r"^from\s+\w+\s+import"), re.compile(r"^def\s+\w+\("))),
    ("typescript", (re.compile(r"^interface\s+\w+"), re.compile(r":\s*\w+\[\]"))),
    ("cpp", (re.compile(r"^#include\s*<"), re.compile(r"^int\s+main\("))),
)


def detect_language(css_class: str, code: str = "") -> Optional[str]:
    """Язык фрагмента кода по CSS-классу, затем по характерным конструкциям."""
    for pattern in _CLASS_PATTERNS:
        match = pattern.search(css_class)
        if match:
            return match.group(1).lower()
    for language, patterns in _CONTENT_PATTERNS:
        if any(p.search(code) for p in patterns):
            return language
    return None


# --------------------------------------------------------------------------- #
# Извлечение                                                                   #
# --------------------------------------------------------------------------- #


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _code_text(el: Tag) -> str:
    lines = [line.rstrip() for line in el.get_text().splitlines()]
    return "\n".join(lines).strip("\n").strip()


def _classes(el: Tag) -> str:
    parts: List[str] = list(el.get("class") or [])
    inner = el.find("code") if el.name == "pre" else None
    if isinstance(inner, Tag):
        parts.extend(inner.get("class") or [])
    return " ".join(parts)


def _strip_chrome(soup: BeautifulSoup) -> None:
    for el in soup.select(", ".join(CHROME_SELECTORS)):
        el.decompose()


def _select_container(soup: BeautifulSoup) -> Optional[Tag]:
    for selector in CONTAINER_SELECTORS:
        el = soup.select_one(selector)
        if el is not None and el.get_text(strip=True):
            logger.debug("Content container: %s", selector)
            return el
    if soup.body is not None and soup.body.get_text(strip=True):
        return soup.body
    return None


def _walk(container: Tag) -> List[ContentBlock]:
    blocks: List[ContentBlock] = []
    for el in container.find_all(_WALKED):
        name = el.name
        if name in _HEADINGS:
            text = _collapse(el.get_text(" "))
            if text:
                blocks.append(ContentBlock(BlockKind.HEADING, text, level=int(name[1])))
        elif name == "p":
            text = _collapse(el.get_text(" "))
            if len(text) > MIN_PARAGRAPH:
                blocks.append(ContentBlock(BlockKind.PARAGRAPH, text))
        elif name in ("pre", "code"):
            # <code> inside <pre> is already covered by the <pre>
            if name == "code" and el.find_parent("pre") is not None:
                continue
            text = _code_text(el)
            if len(text) > MIN_CODE:
                language = detect_language(_classes(el), text)
                blocks.append(ContentBlock(BlockKind.CODE, text, language=language))
        elif name == "li":
            text = _collapse(el.get_text(" "))
            if text:
                blocks.append(ContentBlock(BlockKind.LIST_ITEM, text))
    return blocks


def _line_fallback(root: Tag) -> List[ContentBlock]:
    blocks: List[ContentBlock] = []
    for line in root.get_text("\n").splitlines():
        text = _collapse(line)
        if len(text) > MIN_FALLBACK_LINE:
            blocks.append(ContentBlock(BlockKind.PARAGRAPH, text))
    return blocks


def extract(html: str, max_blocks: int = DEFAULT_MAX_BLOCKS) -> List[ContentBlock]:
    """Извлекает блоки контента из HTML.

    Args:
        html: исходная разметка страницы.
        max_blocks: сколько блоков оставить (остальные отбрасываются).

    Returns:
        Список ContentBlock в порядке документа.

    Raises:
        ExtractionFailure: в документе нет ни контейнера, ни текста.
    """
    soup = make_soup(html)
    _strip_chrome(soup)

    container = _select_container(soup)
    if container is None:
        raise ExtractionFailure("document has no content container")
    blocks = _walk(container) or _line_fallback(container)
    if not blocks:
        raise ExtractionFailure("no content container or text found")

    if len(blocks) > max_blocks:
        logger.debug("Truncating %d blocks to %d", len(blocks), max_blocks)
        blocks = blocks[:max_blocks]
    return blocks
