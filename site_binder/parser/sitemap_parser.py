# File: site_binder/parser/sitemap_parser.py
"""site_binder.parser.sitemap_parser: Парсинг sitemap.xml и sitemap index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from lxml import etree

__all__ = ("Sitemap", "parse_sitemap")


@dataclass(slots=True)
class Sitemap:
    """Содержимое sitemap: адреса страниц и вложенных sitemap-файлов."""

    pages: List[str] = field(default_factory=list)
    children: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.pages or self.children)


def parse_sitemap(xml_content: str) -> Sitemap:
    """Разбирает XML sitemap и возвращает адреса в порядке документа.

    Страницы берутся из ``<url><loc>``, вложенные карты — из
    ``<sitemap><loc>`` (формат sitemap index). Битый XML даёт пустой результат.

    Пример:
    ```python
    from site_binder.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', encoding='utf-8') as f:
        sitemap = parse_sitemap(f.read())
    print(sitemap.pages)
    ```
    """
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content.strip().encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return Sitemap()
    if root is None:
        return Sitemap()
    pages = [loc.text.strip() for loc in root.iterfind(".//{*}url/{*}loc") if loc.text and loc.text.strip()]
    children = [
        loc.text.strip() for loc in root.iterfind(".//{*}sitemap/{*}loc") if loc.text and loc.text.strip()
    ]
    return Sitemap(pages=pages, children=children)
