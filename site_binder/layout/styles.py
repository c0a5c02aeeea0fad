# File: site_binder/layout/styles.py
"""site_binder.layout.styles: Стиль блока как чистая функция его типа."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple

from site_binder.extractor import BlockKind, ContentBlock

__all__ = ("RGB", "StyleRule", "style_for", "TITLE_STYLE", "URL_STYLE")

RGB = Tuple[float, float, float]

BODY_FONT = "Helvetica"
HEADING_FONT = "Helvetica-Bold"
CODE_FONT = "Courier"


@dataclass(frozen=True, slots=True)
class StyleRule:
    font_size: float
    color: RGB
    font_name: str = BODY_FONT
    space_before: float = 0.0
    background: Optional[RGB] = None
    marker: str = ""

    def scaled(self, scale: float) -> StyleRule:
        if scale == 1.0:
            return self
        return replace(self, font_size=self.font_size * scale)


_HEADINGS: Dict[int, StyleRule] = {
    1: StyleRule(16, (0.1, 0.1, 0.1), HEADING_FONT, space_before=15),
    2: StyleRule(14, (0.2, 0.2, 0.2), HEADING_FONT, space_before=12),
    3: StyleRule(13, (0.3, 0.3, 0.3), HEADING_FONT, space_before=10),
}
# h4-h6 share one tier
_MINOR_HEADING = StyleRule(12, (0.4, 0.4, 0.4), HEADING_FONT, space_before=8)

_BY_KIND: Dict[BlockKind, StyleRule] = {
    BlockKind.PARAGRAPH: StyleRule(10, (0.3, 0.3, 0.3)),
    BlockKind.LIST_ITEM: StyleRule(10, (0.2, 0.2, 0.2), marker="• "),
    BlockKind.CODE: StyleRule(9, (0.1, 0.1, 0.1), CODE_FONT, background=(0.96, 0.96, 0.96)),
}

TITLE_STYLE = StyleRule(18, (0.1, 0.1, 0.1), HEADING_FONT)
URL_STYLE = StyleRule(9, (0.6, 0.6, 0.6))
FALLBACK_TITLE_STYLE = StyleRule(16, (0.1, 0.1, 0.1), HEADING_FONT)


def style_for(block: ContentBlock, scale: float = 1.0) -> StyleRule:
    """Возвращает StyleRule для блока с учётом масштаба."""
    if block.kind is BlockKind.HEADING:
        rule = _HEADINGS.get(block.level, _MINOR_HEADING)
    else:
        rule = _BY_KIND[block.kind]
    return rule.scaled(scale)
