# File: site_binder/layout/__init__.py
"""site_binder.layout: Вёрстка блоков на страницы и отрисовка в PDF."""

from .engine import RenderedPage, layout, layout_fallback, render_pdf
from .styles import StyleRule, style_for

__all__ = ["RenderedPage", "StyleRule", "layout", "layout_fallback", "render_pdf", "style_for"]
