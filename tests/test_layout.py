# File: tests/test_layout.py
from io import BytesIO

import pytest
from pypdf import PdfReader

from site_binder.extractor import BlockKind, ContentBlock
from site_binder.layout.engine import (
    A4,
    BLOCK_GAP,
    CODE_PANEL_MIN,
    Panel,
    TextLine,
    layout,
    layout_fallback,
    line_height,
    render_pdf,
    wrap_text,
)
from site_binder.layout.styles import style_for

SMALL_PAGE = (300.0, 300.0)
MARGIN = 50.0


def heading(text: str, level: int = 1) -> ContentBlock:
    return ContentBlock(BlockKind.HEADING, text, level=level)


def para(text: str) -> ContentBlock:
    return ContentBlock(BlockKind.PARAGRAPH, text)


def test_wrap_text_is_greedy_and_bounded():
    # 10pt → 5pt per char → 40 chars in 200pt
    text = " ".join(["lorem"] * 20)
    lines = wrap_text(text, 10, 200)
    assert all(len(line) <= 40 for line in lines)
    assert lines[0] == " ".join(["lorem"] * 6)
    assert " ".join(lines) == text


def test_wrap_text_splits_overlong_words():
    lines = wrap_text("a " + "x" * 95 + " b", 10, 200)
    assert lines == ["a", "x" * 40, "x" * 40, "x" * 15 + " b"]


def test_wrap_text_empty():
    assert wrap_text("   ", 10, 200) == []


def test_short_content_fits_one_page():
    pages = layout([heading("Title"), para("A short paragraph of text.")], A4, MARGIN)
    assert len(pages) == 1
    assert [line.text for line in pages[0].lines] == ["Title", "A short paragraph of text."]


def test_long_paragraph_continues_on_second_page():
    text = " ".join(["lorem"] * 84)  # ~500 chars
    assert len(text) > 500
    pages = layout([heading("Title"), para(text)], SMALL_PAGE, MARGIN)

    assert len(pages) == 2
    max_chars = int((SMALL_PAGE[0] - 2 * MARGIN) // 5)
    for page in pages:
        for line in page.lines:
            assert len(line.text) <= max_chars
            assert line.x == MARGIN
            assert MARGIN <= line.y <= SMALL_PAGE[1] - MARGIN
    # cursor reset to the top on the second page
    top = SMALL_PAGE[1] - MARGIN
    assert pages[1].lines[0].y == top - 10
    wrapped = [line.text for page in pages for line in page.lines]
    assert wrapped[0] == "Title"
    assert " ".join(wrapped[1:]) == text


def test_new_page_when_space_below_threshold():
    # one line per paragraph; a block never starts with < 100pt left
    blocks = [para(f"Paragraph number {i}") for i in range(12)]
    pages = layout(blocks, SMALL_PAGE, MARGIN)
    step = line_height(10) + BLOCK_GAP
    per_page = 0
    y = SMALL_PAGE[1] - MARGIN
    while y - MARGIN >= 100:
        per_page += 1
        y -= step
    assert len(pages[0].lines) == per_page
    assert len(pages) == -(-12 // per_page)


def test_heading_tiers_and_leading():
    s1, s3, s4, s6 = (style_for(heading("h", lvl)) for lvl in (1, 3, 4, 6))
    assert s1.font_size > s3.font_size > s4.font_size
    assert s4 == s6
    assert s1.space_before > s3.space_before > s4.space_before

    pages = layout([para("Intro paragraph"), heading("Second", 2)], A4, MARGIN)
    first, second = pages[0].lines
    expected_gap = line_height(10) + BLOCK_GAP + style_for(heading("x", 2)).space_before
    assert first.y + 10 - (second.y + 14) == pytest.approx(expected_gap)


def test_list_items_get_bullets():
    pages = layout([ContentBlock(BlockKind.LIST_ITEM, "point")], A4, MARGIN)
    assert pages[0].lines[0].text == "• point"


def test_code_block_panel_drawn_before_text():
    code = ContentBlock(BlockKind.CODE, "def f():\n    return 1\n\nprint(f())")
    pages = layout([code], A4, MARGIN)
    items = pages[0].items
    assert isinstance(items[0], Panel)
    assert all(isinstance(i, TextLine) for i in items[1:])
    assert [line.text for line in pages[0].lines] == ["def f():", "    return 1", "print(f())"]
    assert all(line.font_name == "Courier" for line in pages[0].lines)
    panel = items[0]
    assert panel.height >= CODE_PANEL_MIN
    assert panel.height >= 4 * line_height(9)
    lowest = min(line.y for line in pages[0].lines)
    assert panel.y <= lowest


def test_code_block_split_gets_panel_on_each_page():
    code = ContentBlock(BlockKind.CODE, "\n".join(f"line_{i} = {i}" for i in range(30)))
    pages = layout([code], SMALL_PAGE, MARGIN)
    assert len(pages) > 1
    for page in pages:
        assert isinstance(page.items[0], Panel)


def test_scale_multiplies_font_sizes():
    normal = layout([para("scaled text here")], A4, MARGIN)[0].lines[0]
    big = layout([para("scaled text here")], A4, MARGIN, scale=2.0)[0].lines[0]
    assert big.font_size == normal.font_size * 2


def test_header_with_title_and_url():
    pages = layout([para("Body paragraph text")], A4, MARGIN, title="Guide", url="https://x.io/guide")
    texts = [line.text for line in pages[0].lines]
    assert texts == ["Guide", "https://x.io/guide", "Body paragraph text"]
    assert pages[0].lines[0].font_size == 18


def test_margins_must_leave_room():
    with pytest.raises(ValueError):
        layout([para("x")], (100, 100), 60)


def test_fallback_is_single_page_and_capped():
    text = "word " * 3000
    pages = layout_fallback("Broken page", "https://x.io/broken", text, SMALL_PAGE, MARGIN)
    assert len(pages) == 1
    lines = pages[0].lines
    assert lines[0].text == "Broken page"
    assert all(line.y >= MARGIN for line in lines)
    body = " ".join(line.text for line in lines[2:])
    assert len(body) <= 2000


def test_render_pdf_produces_one_pdf_page_per_rendered_page():
    text = " ".join(["lorem"] * 84)
    pages = layout([heading("Title"), para(text)], SMALL_PAGE, MARGIN)
    pdf = render_pdf(pages, title="Doc")
    reader = PdfReader(BytesIO(pdf))
    assert len(reader.pages) == len(pages) == 2
    assert "Title" in reader.pages[0].extract_text()
    assert float(reader.pages[0].mediabox.width) == SMALL_PAGE[0]


def test_render_pdf_tolerates_non_latin_text():
    pages = layout([para("Привет, мир — unicode “quotes” ✓")], A4, MARGIN)
    assert render_pdf(pages).startswith(b"%PDF")


def test_render_pdf_rejects_empty():
    with pytest.raises(ValueError):
        render_pdf([])


def test_short_content_area_does_not_emit_blank_pages():
    # 80pt of content height is below the 100pt threshold from the start
    pages = layout([para(f"Paragraph number {i}") for i in range(3)], SMALL_PAGE, 110.0)
    assert len(pages) == 3
    assert all(page.lines for page in pages)
