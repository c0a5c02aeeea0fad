# File: tests/test_extractor.py
import pytest
from site_binder.errors import ExtractionFailure
from site_binder.extractor import BlockKind, ContentBlock, detect_language, extract
from site_binder.parser.html_parser import extract_links, extract_title, page_text

DOC = """
<html>
<head><title>Install guide</title><style>.x{color:red}</style></head>
<body>
  <nav><a href="/">Home</a><p>Navigation paragraph text</p></nav>
  <div class="md-sidebar"><p>Sidebar paragraph should vanish</p></div>
  <main>
    <h1>Installing   the tool</h1>
    <p>Short</p>
    <p>Run the installer and
       follow the prompts.</p>
    <pre><code class="language-bash">pip install tool
tool --version</code></pre>
    <h3>Options</h3>
    <ul><li>First option</li><li>Second option</li></ul>
    <p>Inline <code>tool run</code> starts the service.</p>
  </main>
  <footer><p>Copyright footer text here</p></footer>
  <script>var leaked = "script text";</script>
</body>
</html>
"""


def test_blocks_follow_document_order():
    blocks = extract(DOC)
    assert [(b.kind, b.text) for b in blocks] == [
        (BlockKind.HEADING, "Installing the tool"),
        (BlockKind.PARAGRAPH, "Run the installer and follow the prompts."),
        (BlockKind.CODE, "pip install tool\ntool --version"),
        (BlockKind.HEADING, "Options"),
        (BlockKind.LIST_ITEM, "First option"),
        (BlockKind.LIST_ITEM, "Second option"),
        (BlockKind.PARAGRAPH, "Inline tool run starts the service."),
        (BlockKind.CODE, "tool run"),
    ]
    assert blocks[0].level == 1
    assert blocks[3].level == 3
    assert blocks[2].language == "bash"


def test_chrome_and_scripts_never_leak():
    text = " ".join(b.text for b in extract(DOC))
    for junk in ("Navigation", "Sidebar", "Copyright", "leaked", "color:red"):
        assert junk not in text


def test_extraction_is_deterministic():
    assert extract(DOC) == extract(DOC)


def test_container_priority():
    html = """<body>
      <article><p>Article text that is long enough</p></article>
      <div class="md-content"><p>Material content that is long enough</p></div>
    </body>"""
    assert [b.text for b in extract(html)] == ["Material content that is long enough"]


def test_empty_container_falls_through_to_next_candidate():
    html = "<body><main>   </main><article><p>Article body paragraph</p></article></body>"
    assert [b.text for b in extract(html)] == ["Article body paragraph"]


def test_body_used_when_no_container_matches():
    html = "<body><div><h2>Section</h2><p>Plain body paragraph text</p></div></body>"
    blocks = extract(html)
    assert [b.kind for b in blocks] == [BlockKind.HEADING, BlockKind.PARAGRAPH]


def test_line_fallback_when_no_structured_elements():
    html = "<body><div>This is a long plain line</div><div>tiny</div><div>Another long plain line</div></body>"
    blocks = extract(html)
    assert blocks == [
        ContentBlock(BlockKind.PARAGRAPH, "This is a long plain line"),
        ContentBlock(BlockKind.PARAGRAPH, "Another long plain line"),
    ]


@pytest.mark.parametrize(
    "html",
    [
        "",
        "<html><head><title>Only a title</title></head><body></body></html>",
        "<body><script>console.log('x')</script><nav>Menu</nav></body>",
        "<body><div>tiny</div></body>",
    ],
)
def test_extraction_failure(html):
    with pytest.raises(ExtractionFailure):
        extract(html)


def test_block_cap_truncates():
    html = "<main>" + "".join(f"<li>item {i}</li>" for i in range(50)) + "</main>"
    blocks = extract(html, max_blocks=5)
    assert [b.text for b in blocks] == [f"item {i}" for i in range(5)]
    assert len(extract(html)) == 20


def test_heading_level_validation():
    with pytest.raises(ValueError):
        ContentBlock(BlockKind.HEADING, "bad", level=7)


@pytest.mark.parametrize(
    "css_class,code,expected",
    [
        ("language-Python", "", "python"),
        ("lang-rust", "", "rust"),
        ("highlight-go notranslate", "", "go"),
        ("shell-code", "", "shell"),
        ("", "import x from 'y'", "javascript"),
        ("", "const a = 1", "javascript"),
        ("", "from os import path", "python"),
        ("", "def main():\n    pass", "python"),
        ("", "interface Props { a: string }", "typescript"),
        ("", "#include <stdio.h>", "cpp"),
        ("", "echo hello", None),
    ],
)
def test_detect_language(css_class, code, expected):
    assert detect_language(css_class, code) == expected


def test_extract_title_fallbacks():
    assert extract_title("<title> Page  Title </title>", "https://x.io/a") == "Page Title"
    assert extract_title("<body><h1>Heading</h1></body>", "https://x.io/a") == "Heading"
    assert extract_title("<body></body>", "https://x.io/guide/a") == "/guide/a"


def test_page_text_collapses_and_drops_scripts():
    html = "<body><nav>menu</nav><p>Hello\n   world</p><script>x()</script></body>"
    assert page_text(html) == "Hello world"


def test_extract_links_resolves_and_filters():
    html = (
        '<a href="/a#frag">a</a><a href="b">b</a><a href="mailto:x@y.z">m</a>'
        '<a href="javascript:void(0)">j</a><a href="https://other.io/">o</a><a>none</a>'
    )
    assert extract_links(html, "https://x.io/docs/") == [
        "https://x.io/a",
        "https://x.io/docs/b",
        "https://other.io/",
    ]
