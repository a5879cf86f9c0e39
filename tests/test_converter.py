"""Tests for HTML parsing and Markdown conversion."""

from __future__ import annotations

from sitemap_to_md.converter.markdown import (
    extract_body,
    extract_title,
    html_to_markdown,
    select_content,
    split_selectors,
    with_title_heading,
)

PAGE = """<html>
<head><title> Install Guide </title></head>
<body>
  <header><nav>Home | Docs</nav></header>
  <main>
    <h2>Requirements</h2>
    <p>You need <code>pip</code>.</p>
    <div class="ads">Buy now</div>
  </main>
  <footer>Copyright</footer>
</body>
</html>"""


class TestExtraction:
    def test_title_is_trimmed(self) -> None:
        assert extract_title(PAGE) == "Install Guide"

    def test_title_is_case_insensitive(self) -> None:
        assert extract_title("<TITLE lang='en'>Hi</TITLE>") == "Hi"

    def test_missing_or_blank_title(self) -> None:
        assert extract_title("<html><body>x</body></html>") is None
        assert extract_title("<title>   </title>") is None

    def test_body(self) -> None:
        assert extract_body("<html><body class='x'>Hello</body></html>") == "Hello"

    def test_document_without_body_is_used_whole(self) -> None:
        assert extract_body("<p>Fragment</p>") == "<p>Fragment</p>"


class TestHtmlToMarkdown:
    def test_atx_headings_and_paragraphs(self) -> None:
        assert html_to_markdown("<h2>Sub</h2><p>Text</p>") == "## Sub\n\nText"

    def test_lists_use_dashes(self) -> None:
        md = html_to_markdown("<ul><li>One</li><li>Two</li></ul>")
        assert "- One" in md
        assert "- Two" in md

    def test_fenced_code_keeps_language(self) -> None:
        md = html_to_markdown('<pre><code class="language-python">print(1)</code></pre>')
        assert "```python\nprint(1)\n```" in md

    def test_inline_code(self) -> None:
        assert html_to_markdown("<p>Run <code>pip</code></p>") == "Run `pip`"

    def test_drops_scripts_and_styles(self) -> None:
        md = html_to_markdown("<p>Keep</p><script>alert(1)</script><style>p {}</style>")
        assert md == "Keep"

    def test_empty_input(self) -> None:
        assert html_to_markdown("") == ""

    def test_collapses_blank_lines(self) -> None:
        assert "\n\n\n" not in html_to_markdown("<p>a</p><br><br><br><p>b</p>")


def test_with_title_heading() -> None:
    assert with_title_heading("Hi", "Hello") == "# Hi\n\nHello"
    assert with_title_heading(None, "Hello") == "Hello"


def test_split_selectors() -> None:
    assert split_selectors("main, #content ,, .post") == ["main", "#content", ".post"]
    assert split_selectors(None) == []


class TestSelectContent:
    def test_targets_and_removals(self) -> None:
        title, html = select_content(PAGE, ["main"], [".ads"])
        assert title == "Install Guide"
        assert "Requirements" in html
        assert "Buy now" not in html
        assert "Home | Docs" not in html

    def test_targets_keep_selector_order(self) -> None:
        _, html = select_content(PAGE, ["footer", "header"], [])
        assert html.index("Copyright") < html.index("Home | Docs")

    def test_without_targets_returns_body(self) -> None:
        _, html = select_content(PAGE, [], ["header", "footer"])
        assert "Requirements" in html
        assert "Copyright" not in html
        assert "<body" not in html

    def test_unmatched_targets_give_empty_html(self) -> None:
        _, html = select_content(PAGE, ["article"], [])
        assert html == ""
