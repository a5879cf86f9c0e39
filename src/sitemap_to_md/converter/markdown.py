"""HTML to Markdown conversion."""

import logging
import re

from bs4 import BeautifulSoup, Tag
from markdownify import ATX
from markdownify import MarkdownConverter as BaseMarkdownConverter

logger = logging.getLogger(__name__)

# Text scans: the first <title> and the first <body>...</body> pair win.
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE)
_BODY_RE = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)

_KNOWN_LANGUAGES = {
    "python", "py", "javascript", "js", "typescript", "ts", "ruby", "go",
    "rust", "java", "cpp", "c", "bash", "shell", "json", "yaml", "xml",
    "html", "css", "sql", "graphql",
}


class MarkdownConverter(BaseMarkdownConverter):
    """Markdown converter with ATX headings and fenced code blocks."""

    def __init__(self, **kwargs):
        super().__init__(
            heading_style=ATX,
            bullets="-",
            strong_em_symbol="*",
            **kwargs,
        )

    def convert_pre(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Render ``<pre><code>`` as a fenced block, keeping the language hint."""
        code = el.find("code")
        if code:
            lang = self._extract_language(code)
            code_text = code.get_text()
            if not code_text.startswith("\n"):
                code_text = "\n" + code_text
            if not code_text.endswith("\n"):
                code_text = code_text + "\n"
            return f"\n```{lang}{code_text}```\n\n"
        return super().convert_pre(el, text, parent_tags=parent_tags, **kwargs)  # type: ignore[misc,no-any-return]

    def convert_code(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        if el.parent and el.parent.name == "pre":
            return text
        code_text = el.get_text()
        if "`" in code_text:
            return f"`` {code_text} ``"
        return f"`{code_text}`"

    def _extract_language(self, code_elem: Tag) -> str:
        """Extract programming language from class names."""
        raw_classes: str | list[str] = code_elem.get("class") or []
        classes: list[str] = (
            raw_classes.split() if isinstance(raw_classes, str) else list(raw_classes)
        )

        for cls in classes:
            if cls.startswith("language-"):
                return cls[9:]
            if cls.startswith("lang-"):
                return cls[5:]
            if cls in _KNOWN_LANGUAGES:
                return cls

        return ""

    def convert_svg(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        return ""


def extract_title(html: str) -> str | None:
    """Return the trimmed text of the first ``<title>`` tag, if any."""
    match = _TITLE_RE.search(html)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return None


def extract_body(html: str) -> str:
    """Return the inner HTML of ``<body>``, or the whole document without one."""
    match = _BODY_RE.search(html)
    return match.group(1) if match else html


def html_to_markdown(html: str) -> str:
    """Convert HTML to Markdown."""
    if not html:
        return ""

    soup = BeautifulSoup(html, "lxml")

    for tag in soup.find_all(["script", "style"]):
        tag.decompose()

    converter = MarkdownConverter()
    markdown = converter.convert_soup(soup)

    markdown = re.sub(r"\n{3,}", "\n\n", markdown)
    logger.debug("Converted %d chars of HTML to %d chars of Markdown", len(html), len(markdown))
    return markdown.strip()


def with_title_heading(title: str | None, markdown: str) -> str:
    """Prepend ``# title`` and a blank line when a title is known."""
    if title:
        return f"# {title}\n\n{markdown}"
    return markdown


def split_selectors(selectors: str | None) -> list[str]:
    """Split a comma-separated CSS selector list into its parts."""
    if not selectors:
        return []
    return [s.strip() for s in selectors.split(",") if s.strip()]


def select_content(
    html: str,
    target_selectors: list[str],
    remove_selectors: list[str],
) -> tuple[str | None, str]:
    """Apply CSS selectors to a page and return ``(title, html)``.

    ``remove_selectors`` are dropped first. With ``target_selectors`` only
    the matching elements are kept, in selector order; when none match the
    returned HTML is empty. Without targets the ``<body>`` is returned.
    """
    soup = BeautifulSoup(html, "lxml")
    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    for selector in remove_selectors:
        for elem in soup.select(selector):
            elem.decompose()

    if target_selectors:
        parts = [str(elem) for selector in target_selectors for elem in soup.select(selector)]
        selected = "".join(parts)
    else:
        body = soup.body
        selected = body.decode_contents() if body else ""

    return title or None, selected
