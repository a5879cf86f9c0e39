"""Content conversion to Markdown."""

from sitemap_to_md.converter.markdown import (
    MarkdownConverter,
    extract_body,
    extract_title,
    html_to_markdown,
    select_content,
    split_selectors,
    with_title_heading,
)

__all__ = [
    "MarkdownConverter",
    "extract_body",
    "extract_title",
    "html_to_markdown",
    "select_content",
    "split_selectors",
    "with_title_heading",
]
