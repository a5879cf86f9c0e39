"""Output writers for Markdown pages and URL lists."""

from sitemap_to_md.output.multi_file import MultiFileOutput
from sitemap_to_md.output.url_list import ListFormat, UrlListOutput, list_format_for

__all__ = [
    "ListFormat",
    "MultiFileOutput",
    "UrlListOutput",
    "list_format_for",
]
