"""Sitemap discovery: resolving, extracting and filtering URLs."""

from sitemap_to_md.discovery.filters import FilterResult, filter_urls
from sitemap_to_md.discovery.sitemap import (
    SitemapFormat,
    SitemapResult,
    SitemapSource,
    detect_format,
    extract_passthrough_fields,
    extract_urls_from_json,
    extract_urls_from_xml,
    parse_sitemap,
    process_sitemap,
)
from sitemap_to_md.discovery.source import SourceResolver, read_local_file

__all__ = [
    "FilterResult",
    "SitemapFormat",
    "SitemapResult",
    "SitemapSource",
    "SourceResolver",
    "detect_format",
    "extract_passthrough_fields",
    "extract_urls_from_json",
    "extract_urls_from_xml",
    "filter_urls",
    "parse_sitemap",
    "process_sitemap",
    "read_local_file",
]
