"""Fetch engines: direct HTTP, Jina Reader and Firecrawl."""

from sitemap_to_md.fetcher.base import BaseFetcher, FetchOutcome
from sitemap_to_md.fetcher.direct_fetcher import DirectFetcher
from sitemap_to_md.fetcher.firecrawl_fetcher import FirecrawlFetcher
from sitemap_to_md.fetcher.jina_fetcher import JinaReaderFetcher

__all__ = [
    "BaseFetcher",
    "FetchOutcome",
    "DirectFetcher",
    "FirecrawlFetcher",
    "JinaReaderFetcher",
]
