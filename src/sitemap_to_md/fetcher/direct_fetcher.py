"""Direct engine: plain HTTP GET plus local HTML to Markdown conversion."""

import httpx

from sitemap_to_md.converter.markdown import (
    extract_body,
    extract_title,
    html_to_markdown,
    with_title_heading,
)
from sitemap_to_md.fetcher.base import BaseFetcher
from sitemap_to_md.utils.http import create_client, fetch_text


class DirectFetcher(BaseFetcher):
    """Download pages directly and convert their ``<body>`` locally."""

    name = "fetch"

    _client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        """Initialize HTTP client."""
        self._client = create_client(self.http)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, url: str) -> tuple[str | None, str]:
        if not self._client:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")

        html = await fetch_text(self._client, url, self.http.max_redirects)
        title = extract_title(html)
        markdown = html_to_markdown(extract_body(html))
        return title, with_title_heading(title, markdown)
