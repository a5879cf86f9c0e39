"""Firecrawl engine."""

from firecrawl import AsyncFirecrawl  # type: ignore[import-untyped]

from sitemap_to_md.config import EngineConfig, HttpConfig
from sitemap_to_md.converter.markdown import extract_title, split_selectors
from sitemap_to_md.errors import ConfigurationError, NetworkError
from sitemap_to_md.fetcher.base import BaseFetcher


def _field(obj, name: str):
    """Read ``name`` from an SDK model or a plain dict."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class FirecrawlFetcher(BaseFetcher):
    """Scrape pages to Markdown through the Firecrawl API."""

    name = "firecrawl"

    def __init__(
        self,
        config: EngineConfig,
        http: HttpConfig | None = None,
        client: AsyncFirecrawl | None = None,
    ):
        super().__init__(config, http)
        if not config.firecrawl_api_key and client is None:
            raise ConfigurationError(
                "FIRECRAWL_API_KEY is required for the firecrawl engine. "
                "Set it in .env or pass --firecrawl-api-key."
            )
        self._client = client

    async def __aenter__(self):
        if self._client is None:
            kwargs = {"api_key": self.config.firecrawl_api_key}
            if self.config.firecrawl_api_url:
                kwargs["api_url"] = self.config.firecrawl_api_url.rstrip("/")
            self._client = AsyncFirecrawl(**kwargs)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    def scrape_options(self) -> dict:
        options: dict = {"formats": ["markdown"], "only_main_content": True}
        include_tags = split_selectors(self.config.target_selector)
        exclude_tags = split_selectors(self.config.remove_selector)
        if include_tags:
            options["include_tags"] = include_tags
        if exclude_tags:
            options["exclude_tags"] = exclude_tags
        return options

    async def _fetch(self, url: str) -> tuple[str | None, str]:
        if self._client is None:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")

        document = await self._client.scrape(url, **self.scrape_options())

        if _field(document, "success") is False:
            raise NetworkError(_field(document, "error") or "Firecrawl scrape failed")

        markdown = _field(document, "markdown") or ""
        title = _field(_field(document, "metadata"), "title")
        if not title:
            # Only set when the scrape also asked for an HTML format; markdown-only
            # scrapes fall through to "untitled".
            raw_html = _field(document, "raw_html") or _field(document, "html")
            title = extract_title(raw_html) if raw_html else None

        return title or "untitled", markdown
