"""Jina Reader engine."""

import re
from urllib.parse import quote

import httpx

from sitemap_to_md.config import EngineConfig, HttpConfig, JinaResponseFormat
from sitemap_to_md.converter.markdown import with_title_heading
from sitemap_to_md.errors import ConfigurationError, EmptyContentError, NetworkError
from sitemap_to_md.fetcher.base import BaseFetcher

_TITLE_LINE_RE = re.compile(r"^Title:\s*(.+)$", re.MULTILINE)
_MARKDOWN_MARKER_RE = re.compile(r"Markdown Content:\s*\n(.*)", re.IGNORECASE | re.DOTALL)


def parse_text_response(text: str) -> tuple[str, str]:
    """Split a plain-text Reader response into ``(title, markdown)``.

    The response starts with a header block::

        Title: Block Diagram Syntax | Mermaid
        URL Source: https://...
        Markdown Content:
        ...

    Without the ``Markdown Content:`` marker the whole response is kept.
    """
    title_match = _TITLE_LINE_RE.search(text)
    title = title_match.group(1).strip() if title_match else "untitled"

    body_match = _MARKDOWN_MARKER_RE.search(text)
    if not body_match:
        return title, text

    body = body_match.group(1).strip()
    if not body:
        raise EmptyContentError("Reader response has an empty Markdown Content section")
    return title, f"# {title}\n\n{body}"


def parse_json_response(payload: object) -> tuple[str, str]:
    """Read ``(title, markdown)`` from a JSON Reader envelope."""
    title: str | None = None
    content: object = None

    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict):
            title = data.get("title") or None
            content = data.get("content")
        if not content:
            content = payload.get("markdownResponse")

    if not isinstance(content, str) or not content.strip():
        raise EmptyContentError("Reader response has no content")

    return title or "untitled", with_title_heading(title, content.strip())


class JinaReaderFetcher(BaseFetcher):
    """Fetch Markdown from the hosted Jina Reader endpoint."""

    name = "jina"

    def __init__(self, config: EngineConfig, http: HttpConfig | None = None):
        super().__init__(config, http)
        if not config.jina_api_key:
            raise ConfigurationError(
                "JINA_API_KEY is required for the jina engine. "
                "Set it in .env or pass --jina-api-key."
            )
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.http.timeout_seconds,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.aclose()
            self._client = None

    def request_url(self, url: str) -> str:
        return f"{self.config.jina_endpoint.rstrip('/')}/{quote(url, safe='')}"

    def request_headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.jina_api_key}",
            "X-Md-Link-Style": "discarded",
            "X-Md-Heading-Style": "atx",
        }
        if self.config.jina_response_format == JinaResponseFormat.JSON:
            headers["Accept"] = "application/json"
        if self.config.target_selector:
            headers["X-Target-Selector"] = self.config.target_selector
        if self.config.remove_selector:
            headers["X-Remove-Selector"] = self.config.remove_selector
        return headers

    async def _fetch(self, url: str) -> tuple[str | None, str]:
        if not self._client:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")

        try:
            response = await self._client.get(self.request_url(url), headers=self.request_headers())
        except httpx.HTTPError as e:
            raise NetworkError(f"Connection error: {e}") from e

        if not response.is_success:
            raise NetworkError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        if self.config.jina_response_format == JinaResponseFormat.JSON:
            return parse_json_response(response.json())
        return parse_text_response(response.text)
