"""Tests for the fetch engines."""

from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import pytest
import respx

from sitemap_to_md.config import EngineConfig, JinaResponseFormat
from sitemap_to_md.errors import ConfigurationError, EmptyContentError
from sitemap_to_md.fetcher import DirectFetcher, FetchOutcome, FirecrawlFetcher, JinaReaderFetcher
from sitemap_to_md.fetcher.jina_fetcher import parse_json_response, parse_text_response


async def _fetch(fetcher, url: str) -> FetchOutcome:
    async with fetcher:
        return await fetcher.fetch(url)


class TestDirectFetcher:
    @respx.mock
    async def test_title_heading_and_body(self) -> None:
        respx.get("https://a.com/x").mock(
            return_value=httpx.Response(
                200, text="<html><title>Hi</title><body>Hello</body></html>"
            )
        )

        outcome = await _fetch(DirectFetcher(EngineConfig()), "https://a.com/x")

        assert outcome.success
        assert outcome.title == "Hi"
        assert outcome.content == "# Hi\n\nHello"

    @respx.mock
    async def test_page_without_title(self) -> None:
        respx.get("https://a.com/x").mock(
            return_value=httpx.Response(200, text="<body><p>Just text</p></body>")
        )

        outcome = await _fetch(DirectFetcher(EngineConfig()), "https://a.com/x")

        assert outcome.title is None
        assert outcome.content == "Just text"

    @respx.mock
    async def test_http_error_becomes_failure(self) -> None:
        respx.get("https://a.com/x").mock(return_value=httpx.Response(500))

        outcome = await _fetch(DirectFetcher(EngineConfig()), "https://a.com/x")

        assert not outcome.success
        assert outcome.error == "HTTP 500"

    @respx.mock
    async def test_empty_page_is_a_failure(self) -> None:
        respx.get("https://a.com/x").mock(
            return_value=httpx.Response(200, text="<html><body>  </body></html>")
        )

        outcome = await _fetch(DirectFetcher(EngineConfig()), "https://a.com/x")

        assert not outcome.success
        assert "No markdown content" in (outcome.error or "")


JINA_TEXT = """Title: Block Diagram Syntax | Mermaid

URL Source: https://mermaid.js.org/syntax/block.html

Markdown Content:
Block diagrams are **intuitive**.
"""


class TestJinaParsing:
    def test_text_response(self) -> None:
        title, content = parse_text_response(JINA_TEXT)
        assert title == "Block Diagram Syntax | Mermaid"
        assert content == "# Block Diagram Syntax | Mermaid\n\nBlock diagrams are **intuitive**."

    def test_text_without_marker_is_kept_whole(self) -> None:
        assert parse_text_response("plain body") == ("untitled", "plain body")

    def test_text_with_empty_content(self) -> None:
        with pytest.raises(EmptyContentError):
            parse_text_response("Title: T\nMarkdown Content:\n   \n")

    def test_json_data_envelope(self) -> None:
        payload = {"code": 200, "data": {"title": "T", "content": "Body\n"}}
        assert parse_json_response(payload) == ("T", "# T\n\nBody")

    def test_json_markdown_response(self) -> None:
        assert parse_json_response({"markdownResponse": "Body"}) == ("untitled", "Body")

    def test_json_without_content(self) -> None:
        with pytest.raises(EmptyContentError):
            parse_json_response({"data": {"title": "T", "content": ""}})


class TestJinaReaderFetcher:
    def test_requires_api_key(self) -> None:
        with pytest.raises(ConfigurationError, match="JINA_API_KEY"):
            JinaReaderFetcher(EngineConfig(engine="jina"))

    def test_request_url_encodes_target(self) -> None:
        fetcher = JinaReaderFetcher(EngineConfig(jina_api_key="k"))
        assert (
            fetcher.request_url("https://a.com/p?q=1")
            == "https://r.jina.ai/https%3A%2F%2Fa.com%2Fp%3Fq%3D1"
        )

    @respx.mock
    async def test_text_mode_request(self) -> None:
        route = respx.route(host="r.jina.ai").mock(
            return_value=httpx.Response(200, text=JINA_TEXT)
        )
        fetcher = JinaReaderFetcher(
            EngineConfig(jina_api_key="secret", target_selector="main", remove_selector="nav")
        )

        outcome = await _fetch(fetcher, "https://mermaid.js.org/syntax/block.html")

        assert outcome.success
        assert outcome.title == "Block Diagram Syntax | Mermaid"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer secret"
        assert request.headers["X-Md-Link-Style"] == "discarded"
        assert request.headers["X-Md-Heading-Style"] == "atx"
        assert request.headers["X-Target-Selector"] == "main"
        assert request.headers["X-Remove-Selector"] == "nav"
        assert "Accept" not in request.headers or request.headers["Accept"] != "application/json"

    @respx.mock
    async def test_json_mode_request(self) -> None:
        route = respx.route(host="r.jina.ai").mock(
            return_value=httpx.Response(
                200, text=json.dumps({"data": {"title": "T", "content": "Body"}})
            )
        )
        fetcher = JinaReaderFetcher(
            EngineConfig(jina_api_key="k", jina_response_format=JinaResponseFormat.JSON)
        )

        outcome = await _fetch(fetcher, "https://a.com/p")

        assert outcome.content == "# T\n\nBody"
        assert route.calls.last.request.headers["Accept"] == "application/json"

    @respx.mock
    async def test_http_error(self) -> None:
        respx.route(host="r.jina.ai").mock(return_value=httpx.Response(503))
        fetcher = JinaReaderFetcher(EngineConfig(jina_api_key="k"))

        outcome = await _fetch(fetcher, "https://a.com/p")

        assert not outcome.success
        assert (outcome.error or "").startswith("HTTP 503")


class FakeFirecrawl:
    """Stand-in for ``AsyncFirecrawl`` recording scrape calls."""

    def __init__(self, document=None, error: Exception | None = None):
        self.document = document
        self.error = error
        self.calls: list[tuple[str, dict]] = []

    async def scrape(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.document


class TestFirecrawlFetcher:
    def test_requires_api_key(self) -> None:
        with pytest.raises(ConfigurationError, match="FIRECRAWL_API_KEY"):
            FirecrawlFetcher(EngineConfig(engine="firecrawl"))

    async def test_scrape_options(self) -> None:
        client = FakeFirecrawl(
            SimpleNamespace(markdown="Body", metadata=SimpleNamespace(title="T"))
        )
        fetcher = FirecrawlFetcher(
            EngineConfig(target_selector="main, article", remove_selector=".ads"),
            client=client,
        )

        outcome = await _fetch(fetcher, "https://a.com/p")

        assert outcome.success
        assert outcome.title == "T"
        assert outcome.content == "Body"
        url, kwargs = client.calls[0]
        assert url == "https://a.com/p"
        assert kwargs == {
            "formats": ["markdown"],
            "only_main_content": True,
            "include_tags": ["main", "article"],
            "exclude_tags": [".ads"],
        }

    async def test_title_from_raw_html(self) -> None:
        client = FakeFirecrawl(
            {"markdown": "Body", "metadata": {}, "raw_html": "<title>From HTML</title>"}
        )

        outcome = await _fetch(FirecrawlFetcher(EngineConfig(), client=client), "https://a.com/p")

        assert outcome.title == "From HTML"

    async def test_untitled_fallback(self) -> None:
        client = FakeFirecrawl({"markdown": "Body"})

        outcome = await _fetch(FirecrawlFetcher(EngineConfig(), client=client), "https://a.com/p")

        assert outcome.title == "untitled"

    async def test_unsuccessful_response(self) -> None:
        client = FakeFirecrawl({"success": False, "error": "blocked"})

        outcome = await _fetch(FirecrawlFetcher(EngineConfig(), client=client), "https://a.com/p")

        assert not outcome.success
        assert outcome.error == "blocked"

    async def test_sdk_exception(self) -> None:
        client = FakeFirecrawl(error=RuntimeError("rate limited"))

        outcome = await _fetch(FirecrawlFetcher(EngineConfig(), client=client), "https://a.com/p")

        assert not outcome.success
        assert outcome.error == "rate limited"
