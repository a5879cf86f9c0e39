"""Tests for sitemap resolution over HTTP and from disk."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx

from sitemap_to_md.config import HttpConfig
from sitemap_to_md.discovery.sitemap import SitemapSource, process_sitemap
from sitemap_to_md.discovery.source import SourceResolver, read_local_file
from sitemap_to_md.errors import NetworkError, SourceReadError
from sitemap_to_md.utils.http import create_client, fetch_text


async def _fetch(url: str, max_redirects: int = 10) -> str:
    async with create_client(HttpConfig()) as client:
        return await fetch_text(client, url, max_redirects)


class TestFetchText:
    @respx.mock
    async def test_returns_body_on_200(self) -> None:
        respx.get("https://a.com/sitemap.xml").mock(
            return_value=httpx.Response(200, text="<loc>https://a.com/x</loc>")
        )
        assert await _fetch("https://a.com/sitemap.xml") == "<loc>https://a.com/x</loc>"

    @respx.mock
    async def test_follows_redirects(self) -> None:
        respx.get("https://a.com/old").mock(
            return_value=httpx.Response(301, headers={"Location": "https://a.com/new"})
        )
        respx.get("https://a.com/new").mock(
            return_value=httpx.Response(302, headers={"Location": "/final"})
        )
        respx.get("https://a.com/final").mock(return_value=httpx.Response(200, text="done"))

        assert await _fetch("https://a.com/old") == "done"

    @respx.mock
    async def test_redirect_loop_is_bounded(self) -> None:
        route = respx.get("https://a.com/loop").mock(
            return_value=httpx.Response(301, headers={"Location": "https://a.com/loop"})
        )

        with pytest.raises(NetworkError, match="Too many redirects"):
            await _fetch("https://a.com/loop", max_redirects=3)
        assert route.call_count == 4

    @respx.mock
    async def test_non_200_raises_network_error(self) -> None:
        respx.get("https://a.com/missing").mock(return_value=httpx.Response(404))

        with pytest.raises(NetworkError) as exc_info:
            await _fetch("https://a.com/missing")
        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    @respx.mock
    async def test_3xx_without_location_is_an_error(self) -> None:
        respx.get("https://a.com/odd").mock(return_value=httpx.Response(304))

        with pytest.raises(NetworkError):
            await _fetch("https://a.com/odd")

    @respx.mock
    async def test_connection_error(self) -> None:
        respx.get("https://a.com/down").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(NetworkError, match="Connection error"):
            await _fetch("https://a.com/down")


class TestReadLocalFile:
    async def test_reads_relative_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "urls.json").write_text('["https://a.com"]', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert await read_local_file("urls.json") == '["https://a.com"]'

    async def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SourceReadError, match="Cannot read"):
            await read_local_file(tmp_path / "nope.xml")

    async def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.xml"
        path.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(SourceReadError):
            await read_local_file(path)


class TestProcessSitemap:
    @respx.mock
    async def test_remote_sitemap(self, sitemap_xml: str) -> None:
        respx.get("https://example.com/sitemap.xml").mock(
            return_value=httpx.Response(200, text=sitemap_xml)
        )

        async with SourceResolver() as resolver:
            result, content = await process_sitemap("https://example.com/sitemap.xml", resolver)
        assert result.source == SitemapSource.URL
        assert len(result.urls) == 3
        assert content == sitemap_xml

    async def test_local_json(self, tmp_path: Path) -> None:
        path = tmp_path / "urls.json"
        path.write_text('{"urls": ["https://a.com/1"]}', encoding="utf-8")

        async with SourceResolver() as resolver:
            result, _ = await process_sitemap(str(path), resolver)
        assert result.source == SitemapSource.JSON
        assert result.urls == ["https://a.com/1"]
