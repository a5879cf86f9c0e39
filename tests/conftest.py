"""Shared fixtures.

Network access is mocked with ``respx``; rich output is captured in an
in-memory console so assertions can inspect it.

pytest-asyncio runs with ``asyncio_mode = "auto"`` (see pyproject.toml), so
``async def`` tests are collected without markers.
"""

from __future__ import annotations

import io

import pytest
from rich.console import Console


@pytest.fixture
def console() -> Console:
    """A wide, non-terminal console writing to a string buffer."""
    return Console(file=io.StringIO(), width=200, force_terminal=False)


def console_text(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def sitemap_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/docs/intro</loc></url>
  <url><loc>https://example.com/docs/setup.html</loc></url>
  <url><loc>https://example.com/blog/news</loc></url>
</urlset>
"""
