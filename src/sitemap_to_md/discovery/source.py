"""Resolve a sitemap location (local path or URL) to its raw content."""

import logging
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import httpx

from sitemap_to_md.config import HttpConfig
from sitemap_to_md.errors import SourceReadError
from sitemap_to_md.utils.http import create_client, fetch_text
from sitemap_to_md.utils.url_utils import is_url

logger = logging.getLogger(__name__)


class SourceResolver:
    """Read sitemap content from disk or over HTTP.

    Use as an async context manager so the HTTP client is closed after use.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config or HttpConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        if self._client is None:
            self._client = create_client(self.config)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def resolve(self, source: str) -> str:
        """Return the raw content behind ``source``.

        Raises :class:`~sitemap_to_md.errors.NetworkError` for URLs and
        :class:`~sitemap_to_md.errors.SourceReadError` for local files.
        """
        if is_url(source):
            if not self._client:
                raise RuntimeError("Resolver not initialized. Use 'async with' context manager.")
            logger.debug("Downloading sitemap %s", source)
            return await fetch_text(self._client, source, self.config.max_redirects)

        return await read_local_file(source)


async def read_local_file(path: str | Path) -> str:
    """Read a UTF-8 text file; relative paths resolve against the working directory."""
    full_path = Path(path).expanduser().absolute()
    try:
        async with aiofiles.open(full_path, "r", encoding="utf-8") as f:
            return await f.read()
    except OSError as e:
        raise SourceReadError(f"Cannot read {full_path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise SourceReadError(f"{full_path} is not valid UTF-8 text") from e
