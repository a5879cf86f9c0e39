"""HTTP helpers shared by the sitemap resolver and the direct engine."""

import logging
from urllib.parse import urljoin

import httpx

from sitemap_to_md.config import HttpConfig
from sitemap_to_md.errors import NetworkError

logger = logging.getLogger(__name__)


def create_client(config: HttpConfig) -> httpx.AsyncClient:
    """Create an async client that leaves redirects to :func:`fetch_text`."""
    return httpx.AsyncClient(
        headers={"User-Agent": config.user_agent},
        follow_redirects=False,
        timeout=config.timeout_seconds,
    )


async def fetch_text(
    client: httpx.AsyncClient, url: str, max_redirects: int = 10
) -> str:
    """GET ``url`` and return the body as text.

    3xx responses carrying a ``Location`` header are followed, at most
    ``max_redirects`` times. Anything other than a final 200 raises
    :class:`NetworkError`.
    """
    current = url
    for hop in range(max_redirects + 1):
        try:
            response = await client.get(current)
        except httpx.HTTPError as e:
            raise NetworkError(f"Connection error: {e}") from e

        location = response.headers.get("location")
        if 300 <= response.status_code < 400 and location:
            current = urljoin(current, location)
            logger.debug("Redirect %d: %s -> %s", hop + 1, url, current)
            continue

        if response.status_code != 200:
            raise NetworkError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )
        return response.text

    raise NetworkError(f"Too many redirects (more than {max_redirects}) for {url}")
