"""Base class for fetch engines."""

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from sitemap_to_md.config import EngineConfig, HttpConfig
from sitemap_to_md.errors import EmptyContentError

logger = logging.getLogger(__name__)


class FetchOutcome(BaseModel):
    """Result of fetching one URL and converting it to Markdown."""

    url: str
    title: str | None = None
    content: str = ""
    success: bool = True
    error: str | None = None

    @classmethod
    def failure(cls, url: str, error: str) -> "FetchOutcome":
        return cls(url=url, success=False, error=error)


class BaseFetcher(ABC):
    """Abstract base class for fetch engines.

    Subclasses implement :meth:`_fetch`; :meth:`fetch` turns any exception
    it raises into a failed :class:`FetchOutcome` so one bad URL never
    stops a batch.
    """

    name: str = "base"

    def __init__(self, config: EngineConfig, http: HttpConfig | None = None):
        self.config = config
        self.http = http or HttpConfig()

    @abstractmethod
    async def _fetch(self, url: str) -> tuple[str | None, str]:
        """Return ``(title, markdown)`` for ``url`` or raise."""
        ...

    async def fetch(self, url: str) -> FetchOutcome:
        """Fetch ``url``; never raises for per-URL failures."""
        try:
            title, content = await self._fetch(url)
            if not content or not content.strip():
                raise EmptyContentError("No markdown content returned")
        except Exception as e:
            logger.debug("%s fetch failed for %s", self.name, url, exc_info=True)
            return FetchOutcome.failure(url, str(e) or type(e).__name__)

        return FetchOutcome(url=url, title=title, content=content)

    @abstractmethod
    async def __aenter__(self):
        """Async context manager entry."""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        pass
