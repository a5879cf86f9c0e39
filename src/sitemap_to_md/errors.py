"""Exceptions raised by the sitemap pipeline."""


class SitemapToMdError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(SitemapToMdError):
    """Invalid or incomplete run configuration (e.g. a missing API key)."""


class SourceReadError(SitemapToMdError):
    """A local sitemap file could not be read."""


class NetworkError(SitemapToMdError):
    """A request failed to connect or ended with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(SitemapToMdError):
    """The sitemap content is malformed and no URLs can be derived from it."""


class EmptyResultError(SitemapToMdError):
    """No URLs were found, or none are left after filtering."""


class EmptyContentError(SitemapToMdError):
    """An engine returned blank content for a URL."""


class OutputWriteError(SitemapToMdError):
    """An output file or directory could not be written."""
