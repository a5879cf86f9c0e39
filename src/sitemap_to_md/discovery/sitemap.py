"""Extract URL lists from XML sitemaps and JSON URL lists."""

import json
import logging
import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

from sitemap_to_md.discovery.source import SourceResolver
from sitemap_to_md.errors import ParseError
from sitemap_to_md.utils.url_utils import is_url

logger = logging.getLogger(__name__)

# Plain text scan, not an XML parse: <loc> tags are picked up wherever they appear.
_LOC_RE = re.compile(r"<loc>(.*?)</loc>")

PASSTHROUGH_FIELDS = ("container", "excludeSelectors")


class SitemapFormat(str, Enum):
    """Format of the sitemap content."""

    XML = "xml"
    JSON = "json"


class SitemapSource(str, Enum):
    """Where the sitemap content came from."""

    URL = "url"
    XML = "xml"
    JSON = "json"


class SitemapResult(BaseModel):
    """URLs extracted from a sitemap, in document order."""

    model_config = ConfigDict(frozen=True)

    urls: list[str]
    source: SitemapSource


def extract_urls_from_xml(content: str) -> list[str]:
    """Return the text of every ``<loc>...</loc>`` pair in document order."""
    return _LOC_RE.findall(content)


def _load_json(content: str):
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON sitemap: {e}") from e


def extract_urls_from_json(content: str) -> list[str]:
    """Extract URLs from ``{"urls": [...]}`` or a bare JSON array.

    Non-string and empty elements are dropped; any other JSON shape yields
    an empty list.
    """
    data = _load_json(content)

    if isinstance(data, dict) and isinstance(data.get("urls"), list):
        items = data["urls"]
    elif isinstance(data, list):
        items = data
    else:
        logger.debug("JSON sitemap has no 'urls' array (got %s)", type(data).__name__)
        return []

    return [item for item in items if isinstance(item, str) and item]


def extract_passthrough_fields(content: str) -> dict:
    """Return the ``container``/``excludeSelectors`` fields of a JSON URL list."""
    data = _load_json(content)
    if not isinstance(data, dict):
        return {}
    return {key: data[key] for key in PASSTHROUGH_FIELDS if data.get(key)}


def is_json_content(content: str) -> bool:
    """Check whether content looks like JSON."""
    trimmed = content.strip()
    return trimmed.startswith("{") or trimmed.startswith("[")


def detect_format(hint: str, content: str) -> SitemapFormat:
    """Detect the format from the file extension, falling back to the content."""
    lower = hint.lower()
    if lower.endswith(".json"):
        return SitemapFormat.JSON
    if lower.endswith(".xml"):
        return SitemapFormat.XML
    if is_json_content(content):
        return SitemapFormat.JSON
    return SitemapFormat.XML


def parse_sitemap(content: str, hint: str) -> SitemapResult:
    """Extract the URL list from sitemap ``content`` read from ``hint``."""
    fmt = detect_format(hint, content)
    if fmt == SitemapFormat.JSON:
        urls = extract_urls_from_json(content)
    else:
        urls = extract_urls_from_xml(content)

    source = SitemapSource.URL if is_url(hint) else SitemapSource(fmt.value)
    return SitemapResult(urls=urls, source=source)


async def process_sitemap(source: str, resolver: SourceResolver) -> tuple[SitemapResult, str]:
    """Resolve ``source`` and extract its URLs.

    Returns the result together with the raw content, which list output
    needs for JSON passthrough fields.
    """
    content = await resolver.resolve(source)
    return parse_sitemap(content, source), content
