"""URL manipulation utilities."""

import re
from pathlib import PurePosixPath
from urllib.parse import urlparse

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def is_url(value: str) -> bool:
    """Check if a string is an absolute URL (scheme and host)."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def last_url_segment(url: str) -> str:
    """Return the last non-empty path segment of a URL without its extension.

    ``index`` is used for an empty path and ``untitled`` for anything that
    is not an absolute URL.
    """
    if not is_url(url):
        return "untitled"
    segments = [s for s in urlparse(url).path.split("/") if s]
    if not segments:
        return "index"
    return _EXTENSION_RE.sub("", segments[-1]) or "index"


def default_list_output_path(input_path: str, suffix: str) -> str:
    """Derive the output path of a URL list from its input.

    For a URL the basename of its path is used (``sitemap`` when there is
    none); for a local file the ``.xml``/``.json`` extension is replaced.
    """
    if is_url(input_path):
        stem = PurePosixPath(urlparse(input_path).path).stem
        return f"{stem or 'sitemap'}{suffix}"

    replaced = re.sub(r"\.(xml|json)$", suffix, input_path, flags=re.IGNORECASE)
    if replaced != input_path:
        return replaced
    return f"{input_path}{suffix}"
