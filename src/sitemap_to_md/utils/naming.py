"""Output filename derivation."""

import re
import unicodedata

from sitemap_to_md.config import NamingPolicy, TitleType
from sitemap_to_md.utils.url_utils import last_url_segment

MAX_NAME_LENGTH = 100


def sanitize_filename(name: str) -> str:
    """Turn a page title into a lowercase, hyphenated, ASCII-only name.

    Returns ``untitled`` when nothing usable is left.
    """
    name = unicodedata.normalize("NFD", name.lower())
    name = "".join(c for c in name if not unicodedata.combining(c))
    name = re.sub(r"[^a-z0-9\s-]", "", name)
    name = re.sub(r"\s+", "-", name.strip())
    name = re.sub(r"-+", "-", name).strip("-")
    return name[:MAX_NAME_LENGTH] or "untitled"


def derive_filename(
    url: str,
    title: str | None,
    policy: NamingPolicy,
    index: int,
    total: int,
) -> str:
    """Compute the base filename (no extension) for the page at ``index``.

    ``index`` is 0-based; the numeric prefix is 1-based and zero-padded to
    the number of digits in ``total``.
    """
    if policy.title_type == TitleType.PAGE:
        base = sanitize_filename(title or "untitled")
        if base == "untitled":
            base = last_url_segment(url)
    else:
        base = last_url_segment(url)

    if policy.numeric_prefix or policy.title_type == TitleType.URL:
        width = len(str(total))
        return f"{index + 1:0{width}d}-{base}"
    return base
