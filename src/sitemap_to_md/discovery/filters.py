"""Substring-based URL filtering."""

from collections.abc import Sequence

from pydantic import BaseModel


class FilterResult(BaseModel):
    """Filtered URLs plus the count left after each stage."""

    urls: list[str]
    total: int
    after_include: int
    after_exclude: int

    @property
    def is_empty(self) -> bool:
        return not self.urls


def _as_list(patterns: str | Sequence[str] | None) -> list[str]:
    if not patterns:
        return []
    if isinstance(patterns, str):
        return [patterns]
    return list(patterns)


def filter_urls(
    urls: Sequence[str],
    include_patterns: str | Sequence[str] | None = None,
    exclude_patterns: str | Sequence[str] | None = None,
) -> FilterResult:
    """Keep URLs containing any include pattern, then drop those containing any exclude pattern.

    Matching is case-sensitive substring containment. An empty include list
    keeps everything; an empty exclude list drops nothing.
    """
    includes = _as_list(include_patterns)
    excludes = _as_list(exclude_patterns)

    included = list(urls)
    if includes:
        included = [u for u in included if any(p in u for p in includes)]

    remaining = included
    if excludes:
        remaining = [u for u in included if not any(p in u for p in excludes)]

    return FilterResult(
        urls=remaining,
        total=len(urls),
        after_include=len(included),
        after_exclude=len(remaining),
    )
