"""URL list output (plain text or JSON)."""

import json
from enum import Enum
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from sitemap_to_md.errors import ConfigurationError, OutputWriteError


class ListFormat(str, Enum):
    """Format of a URL list file."""

    TXT = "txt"
    JSON = "json"


def list_format_for(path: str | Path) -> ListFormat:
    """Choose the list format from the output file extension."""
    suffix = Path(path).suffix.lower()
    if suffix == ".txt":
        return ListFormat.TXT
    if suffix == ".json":
        return ListFormat.JSON
    raise ConfigurationError(f'Unsupported output extension "{suffix}". Use .txt or .json')


class UrlListOutput:
    """Write a filtered URL list to a single file."""

    def __init__(self, output_path: str | Path, fmt: ListFormat | None = None):
        self.output_path = Path(output_path).expanduser().absolute()
        self.format = fmt or list_format_for(self.output_path)

    def render(self, urls: list[str], extras: dict | None = None) -> str:
        """Render the list: one URL per line, or ``{"urls": [...]}`` plus extras."""
        if self.format == ListFormat.JSON:
            payload: dict = {"urls": urls}
            payload.update(extras or {})
            return json.dumps(payload, indent=2, ensure_ascii=False)
        return "\n".join(urls)

    async def write(self, urls: list[str], extras: dict | None = None) -> Path:
        content = self.render(urls, extras)
        try:
            async with aiofiles.open(self.output_path, "w", encoding="utf-8") as f:
                await f.write(content)
        except OSError as e:
            raise OutputWriteError(
                f"Cannot write {self.output_path}: {e.strerror or e}"
            ) from e
        return self.output_path
