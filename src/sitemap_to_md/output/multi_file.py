"""Multi-file output writer."""

import logging
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]

from sitemap_to_md.errors import OutputWriteError

logger = logging.getLogger(__name__)


class MultiFileOutput:
    """Write each page to a separate Markdown file in one directory.

    Existing files with the same name are overwritten.
    """

    def __init__(self, output_dir: Path, extension: str = ".md"):
        self.output_dir = Path(output_dir).expanduser().absolute()
        self.extension = extension

    def prepare(self) -> Path:
        """Create the output directory (and parents) if it does not exist."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(
                f"Cannot create output directory {self.output_dir}: {e.strerror or e}"
            ) from e
        return self.output_dir

    def path_for(self, filename: str) -> Path:
        return self.output_dir / f"{filename}{self.extension}"

    async def write(self, filename: str, content: str) -> Path:
        """Write ``content`` to ``{output_dir}/{filename}{extension}``."""
        filepath = self.path_for(filename)
        async with aiofiles.open(filepath, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.debug("Wrote %d chars to %s", len(content), filepath)
        return filepath
