"""Compose one Markdown document per parent page from its child pages."""

import asyncio
import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.console import Console
from rich.markup import escape

from sitemap_to_md.config import HttpConfig
from sitemap_to_md.converter.markdown import html_to_markdown, select_content, with_title_heading
from sitemap_to_md.discovery.source import read_local_file
from sitemap_to_md.errors import NetworkError, ParseError
from sitemap_to_md.output import MultiFileOutput
from sitemap_to_md.utils.http import create_client, fetch_text
from sitemap_to_md.utils.url_utils import last_url_segment

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
SECTION_SEPARATOR = "\n\n---\n\n"


class Composition(BaseModel):
    """Parent pages, their candidate children, and the selectors to apply."""

    model_config = ConfigDict(populate_by_name=True)

    target_selectors: list[str] = Field(default_factory=list, alias="targetSelectors")
    # Older composition files spell this key "targerSelectors"
    misspelt_target_selectors: list[str] = Field(default_factory=list, alias="targerSelectors")
    remove_selectors: list[str] = Field(default_factory=list, alias="removeSelectors")
    parents: list[str]
    children: list[str] = Field(default_factory=list)

    @property
    def targets(self) -> list[str]:
        return self.target_selectors or self.misspelt_target_selectors

    def children_of(self, parent: str) -> list[str]:
        """Children whose URL starts with ``parent`` (the parent itself excluded)."""
        return [c for c in self.children if c.startswith(parent) and c != parent]


async def load_composition(path: str | Path) -> Composition:
    """Read and validate a composition JSON file."""
    content = await read_local_file(path)
    try:
        return Composition.model_validate(json.loads(content))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid composition JSON: {e}") from e
    except ValidationError as e:
        raise ParseError(f"Invalid composition file: {e}") from e


class CompositionRunner:
    """Fetch each parent with its children and write them as one file."""

    def __init__(
        self,
        composition: Composition,
        output_dir: Path,
        http: HttpConfig | None = None,
        console: Console | None = None,
    ):
        self.composition = composition
        self.writer = MultiFileOutput(output_dir)
        self.http = http or HttpConfig()
        self.console = console or Console()

    async def run(self) -> list[Path]:
        """Write one Markdown file per parent and return their paths."""
        composition = self.composition
        self.console.print(f"Parents: {len(composition.parents)}")
        self.console.print(f"Children: {len(composition.children)}")
        self.console.print(f"Target selectors: {escape(', '.join(composition.targets))}")
        self.console.print(f"Remove selectors: {escape(', '.join(composition.remove_selectors))}")

        self.writer.prepare()
        written: list[Path] = []

        async with create_client(self.http) as client:
            for index, parent in enumerate(composition.parents):
                self.console.print(
                    f"\n\\[{index + 1}/{len(composition.parents)}] Parent: {escape(parent)}"
                )
                children = composition.children_of(parent)
                urls = [parent, *children]
                self.console.print(
                    f"  Found {len(children)} children, {len(urls)} pages to fetch"
                )

                sections: list[str] = []
                for start in range(0, len(urls), BATCH_SIZE):
                    chunk = urls[start:start + BATCH_SIZE]
                    sections.extend(
                        await asyncio.gather(*(self._scrape(client, url) for url in chunk))
                    )

                path = await self.writer.write(
                    last_url_segment(parent), SECTION_SEPARATOR.join(sections)
                )
                self.console.print(f"  [green]✓ Generated: {escape(str(path))}[/green]")
                written.append(path)

        return written

    async def _scrape(self, client, url: str) -> str:
        """Return the Markdown section for ``url``; failures become an inline error."""
        try:
            html = await fetch_text(client, url, self.http.max_redirects)
        except NetworkError as e:
            logger.debug("Composition fetch failed for %s", url, exc_info=True)
            return f"Error fetching {url}: {e}"

        try:
            title, selected = select_content(
                html, self.composition.targets, self.composition.remove_selectors
            )
            markdown = html_to_markdown(selected)
        except Exception as e:
            logger.debug("Composition conversion failed for %s", url, exc_info=True)
            self.console.print(f"    [red]✗ Error in {escape(url)}: {escape(str(e))}[/red]")
            return f"Error fetching {url}: {e}"

        if self.composition.targets and not selected:
            self.console.print(
                f"    [yellow]Warning: no content found for target selectors in {escape(url)}[/yellow]"
            )

        return with_title_heading(title, markdown)
