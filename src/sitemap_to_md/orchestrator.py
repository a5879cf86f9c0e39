"""Orchestrators that drive the sitemap pipelines."""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from sitemap_to_md.config import AppConfig, Engine, FilterPatterns, HttpConfig, TitleType
from sitemap_to_md.discovery import (
    FilterResult,
    SitemapFormat,
    SourceResolver,
    detect_format,
    extract_passthrough_fields,
    filter_urls,
    process_sitemap,
)
from sitemap_to_md.errors import EmptyContentError, EmptyResultError
from sitemap_to_md.fetcher import BaseFetcher, DirectFetcher, FirecrawlFetcher, JinaReaderFetcher
from sitemap_to_md.output import MultiFileOutput, UrlListOutput
from sitemap_to_md.utils.naming import derive_filename
from sitemap_to_md.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = (
    "Supported formats:\n"
    "  - XML: sitemap with <loc> tags\n"
    '  - JSON: { "urls": ["url1", "url2", ...] } or a bare array'
)


def empty_result(message: str) -> EmptyResultError:
    """Build an :class:`EmptyResultError` that lists the supported input formats."""
    return EmptyResultError(f"{message}\n{SUPPORTED_FORMATS}")


@dataclass
class UrlResult:
    """Outcome of processing one URL end to end."""

    url: str
    success: bool
    filename: str | None = None
    error: str | None = None


@dataclass
class BatchStats:
    """Success/error tally for a markdown run."""

    success_count: int = 0
    error_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)

    def add(self, result: UrlResult) -> None:
        if result.success:
            self.success_count += 1
        else:
            self.error_count += 1
            self.errors.append((result.url, result.error or "unknown error"))

    @property
    def total(self) -> int:
        return self.success_count + self.error_count


def chunked(items: list[str], size: int) -> list[list[str]]:
    """Split ``items`` into consecutive chunks of at most ``size``."""
    return [items[i:i + size] for i in range(0, len(items), size)]


def report_filter(console: Console, patterns: FilterPatterns, result: FilterResult) -> None:
    """Print the include/exclude stage counts."""
    if patterns.include:
        listed = escape("[" + ", ".join(patterns.include) + "]")
        console.print(
            f"URLs included (contain any of {listed}):"
            f" {result.after_include}"
        )
    if patterns.exclude:
        listed = escape("[" + ", ".join(patterns.exclude) + "]")
        console.print(
            f"URLs excluded (contain none of {listed}):"
            f" {result.after_include} -> {result.after_exclude}"
        )


class Orchestrator:
    """Coordinates the sitemap-to-Markdown batch pipeline."""

    def __init__(
        self,
        config: AppConfig,
        console: Console | None = None,
        fetcher: BaseFetcher | None = None,
    ):
        self.config = config
        self.console = console or Console()
        self._fetcher = fetcher
        self.rate_limiter: RateLimiter | None = None
        if config.engine.engine == Engine.FIRECRAWL:
            self.rate_limiter = RateLimiter(
                config.batch.firecrawl_max_calls,
                config.batch.firecrawl_period_seconds,
            )

    async def run(self) -> BatchStats:
        """Execute the full pipeline and return the success/error tally."""
        # A missing API key must fail before any I/O
        fetcher = self._fetcher or self._create_fetcher()

        self.console.print(
            f"Processing sitemap: {escape(self.config.input)}"
            f" [dim]\\[engine: {self.config.engine.engine.value}][/dim]"
        )
        urls = await self.discover()

        writer = MultiFileOutput(self.config.output_dir)
        writer.prepare()

        self.console.print(f"[blue]Processing {len(urls)} URLs...[/blue]")

        async with fetcher:
            stats = await self.run_batch(urls, fetcher, writer)

        self._print_summary(stats)
        return stats

    async def discover(self) -> list[str]:
        """Resolve, extract and filter the sitemap URLs."""
        async with SourceResolver(self.config.http) as resolver:
            result, _content = await process_sitemap(self.config.input, resolver)

        if not result.urls:
            raise empty_result("No URLs found in the sitemap")

        self.console.print(f"Source detected: {result.source.value}")
        self.console.print(f"URLs found: {len(result.urls)}")

        filtered = filter_urls(
            result.urls,
            self.config.filters.include,
            self.config.filters.exclude,
        )
        report_filter(self.console, self.config.filters, filtered)

        logger.debug(
            "Filtering kept %d of %d URLs (include=%s, exclude=%s)",
            len(filtered.urls),
            filtered.total,
            self.config.filters.include,
            self.config.filters.exclude,
        )
        if filtered.is_empty:
            raise empty_result("No URLs left after filtering")

        return filtered.urls

    async def run_batch(
        self,
        urls: list[str],
        fetcher: BaseFetcher,
        writer: MultiFileOutput,
    ) -> BatchStats:
        """Process every URL, sequentially for the direct engine, in chunks otherwise."""
        if self.config.engine.engine == Engine.FETCH:
            return await self._run_sequential(urls, fetcher, writer)
        return await self._run_chunked(urls, fetcher, writer)

    async def _run_sequential(
        self, urls: list[str], fetcher: BaseFetcher, writer: MultiFileOutput
    ) -> BatchStats:
        stats = BatchStats()
        total = len(urls)
        for index, url in enumerate(urls):
            if index > 0 and self.config.batch.delay_seconds:
                await asyncio.sleep(self.config.batch.delay_seconds)
            stats.add(await self._process_url(url, index, total, fetcher, writer))
        return stats

    async def _run_chunked(
        self, urls: list[str], fetcher: BaseFetcher, writer: MultiFileOutput
    ) -> BatchStats:
        stats = BatchStats()
        total = len(urls)
        size = self.config.batch.batch_size
        chunks = chunked(urls, size)

        for chunk_index, chunk in enumerate(chunks):
            start = chunk_index * size
            self.console.print(
                f"\n[bold]Batch {chunk_index + 1}/{len(chunks)}[/bold] ({len(chunk)} URLs)..."
            )
            results = await asyncio.gather(
                *(
                    self._process_url(url, start + offset, total, fetcher, writer)
                    for offset, url in enumerate(chunk)
                )
            )
            # Fold only once the whole chunk has settled
            for result in results:
                stats.add(result)

        if self.rate_limiter and self.rate_limiter.wait_count and self.config.verbose:
            self.console.print(
                f"[dim]Rate limiter paused {self.rate_limiter.wait_count} time(s)[/dim]"
            )
        return stats

    async def _process_url(
        self,
        url: str,
        index: int,
        total: int,
        fetcher: BaseFetcher,
        writer: MultiFileOutput,
    ) -> UrlResult:
        """Fetch, name and write a single page. Never raises."""
        self.console.print(f"\\[{index + 1}/{total}] Processing: {escape(url)}")

        if self.rate_limiter:
            async with self.rate_limiter:
                outcome = await fetcher.fetch(url)
        else:
            outcome = await fetcher.fetch(url)

        if outcome.success and not outcome.content.strip():
            outcome = outcome.model_copy(
                update={"success": False, "error": str(EmptyContentError("No markdown content returned"))}
            )

        if not outcome.success:
            error = outcome.error or "unknown error"
            self.console.print(f"  [red]✗ Error in {escape(url)}: {escape(error)}[/red]")
            return UrlResult(url=url, success=False, error=error)

        if self.config.verbose and self.config.naming.title_type == TitleType.PAGE:
            self.console.print(f"  [dim]Title: {escape(outcome.title or 'untitled')}[/dim]")

        filename = derive_filename(url, outcome.title, self.config.naming, index, total)
        try:
            await writer.write(filename, outcome.content)
        except OSError as e:
            error = f"Cannot write {filename}{writer.extension}: {e.strerror or e}"
            self.console.print(f"  [red]✗ Error in {escape(url)}: {escape(error)}[/red]")
            return UrlResult(url=url, success=False, filename=filename, error=error)

        self.console.print(f"  [green]✓ Saved: {escape(filename)}{writer.extension}[/green]")
        return UrlResult(url=url, success=True, filename=filename)

    def _create_fetcher(self) -> BaseFetcher:
        """Create the engine selected for this run."""
        engine = self.config.engine.engine

        if engine == Engine.FETCH:
            return DirectFetcher(self.config.engine, self.config.http)
        elif engine == Engine.JINA:
            return JinaReaderFetcher(self.config.engine, self.config.http)
        elif engine == Engine.FIRECRAWL:
            return FirecrawlFetcher(self.config.engine, self.config.http)
        else:
            raise ValueError(f"Unknown engine: {engine}")

    def _print_summary(self, stats: BatchStats) -> None:
        """Print failed URLs (first 10) and the final tally line."""
        if stats.errors and self.config.verbose:
            self.console.print()
            self.console.print("[bold red]Errors[/bold red]")
            for url, error in stats.errors[:10]:
                self.console.print(f"  [red]{escape(url)}[/red]: {escape(error)}")
            if len(stats.errors) > 10:
                self.console.print(
                    f"  [dim]... and {len(stats.errors) - 10} more errors[/dim]"
                )

        self.console.print(
            f"\n[bold]Completado:[/bold] {stats.success_count} exitosos,"
            f" {stats.error_count} errores"
        )


async def extract_url_list(
    source: str,
    output_path: str | Path,
    filters: FilterPatterns | None = None,
    http: HttpConfig | None = None,
    console: Console | None = None,
) -> Path:
    """Write the filtered URLs of a sitemap to a ``.txt`` or ``.json`` file.

    JSON output keeps the ``container``/``excludeSelectors`` fields of a
    JSON input.
    """
    console = console or Console()
    filters = filters or FilterPatterns()
    writer = UrlListOutput(output_path)

    console.print(f"Processing: {escape(source)}")
    async with SourceResolver(http) as resolver:
        result, content = await process_sitemap(source, resolver)

    console.print(f"Source detected: {result.source.value}")
    console.print(f"URLs found: {len(result.urls)}")

    filtered = filter_urls(result.urls, filters.include, filters.exclude)
    report_filter(console, filters, filtered)

    if filtered.is_empty:
        raise empty_result("No URLs found in the sitemap (or all were filtered out)")

    extras: dict = {}
    if detect_format(source, content) == SitemapFormat.JSON:
        extras = extract_passthrough_fields(content)

    path = await writer.write(filtered.urls, extras)
    console.print(
        f"[green]{writer.format.value.upper()} file created: {escape(str(output_path))}[/green]"
    )
    console.print(f"Extracted {len(filtered.urls)} URLs (of {filtered.total} original)")
    return path
