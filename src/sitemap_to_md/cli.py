"""Command-line interface for sitemap-to-md."""

import asyncio
import logging
import tomllib
from pathlib import Path
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from sitemap_to_md import __version__
from sitemap_to_md.composition import CompositionRunner, load_composition
from sitemap_to_md.config import (
    AppConfig,
    Engine,
    HttpConfig,
    FilterPatterns,
    JinaResponseFormat,
    TitleType,
    api_key_from_env,
    load_env,
)
from sitemap_to_md.errors import SitemapToMdError
from sitemap_to_md.orchestrator import Orchestrator, extract_url_list
from sitemap_to_md.output import ListFormat, list_format_for
from sitemap_to_md.utils.url_utils import default_list_output_path

app = typer.Typer(
    name="sitemap-to-md",
    help="Turn website sitemaps into URL lists or downloaded Markdown pages.",
    rich_markup_mode="rich",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool):
    if value:
        console.print(f"sitemap-to-md version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Sitemap to URL list / Markdown converter."""
    load_env()


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def _setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _run(coro, verbose: bool):
    """Run a pipeline coroutine, mapping failures to exit codes."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(130)
    except SitemapToMdError as e:
        _fail(str(e))
    except Exception as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            err_console.print_exception()
        raise typer.Exit(1)


def _compact(values: dict) -> dict:
    """Drop unset (None) values and empty sections."""
    result = {}
    for key, value in values.items():
        if isinstance(value, dict):
            value = _compact(value)
            if not value:
                continue
        if value is None:
            continue
        result[key] = value
    return result


def _parse_choice(enum_cls, value: Optional[str], option: str):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(f"'{m.value}'" for m in enum_cls)
        _fail(f"{option} must be one of {choices}, got '{value}'")


@app.command()
def markdown(
    source: Optional[str] = typer.Option(
        None,
        "--input",
        "-i",
        help="Sitemap XML, JSON file with {urls: [...]}, or URL",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory where the .md files are written",
    ),
    engine: Optional[str] = typer.Option(
        None,
        "--engine",
        "-e",
        help="Extraction engine: 'fetch' (default), 'jina' or 'firecrawl'",
    ),
    title_type: Optional[str] = typer.Option(
        None,
        "--title-type",
        "-t",
        help="Filename source: 'page' (page title, default) or 'url' (last URL segment, always numbered)",
    ),
    target_selector: Optional[str] = typer.Option(
        None,
        "--target-selector",
        help="CSS selectors to keep (jina/firecrawl), e.g. 'main, #content'",
    ),
    remove_selector: Optional[str] = typer.Option(
        None,
        "--remove-selector",
        help="CSS selectors to drop (jina/firecrawl), e.g. 'header, .ads'",
    ),
    include_pattern: Optional[list[str]] = typer.Option(
        None,
        "--include-pattern",
        help="Keep URLs containing this text (repeatable)",
    ),
    exclude_pattern: Optional[list[str]] = typer.Option(
        None,
        "--exclude-pattern",
        help="Drop URLs containing this text (repeatable)",
    ),
    numeric_prefix: bool = typer.Option(
        False,
        "--numeric-prefix",
        help="Prefix filenames with a zero-padded position (001-title)",
    ),
    jina_api_key: Optional[str] = typer.Option(
        None,
        "--jina-api-key",
        help="Jina API key (defaults to JINA_API_KEY)",
    ),
    jina_format: Optional[str] = typer.Option(
        None,
        "--jina-format",
        help="Jina response format: 'text' (default) or 'json'",
    ),
    firecrawl_api_key: Optional[str] = typer.Option(
        None,
        "--firecrawl-api-key",
        help="Firecrawl API key (defaults to FIRECRAWL_API_KEY)",
    ),
    batch_size: Optional[int] = typer.Option(
        None,
        "--batch-size",
        help="URLs processed concurrently per batch (jina/firecrawl)",
    ),
    delay: Optional[float] = typer.Option(
        None,
        "--delay",
        help="Pause between pages in seconds (fetch engine)",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML file with run settings; command-line options take precedence",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """
    Download every page of a sitemap as a Markdown file.

    Examples:

        sitemap-to-md markdown -i sitemap.xml -o ./docs

        sitemap-to-md markdown -i https://example.com/sitemap.xml -o ./docs --engine jina

        sitemap-to-md markdown -i urls.json -o ./docs --title-type url --include-pattern /blog/
    """
    _setup_logging(verbose)

    engine_value = _parse_choice(Engine, engine, "--engine")
    title_value = _parse_choice(TitleType, title_type, "--title-type")
    jina_format_value = _parse_choice(JinaResponseFormat, jina_format, "--jina-format")

    if config_file is None and (not source or not output):
        err_console.print(
            "Usage: sitemap-to-md markdown -i <sitemap.(xml|json|url)> -o <output-dir> [options]"
        )
        _fail("--input and --output are required")

    overrides = _compact(
        {
            "input": source,
            "output_dir": str(output) if output else None,
            "verbose": verbose or None,
            "filters": {
                "include": include_pattern or None,
                "exclude": exclude_pattern or None,
            },
            "naming": {
                "title_type": title_value,
                "numeric_prefix": numeric_prefix or None,
            },
            "http": {"timeout_seconds": timeout},
            "engine": {
                "engine": engine_value,
                "target_selector": target_selector,
                "remove_selector": remove_selector,
                "jina_api_key": jina_api_key,
                "jina_response_format": jina_format_value,
                "firecrawl_api_key": firecrawl_api_key,
            },
            "batch": {"batch_size": batch_size, "delay_seconds": delay},
        }
    )

    try:
        if config_file is not None:
            config = AppConfig.from_toml(config_file, overrides)
        else:
            config = AppConfig.model_validate(overrides)
    except (OSError, tomllib.TOMLDecodeError) as e:
        _fail(f"Cannot load config {config_file}: {e}")
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")

    config = config.model_copy(
        update={
            "engine": config.engine.model_copy(
                update={
                    "jina_api_key": config.engine.jina_api_key or api_key_from_env(Engine.JINA),
                    "firecrawl_api_key": config.engine.firecrawl_api_key
                    or api_key_from_env(Engine.FIRECRAWL),
                }
            )
        }
    )

    orchestrator = Orchestrator(config, console)
    _run(orchestrator.run(), verbose)


@app.command("urls")
def urls_command(
    source: Optional[str] = typer.Option(
        None,
        "--input",
        "-i",
        help="Sitemap XML, JSON file with {urls: [...]}, or URL",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (.txt or .json); derived from the input when omitted",
    ),
    list_format: str = typer.Option(
        "txt",
        "--format",
        "-f",
        help="Format used when --output is omitted: 'txt' or 'json'",
    ),
    include_pattern: Optional[list[str]] = typer.Option(
        None,
        "--include-pattern",
        help="Keep URLs containing this text (repeatable)",
    ),
    exclude_pattern: Optional[list[str]] = typer.Option(
        None,
        "--exclude-pattern",
        help="Drop URLs containing this text (repeatable)",
    ),
    timeout: float = typer.Option(
        30.0,
        "--timeout",
        help="Request timeout in seconds when the input is a URL",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """
    Extract the URLs of a sitemap into a .txt (one per line) or .json file.

    Examples:

        sitemap-to-md urls -i sitemap.xml

        sitemap-to-md urls -i https://example.com/sitemap.xml -o urls.json --exclude-pattern /tag/
    """
    _setup_logging(verbose)

    if not source:
        err_console.print("Usage: sitemap-to-md urls -i <sitemap.(xml|json|url)> [-o <output.txt|json>]")
        _fail("--input is required")

    fmt = _parse_choice(ListFormat, list_format, "--format")
    output_path = output or default_list_output_path(source, f".{fmt.value}")

    try:
        list_format_for(output_path)
    except SitemapToMdError as e:
        _fail(str(e))

    try:
        http = HttpConfig(timeout_seconds=timeout)
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")

    filters = FilterPatterns(include=include_pattern or [], exclude=exclude_pattern or [])
    _run(extract_url_list(source, output_path, filters, http, console), verbose)


@app.command()
def compose(
    composition_file: Path = typer.Option(
        ...,
        "--input",
        "-i",
        help="Composition JSON with parents, children and selectors",
    ),
    output: Path = typer.Option(
        Path("./output"),
        "--output",
        "-o",
        help="Directory where one .md file per parent is written",
    ),
    timeout: float = typer.Option(
        30.0,
        "--timeout",
        help="Per-request timeout in seconds",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """
    Merge each parent page and its child pages into a single Markdown file.
    """
    _setup_logging(verbose)

    try:
        http = HttpConfig(timeout_seconds=timeout)
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")

    async def run_composition():
        composition = await load_composition(composition_file)
        runner = CompositionRunner(composition, output, http, console)
        return await runner.run()

    _run(run_composition(), verbose)
    console.print("\n[green]Done.[/green]")


if __name__ == "__main__":
    app()
