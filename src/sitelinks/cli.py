"""CLI interface for Sitelinks.

Command-line tool for resolving and checking links in site content.
"""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from sitelinks.config import Config
from sitelinks.core.markdown import LinkCheckLevel, LinkContext, check_markdown
from sitelinks.core.paths import canonicalize_relative_path
from sitelinks.core.permalinks import load_permalinks
from sitelinks.core.resolver import LinkNotFoundError, resolve_internal_link
from sitelinks.core.types import PermalinkTable

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover sitelinks.toml)",
)

permalinks_option = click.option(
    "--permalinks",
    "permalinks_file",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Permalinks JSON file (overrides config)",
)

verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging)",
)


@click.group()
def cli() -> None:
    """Sitelinks - internal link resolution for documentation sites."""


@cli.command()
@click.argument("link")
@permalinks_option
@config_option
def resolve(link: str, permalinks_file: Path | None, config_path: Path | None) -> None:
    """Resolve an internal link (e.g. @/pages/about.md#team) to its permalink."""
    config = _load_config(config_path).with_overrides(permalinks_file=permalinks_file)
    permalinks = _load_permalinks(config)

    try:
        resolved = resolve_internal_link(link, permalinks)
    except LinkNotFoundError as e:
        _fail(str(e))

    click.echo(resolved.permalink)
    click.echo(f"Path: {resolved.md_path}")
    if resolved.anchor is not None:
        click.echo(f"Anchor: {resolved.anchor}")


@cli.command()
@click.argument("link")
@click.option(
    "--page",
    default=None,
    help="Path of the page containing the link (e.g. docs/guide/setup.md)",
)
@click.option(
    "--resolve-symlinks/--no-resolve-symlinks",
    default=False,
    help="Try filesystem canonicalization before lexical normalization",
)
def canonicalize(link: str, page: str | None, resolve_symlinks: bool) -> None:
    """Normalize a relative link against the page containing it."""
    click.echo(canonicalize_relative_path(link, page, resolve_symlinks=resolve_symlinks))


@cli.command()
@click.option(
    "--content-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Content source directory (overrides config)",
)
@permalinks_option
@click.option(
    "--warn-only",
    is_flag=True,
    help="Report broken internal links without failing",
)
@verbose_option
@config_option
def check(
    content_dir: Path | None,
    permalinks_file: Path | None,
    warn_only: bool,
    verbose: bool,
    config_path: Path | None,
) -> None:
    """Check internal links in all markdown files of the content directory."""
    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        content_dir=content_dir,
        permalinks_file=permalinks_file,
        internal_level=LinkCheckLevel.WARN if warn_only else None,
    )
    permalinks = _load_permalinks(config)

    source_dir = config.links.content_dir
    if not source_dir.is_dir():
        _fail(f"Content directory not found: {source_dir}")

    click.echo(f"Checking links in {source_dir}...")
    pages = 0
    broken: list[tuple[str, str]] = []
    for markdown_file in sorted(source_dir.rglob("*.md")):
        page_path = markdown_file.relative_to(source_dir).as_posix()
        context = LinkContext(
            permalinks=permalinks,
            current_page_path=page_path,
            current_page_permalink=permalinks.get(page_path),
            internal_level=config.link_checker.internal_level,
            resolve_symlinks=config.links.resolve_symlinks,
        )
        try:
            markdown_text = markdown_file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            _fail(f"Cannot read {page_path} as UTF-8: {e}")
        report = check_markdown(markdown_text, context)
        broken.extend((page_path, link) for link in report.broken_links)
        pages += 1

    for page_path, link in broken:
        click.echo(click.style(f"{page_path}: {link}", fg="yellow"))

    if not broken:
        click.echo(click.style(f"All internal links OK ({pages} pages)", fg="green"))
        return

    summary = f"{len(broken)} broken internal link(s) in {pages} pages"
    if config.link_checker.internal_level is LinkCheckLevel.WARN:
        click.echo(click.style(f"Warning: {summary}", fg="yellow"))
        return
    _fail(summary)


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@permalinks_option
@verbose_option
@config_option
def serve(
    host: str | None,
    port: int | None,
    permalinks_file: Path | None,
    verbose: bool,
    config_path: Path | None,
) -> None:
    """Start the link resolution API server."""
    from sitelinks.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        permalinks_file=permalinks_file,
    )
    permalinks = _load_permalinks(config)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Permalinks: {config.links.permalinks_file} ({len(permalinks)} entries)")
    run_server(config, permalinks=permalinks)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None) -> Config:
    """Load configuration or exit with error.

    Raises:
        SystemExit: If the configuration is invalid
    """
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _load_permalinks(config: Config) -> PermalinkTable:
    """Load the configured permalink table or exit with error.

    Raises:
        SystemExit: If the permalinks file is missing or invalid
    """
    try:
        return load_permalinks(config.links.permalinks_file)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
