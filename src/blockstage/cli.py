"""CLI interface for Blockstage.

Command-line tool for serving a site's content tree and inspecting it.
"""

import logging
import sys
from pathlib import Path

import click

from blockstage.config import Config
from blockstage.core.components import StaticComponentLibrary
from blockstage.core.errors import ContentLoadError
from blockstage.core.loader import load_site_content
from blockstage.core.website import build_website


@click.group()
def cli() -> None:
    """Blockstage - Content-driven websites, block by block."""


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None) -> Config:
    try:
        return Config.load(config_path)
    except (FileNotFoundError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover blockstage.toml)",
)
@click.option(
    "--content",
    "content_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Site content file (overrides config)",
)
@click.option(
    "--components",
    "components_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Component manifest file (overrides config)",
)
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
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (debug logging, section errors)",
)
@click.option(
    "--live-reload/--no-live-reload",
    default=None,
    help="Enable/disable live reload (overrides config, default: enabled)",
)
def serve(
    config_path: Path | None,
    content_file: Path | None,
    components_file: Path | None,
    host: str | None,
    port: int | None,
    verbose: bool,
    live_reload: bool | None,
) -> None:
    """Start the site server."""
    from blockstage.server import run_server

    _configure_logging(verbose)
    config = _load_config(config_path).with_overrides(
        host=host,
        port=port,
        content_file=content_file,
        components_file=components_file,
        live_reload_enabled=live_reload,
    )

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Content file: {config.site.content_file}")
    if config.site.components_file:
        click.echo(f"Components: {config.site.components_file}")
    else:
        click.echo("Components: none (every section renders as a placeholder)")
    click.echo(f"Live reload: {'enabled' if config.live_reload.enabled else 'disabled'}")

    try:
        run_server(config, verbose=verbose)
    except (FileNotFoundError, ValueError, ContentLoadError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover blockstage.toml)",
)
@click.option(
    "--content",
    "content_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Site content file (overrides config)",
)
@click.option(
    "--components",
    "components_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Component manifest file (overrides config)",
)
def pages(
    config_path: Path | None,
    content_file: Path | None,
    components_file: Path | None,
) -> None:
    """List the site's pages and the components their sections use."""
    config = _load_config(config_path).with_overrides(
        content_file=content_file,
        components_file=components_file,
    )

    try:
        website = build_website(load_site_content(config.site.content_file))
        library = (
            StaticComponentLibrary.load(config.site.components_file)
            if config.site.components_file is not None
            else None
        )
    except (FileNotFoundError, ValueError, ContentLoadError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    if website.is_empty:
        click.echo("No pages found")
        return

    for page in website.pages:
        click.echo(click.style(f"{page.route}", bold=True) + f"  {page.title}")
        for name, sections in page.get_areas().items():
            for section in sections:
                for nested in section.iter_sections():
                    missing = library is not None and library.resolve(nested.component) is None
                    marker = click.style("  (not found)", fg="red") if missing else ""
                    click.echo(f"  [{name}] {nested.id} {nested.component}{marker}")
