"""CLI interface for relurl.

Command-line tool for parsing URLs and rendering them relative to a base.
"""

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, cast

import click

from relurl.config import Config
from relurl.core.errors import UrlError
from relurl.core.renderer import UrlRenderer
from relurl.core.types import RenderMode
from relurl.core.url import Url


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log rendering decisions)",
)
def cli(verbose: bool) -> None:
    """relurl - render URLs relative to the page the browser has loaded."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("url")
def parse(url: str) -> None:
    """Show the components of a URL."""
    try:
        parsed = Url.parse(url)
    except UrlError as e:
        _fail(str(e))
    click.echo(json.dumps(parsed.to_dict(), indent=2))


@cli.command()
@click.argument("target")
@click.option(
    "--base",
    "-b",
    "base_url",
    default=None,
    help="URL the browser has loaded (overrides config)",
)
@click.option(
    "--mode",
    "-m",
    type=click.Choice(["auto", "relative", "full", "context"]),
    default="auto",
    show_default=True,
    help="Rendering mode",
)
@click.option(
    "--context-path",
    default=None,
    help="Application context path (overrides config)",
)
@click.option(
    "--filter-path",
    default=None,
    help="Dispatcher filter path (overrides config)",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover relurl.toml)",
)
def render(
    target: str,
    base_url: str | None,
    mode: str,
    context_path: str | None,
    filter_path: str | None,
    config_path: Path | None,
) -> None:
    """Render TARGET as a reference relative to the base URL."""
    try:
        config = Config.load(config_path).with_overrides(
            context_path=context_path,
            filter_path=filter_path,
            base_url=base_url,
        )
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))

    effective_base = _require_base_url(config)
    try:
        renderer = UrlRenderer(
            Url.parse(effective_base),
            deployment=config.deployment.to_deployment_path(),
        )
        click.echo(_render(renderer, target, cast(RenderMode, mode)))
    except UrlError as e:
        _fail(str(e))


@cli.command()
@click.argument("base")
@click.argument("target")
def resolve(base: str, target: str) -> None:
    """Resolve TARGET against BASE into a full URL."""
    try:
        renderer = UrlRenderer(Url.parse(base))
        click.echo(renderer.render_full_url(Url.parse(target)))
    except UrlError as e:
        _fail(str(e))


def _render(renderer: UrlRenderer, target: str, mode: RenderMode) -> str:
    if mode == "context":
        return renderer.render_context_relative_url(target)

    url = Url.parse(target)
    if mode == "relative":
        return renderer.render_relative_url(url)
    if mode == "full":
        return renderer.render_full_url(url)
    return renderer.render_url(url)


def _require_base_url(config: Config) -> str:
    """Get the effective base URL or exit with error.

    Args:
        config: Application config with CLI overrides applied

    Returns:
        Base URL string

    Raises:
        SystemExit: If no base URL is configured
    """
    if config.base.url is None:
        _fail("base url required (via --base or [base] url in relurl.toml)")
    return config.base.url


def _fail(message: str) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)
