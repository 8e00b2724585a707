"""
narsil-explorer CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging
from pathlib import Path

import click

from ..config import load_settings
from ..core.exceptions import ConfigError
from .commands import explore, health, repos


@click.group()
@click.version_option(package_name="narsil-explorer")
@click.option("--url", "base_url", default=None, envvar="NARSIL_URL", help="narsil-mcp HTTP address")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: .narsil/explorer.yaml)",
)
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, base_url: str | None, config_path: Path | None, verbose: bool):
    """narsil-explorer: Explore narsil-mcp code graphs.

    \b
    Quick Start:
      narsil-mcp --repos . --http --call-graph
      narsil-explorer health
      narsil-explorer explore --max-nodes 50
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s",
    )

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if base_url:
        settings = settings.model_copy(update={"base_url": base_url})

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# Register commands
main.add_command(health.health)
main.add_command(repos.repos)
main.add_command(explore.explore)

if __name__ == "__main__":
    main()
