"""
Repos Command - list repositories indexed by the backend.
"""

import sys

import click

from ...core.client import NarsilClient
from ...explorer.session import ExplorerSession
from ..render import render_gate
from ..utils import echo_warning, get_settings, json_envelope


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def repos(ctx: click.Context, as_json: bool):
    """
    List repositories available for exploration.
    """
    settings = get_settings(ctx)
    with NarsilClient(settings.base_url, timeout=settings.timeout, retries=settings.retries) as client:
        session = ExplorerSession(client, settings)
        session.connect()
        repositories = session.load_repositories()
        view = session.view()

    if as_json:
        if view.gate_error:
            click.echo(json_envelope(error=view.gate_error))
        else:
            click.echo(json_envelope({"repos": repositories}))
        if view.gate_error:
            sys.exit(1)
        return

    if not render_gate(view):
        sys.exit(1)

    if not repositories:
        echo_warning("No repositories indexed. Start narsil-mcp with --repos <path>.")
        return

    for index, name in enumerate(repositories):
        marker = "*" if index == 0 else " "
        click.echo(f" {marker} {name}")
