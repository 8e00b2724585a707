"""
Health Command - check that the narsil-mcp backend is reachable.
"""

import sys

import click

from ...core.client import NarsilClient
from ...explorer.session import ExplorerSession
from ..render import render_gate
from ..utils import get_settings, json_envelope


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def health(ctx: click.Context, as_json: bool):
    """
    Check the backend connection.
    """
    settings = get_settings(ctx)
    with NarsilClient(settings.base_url, timeout=settings.timeout, retries=settings.retries) as client:
        session = ExplorerSession(client, settings)
        session.connect()
        view = session.view()

    if as_json:
        if view.gate_error:
            click.echo(json_envelope(error=view.gate_error))
        else:
            click.echo(json_envelope({"status": str(view.gate), "version": session.gate.version}))
    else:
        render_gate(view)

    if view.gate_error:
        sys.exit(1)
