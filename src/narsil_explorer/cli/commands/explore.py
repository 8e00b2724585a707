"""
Explore Command - fetch, bound and display one code graph.

Runs a full explorer session: health check, default repository selection,
graph fetch and reduction. `--root` recenters the query on a node,
`--select` opens a node in the detail panel and `--open` jumps to its
source location.

Usage:
    narsil-explorer explore                          # first repo, call graph
    narsil-explorer explore --view import --depth 3
    narsil-explorer explore --root main --direction out --max-nodes 50
    narsil-explorer explore --json > graph.json
"""

import logging
import sys

import click

from ...config import MAX_NODES_CEILING, MIN_MAX_NODES
from ...core.client import NarsilClient
from ...core.types import Direction, LayoutType, ViewKind
from ...explorer.gate import GateState
from ...explorer.session import ExplorerSession
from ...explorer.view import CanvasState, ExplorerView
from ..render import render_view
from ..utils import echo_error, echo_navigation, get_settings, json_envelope

logger = logging.getLogger(__name__)


def _choices(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


@click.command()
@click.option("-r", "--repo", "repository", default=None, help="Repository to explore (default: first indexed)")
@click.option("-v", "--view", "view_kind", type=_choices(ViewKind), default=None, help="Graph kind")
@click.option("-d", "--depth", type=click.IntRange(min=0), default=None, help="Traversal depth")
@click.option("--root", default=None, help="Node id to center the exploration on")
@click.option("--direction", type=_choices(Direction), default=None, help="Call direction (call view only)")
@click.option("--metrics", is_flag=True, help="Include complexity metrics")
@click.option("--security", is_flag=True, help="Include security findings")
@click.option("--clustered", is_flag=True, help="Cluster nodes by file")
@click.option(
    "-n", "--max-nodes",
    type=click.IntRange(MIN_MAX_NODES, MAX_NODES_CEILING, clamp=True),
    default=None,
    help=f"Render at most this many nodes ({MAX_NODES_CEILING} disables the limit)",
)
@click.option("--layout", type=_choices(LayoutType), default=None, help="Layout hint for renderers")
@click.option("--select", "select_id", default=None, help="Show details for this node id")
@click.option("--open", "open_selected", is_flag=True, help="Open the selected node's source location")
@click.option("--rows", default=25, show_default=True, help="Node rows to print")
@click.option("--json", "as_json", is_flag=True, help="Output the bounded graph as JSON")
@click.pass_context
def explore(
    ctx: click.Context,
    repository: str | None,
    view_kind: str | None,
    depth: int | None,
    root: str | None,
    direction: str | None,
    metrics: bool,
    security: bool,
    clustered: bool,
    max_nodes: int | None,
    layout: str | None,
    select_id: str | None,
    open_selected: bool,
    rows: int,
    as_json: bool,
):
    """
    Explore a code graph from the narsil-mcp backend.
    """
    settings = get_settings(ctx)

    with NarsilClient(settings.base_url, timeout=settings.timeout, retries=settings.retries) as client:
        session = ExplorerSession(client, settings, navigator=echo_navigation)

        query = session.query
        if repository:
            query.set_repository(repository)
        if view_kind:
            query.set_view_kind(ViewKind(view_kind))
        if depth is not None:
            query.set_depth(depth)
        if root:
            query.set_root(root)
        if direction:
            query.set_direction(Direction(direction))
        query.set_include_metrics(metrics)
        query.set_include_security(security)
        query.set_clustered(clustered)
        if max_nodes is not None:
            session.set_max_nodes(max_nodes)
        if layout:
            session.set_layout(LayoutType(layout))

        session.start()

        if select_id and session.bounded_graph is not None:
            node = session.bounded_graph.get_node(select_id) or session.raw_graph.get_node(select_id)
            if node is None:
                echo_error(f"Node not found: {select_id}")
            session.on_node_select(node)

        view = session.view()

    if as_json:
        _emit_json(view)
    else:
        render_view(view, rows=rows)
        if open_selected and view.selected is not None and view.selected.file_path:
            session.navigate(view.selected.file_path, view.selected.line or 1)

    if view.gate == GateState.ERROR or view.canvas == CanvasState.ERROR:
        sys.exit(1)


def _emit_json(view: ExplorerView) -> None:
    if view.gate != GateState.READY:
        click.echo(json_envelope(error=view.gate_error or str(view.gate)))
        return
    if view.canvas == CanvasState.ERROR:
        click.echo(json_envelope(error=view.graph_error))
        return
    if view.canvas == CanvasState.NO_REPOSITORY:
        click.echo(json_envelope(error="No repository selected"))
        return

    stats = view.stats
    click.echo(json_envelope({
        "repo": view.params.repository,
        "layout": str(view.layout),
        "graph": view.graph.model_dump(mode="json") if view.graph is not None else None,
        "stats": {
            "node_count": stats.node_count,
            "edge_count": stats.edge_count,
            "total_nodes": stats.total_nodes,
            "truncated": stats.truncated,
        } if stats is not None else None,
        "selected": view.selected.id if view.selected is not None else None,
    }))
