"""
Rich rendering of ExplorerView frames.

This is the terminal stand-in for the canvas, stats overlay and detail
panel. Layout is not computed here; the chosen layout is only reported.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.types import CodeGraph, GraphNode
from ..explorer.gate import GateState
from ..explorer.view import CanvasState, ExplorerView

console = Console()


def render_gate(view: ExplorerView, out: Optional[Console] = None) -> bool:
    """
    Render the connecting/error screens.

    Returns:
        True if the gate is READY and the caller should render the rest.
    """
    out = out or console
    if view.gate == GateState.CONNECTING:
        out.print("[dim]Connecting to server...[/dim]")
        return False

    if view.gate == GateState.ERROR:
        body = (
            "Could not connect to the narsil-mcp server. "
            "Make sure it's running with the [bold]--http[/bold] flag.\n\n"
            f"[cyan]{view.remediation}[/cyan]"
        )
        if view.gate_error:
            body += f"\n\n[dim]{view.gate_error}[/dim]"
        out.print(Panel(body, title="[red]Connection Failed[/red]", border_style="red"))
        return False

    out.print(f"[bold]narsil-mcp[/bold] [dim]v{view.version}[/dim]  [green]● Connected[/green]")
    return True


def render_graph_table(graph: CodeGraph, rows: int, out: Console) -> None:
    degree = {node.id: 0 for node in graph.nodes}
    for edge in graph.edges:
        degree[edge.source] = degree.get(edge.source, 0) + 1
        degree[edge.target] = degree.get(edge.target, 0) + 1

    table = Table(title="Nodes", show_lines=False)
    table.add_column("ID", style="cyan", overflow="fold")
    table.add_column("Label")
    table.add_column("Kind", style="magenta")
    table.add_column("Edges", justify="right")
    table.add_column("Location", style="dim")

    for node in graph.nodes[:rows]:
        table.add_row(node.id, node.label, node.kind, str(degree.get(node.id, 0)), node.location or "")

    out.print(table)
    if len(graph.nodes) > rows:
        out.print(f"[dim]... {len(graph.nodes) - rows} more nodes[/dim]")


def render_node_details(node: GraphNode, available: bool, out: Console) -> None:
    lines = [
        f"[bold]{node.label}[/bold]  [magenta]{node.kind}[/magenta]",
        f"[dim]{node.id}[/dim]",
    ]
    if node.location:
        lines.append(f"Location: {node.location}")
    if node.metrics:
        metrics = ", ".join(f"{key}={value}" for key, value in node.metrics.items())
        lines.append(f"Metrics: {metrics}")
    if node.security:
        lines.append(f"[red]Security: {node.security}[/red]")
    if not available:
        lines.append("[yellow]Not present in the current graph[/yellow]")
    out.print(Panel("\n".join(lines), title="Details"))


def render_view(view: ExplorerView, rows: int = 25, out: Optional[Console] = None) -> None:
    """Render one full frame."""
    out = out or console
    if not render_gate(view, out):
        return

    if view.params is not None:
        params = view.params
        direction = params.effective_direction or "-"
        out.print(
            f"[dim]repo={params.repository or '-'} view={params.view} depth={params.depth} "
            f"root={params.root or '-'} direction={direction} layout={view.layout}[/dim]"
        )

    if view.canvas == CanvasState.NO_REPOSITORY:
        out.print("Select a repository to visualize")
    elif view.canvas == CanvasState.LOADING:
        out.print("[dim]Loading graph...[/dim]")
    elif view.canvas == CanvasState.ERROR:
        out.print(Panel(view.graph_error or "Unknown error", title="[red]Error loading graph[/red]"))
    elif view.graph is not None:
        render_graph_table(view.graph, rows, out)

    if view.stats is not None:
        style = "yellow" if view.stats.truncated else "white"
        out.print(f"[{style}]{view.stats.summary}[/{style}]")

    if view.selected is not None:
        render_node_details(view.selected, view.selection_available, out)
