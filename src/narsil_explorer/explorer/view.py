"""
Explorer View - the immutable projection handed to presentation code.

Everything a renderer needs to draw one frame lives here; renderers never
reach back into the session's mutable state.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Tuple

from ..config import REMEDIATION_COMMAND
from ..core.types import CodeGraph, GraphNode, LayoutType
from .gate import GateState
from .query import ViewParameters


class CanvasState(StrEnum):
    """What the graph area shows while the gate is READY."""
    NO_REPOSITORY = "no_repository"
    LOADING = "loading"
    ERROR = "error"
    GRAPH = "graph"


@dataclass(frozen=True)
class GraphStats:
    """Counts for the stats overlay."""
    node_count: int
    edge_count: int
    total_nodes: int
    max_nodes: int

    @property
    def truncated(self) -> bool:
        return self.total_nodes > self.node_count

    @property
    def summary(self) -> str:
        text = f"{self.node_count} nodes · {self.edge_count} edges"
        if self.truncated:
            text += f" (top {self.max_nodes} of {self.total_nodes})"
        return text

    @classmethod
    def from_graphs(cls, raw: CodeGraph, bounded: CodeGraph, max_nodes: int) -> "GraphStats":
        return cls(
            node_count=bounded.metadata.node_count,
            edge_count=bounded.metadata.edge_count,
            total_nodes=len(raw.nodes),
            max_nodes=max_nodes,
        )


@dataclass(frozen=True)
class ExplorerView:
    """One rendered frame of the explorer."""
    gate: GateState
    version: str = "?"
    gate_error: Optional[str] = None
    canvas: Optional[CanvasState] = None
    graph: Optional[CodeGraph] = None
    graph_error: Optional[str] = None
    stats: Optional[GraphStats] = None
    params: Optional[ViewParameters] = None
    repositories: Tuple[str, ...] = ()
    selected: Optional[GraphNode] = None
    selection_available: bool = False
    layout: LayoutType = LayoutType.DAGRE
    max_nodes: int = 0
    loading: bool = False

    @property
    def remediation(self) -> Optional[str]:
        """Command that starts the backend, shown only in the ERROR gate."""
        if self.gate != GateState.ERROR:
            return None
        return REMEDIATION_COMMAND
