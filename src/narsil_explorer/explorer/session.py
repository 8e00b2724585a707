"""
Explorer Session - one open exploration view.

Wires the connection gate, query orchestrator, selection controller, keyed
graph query and reducer cache together, and projects their combined state
into an ExplorerView.

Typical flow:

    session = ExplorerSession(NarsilClient(url))
    session.start()                 # health -> repos -> first graph
    session.query.set_depth(3)
    session.sync()                  # fetch for the new parameters
    session.on_node_double_click(n) # re-root and fetch
    frame = session.view()
"""

import logging
from typing import Callable, List, Optional, Protocol

from ..config import ExplorerSettings, clamp_max_nodes
from ..core.exceptions import BackendUnavailableError, ExplorerError
from ..core.types import CodeGraph, GraphNode, GraphRequest, GraphResponse, HealthInfo, LayoutType
from ..graph.reducer import ReducedGraphCache
from .fetch import GraphQuery, QueryState
from .gate import ConnectionStatusGate, GateState
from .query import QueryOrchestrator, ViewParameters
from .selection import SelectionController
from .view import CanvasState, ExplorerView, GraphStats

logger = logging.getLogger(__name__)

Navigator = Callable[[str, int], None]


class ExplorerBackend(Protocol):
    """The fetch collaborator consumed by the session."""

    def health(self) -> HealthInfo: ...

    def repositories(self) -> List[str]: ...

    def graph(self, request: GraphRequest) -> GraphResponse: ...


def log_navigation(file_path: str, line: int) -> None:
    """Default navigator: there is no editor to open, so just record it."""
    logger.info(f"Navigate to: {file_path}:{line}")


class ExplorerSession:
    """
    Controller for one exploration view.

    Health and fetch errors are caught here and become view state; nothing
    raised by the backend escapes a session operation.
    """

    def __init__(
        self,
        backend: ExplorerBackend,
        settings: Optional[ExplorerSettings] = None,
        navigator: Optional[Navigator] = None,
    ):
        settings = settings or ExplorerSettings()
        self.backend = backend
        self.gate = ConnectionStatusGate()
        self.query = QueryOrchestrator(
            ViewParameters(view=settings.view, depth=settings.depth, direction=settings.direction)
        )
        self.selection = SelectionController(self.query)
        self.graph_query = GraphQuery(stale_time=settings.stale_time)
        self.reducer = ReducedGraphCache()
        self.max_nodes = settings.max_nodes
        self.layout = settings.layout
        self.repositories: List[str] = []
        self._navigator = navigator or log_navigation
        self._synced_refresh = 0

    # --- Lifecycle ---

    def connect(self) -> GateState:
        """Run the one-per-session health check."""
        if self.gate.state != GateState.CONNECTING:
            return self.gate.state
        try:
            health = self.backend.health()
        except BackendUnavailableError as e:
            self.gate.on_health_failed(str(e))
        else:
            self.gate.on_health_ok(health)
        return self.gate.state

    def load_repositories(self) -> List[str]:
        if not self.gate.is_ready:
            return []
        try:
            repositories = self.backend.repositories()
        except ExplorerError as e:
            logger.warning(f"Could not list repositories: {e}")
            repositories = []
        self.repositories = list(repositories)
        self.query.on_repositories(self.repositories)
        return self.repositories

    def start(self) -> ExplorerView:
        """Connect, pick a default repository and load the first graph."""
        if self.connect() == GateState.READY:
            self.load_repositories()
            self.sync()
        return self.view()

    def sync(self) -> QueryState:
        """
        Make the graph query reflect the current parameters.

        Does nothing outside READY. A pending manual refresh forces a fetch
        that bypasses the cache.
        """
        if not self.gate.is_ready:
            return self.graph_query.state

        force = self.query.refresh_count != self._synced_refresh
        self._synced_refresh = self.query.refresh_count
        return self.graph_query.load(
            self.backend,
            self.query.graph_request(),
            enabled=self.query.fetch_enabled,
            force=force,
        )

    def refresh(self) -> QueryState:
        self.query.refresh()
        return self.sync()

    # --- Interaction ---

    def on_node_select(self, node: Optional[GraphNode]) -> None:
        self.selection.select(node)

    def on_node_double_click(self, node: GraphNode) -> QueryState:
        self.selection.focus_as_root(node)
        return self.sync()

    def set_max_nodes(self, max_nodes: int) -> int:
        self.max_nodes = clamp_max_nodes(max_nodes)
        return self.max_nodes

    def set_layout(self, layout: LayoutType) -> None:
        self.layout = LayoutType(layout)

    def navigate(self, file_path: str, line: int) -> None:
        self._navigator(file_path, line)

    # --- Derived state ---

    @property
    def raw_graph(self) -> Optional[CodeGraph]:
        data = self.graph_query.state.data
        if data is None or data.error is not None:
            return None
        return data.graph

    @property
    def bounded_graph(self) -> Optional[CodeGraph]:
        return self.reducer.get(self.raw_graph, self.max_nodes)

    @property
    def loading(self) -> bool:
        return self.graph_query.state.pending

    def _canvas_state(self) -> CanvasState:
        state = self.graph_query.state
        if not self.query.fetch_enabled:
            return CanvasState.NO_REPOSITORY
        if state.pending:
            return CanvasState.LOADING
        if state.error is not None or (state.data is not None and state.data.error is not None):
            return CanvasState.ERROR
        return CanvasState.GRAPH

    def view(self) -> ExplorerView:
        """Project the current state into one renderable frame."""
        if not self.gate.is_ready:
            return ExplorerView(
                gate=self.gate.state,
                gate_error=self.gate.error,
            )

        canvas = self._canvas_state()
        state = self.graph_query.state
        graph_error = None
        if canvas == CanvasState.ERROR:
            graph_error = state.error or (state.data.error if state.data else None)

        raw = self.raw_graph if canvas == CanvasState.GRAPH else None
        bounded = self.reducer.get(raw, self.max_nodes)
        stats = GraphStats.from_graphs(raw, bounded, self.max_nodes) if bounded is not None else None

        return ExplorerView(
            gate=self.gate.state,
            version=self.gate.version,
            canvas=canvas,
            graph=bounded,
            graph_error=graph_error,
            stats=stats,
            params=self.query.params,
            repositories=tuple(self.repositories),
            selected=self.selection.selected,
            selection_available=self.selection.is_available(bounded),
            layout=self.layout,
            max_nodes=self.max_nodes,
            loading=self.loading,
        )
