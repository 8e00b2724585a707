"""
Core type definitions for narsil-explorer.

These models mirror the graph payloads returned by the narsil-mcp HTTP
backend. Graph values are frozen snapshots: transformations build new
instances rather than mutating the ones handed to them.
"""

from enum import StrEnum
from typing import Any, Dict, List, NotRequired, Optional

from typing_extensions import TypedDict

from pydantic import BaseModel, ConfigDict, Field


class ViewKind(StrEnum):
    """Categories of graph the backend can produce."""
    CALL = "call"
    IMPORT = "import"
    SYMBOL = "symbol"
    HYBRID = "hybrid"
    FLOW = "flow"


class Direction(StrEnum):
    """Traversal direction for call graphs."""
    IN = "in"
    OUT = "out"
    BOTH = "both"


class ClusterBy(StrEnum):
    """Grouping applied by the backend before returning nodes."""
    NONE = "none"
    FILE = "file"


class LayoutType(StrEnum):
    """Layouts understood by the rendering collaborator."""
    DAGRE = "dagre"
    COSE = "cose"
    BREADTHFIRST = "breadthfirst"
    CIRCLE = "circle"
    CONCENTRIC = "concentric"


class NodeMetrics(TypedDict, total=False):
    """
    Optional complexity metrics attached when include_metrics is set.

    total=False because the backend only sends what it computed.
    """
    loc: NotRequired[int]
    cyclomatic: NotRequired[int]
    cognitive: NotRequired[int]
    call_count: NotRequired[int]


class GraphNode(BaseModel):
    """
    A single function, module or symbol in a code graph.
    """
    id: str
    label: str
    kind: str = "unknown"
    file_path: Optional[str] = None
    line: Optional[int] = None
    cluster: Optional[str] = None
    metrics: Optional[NodeMetrics] = None
    security: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def location(self) -> Optional[str]:
        """file:line string for display, if the backend sent a path."""
        if not self.file_path:
            return None
        if self.line is None:
            return self.file_path
        return f"{self.file_path}:{self.line}"

    @property
    def has_security_findings(self) -> bool:
        return bool(self.security)


class GraphEdge(BaseModel):
    """
    Directed relationship between two nodes.
    """
    source: str
    target: str
    kind: str = "calls"

    model_config = ConfigDict(frozen=True, extra="ignore")


class GraphMetadata(BaseModel):
    """
    Counts describing a graph. Extra fields from the backend pass through.
    """
    node_count: int = 0
    edge_count: int = 0

    model_config = ConfigDict(frozen=True, extra="allow")


class CodeGraph(BaseModel):
    """
    An ordered node sequence plus edges.

    Node order is the rendering and tie-break order.
    """
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def build(
        cls,
        nodes: List[GraphNode],
        edges: List[GraphEdge],
        metadata: Optional[GraphMetadata] = None,
    ) -> "CodeGraph":
        """
        Create a graph whose metadata counts match the given sequences.

        Pass-through metadata fields from `metadata` are preserved.
        """
        extra = metadata.model_dump() if metadata is not None else {}
        extra.update(node_count=len(nodes), edge_count=len(edges))
        return cls(nodes=list(nodes), edges=list(edges), metadata=GraphMetadata(**extra))

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None


class GraphResponse(BaseModel):
    """
    Result of one graph query. When `error` is set it wins over `graph`.
    """
    graph: Optional[CodeGraph] = None
    error: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def is_error(self) -> bool:
        return self.error is not None


class HealthInfo(BaseModel):
    """Payload of the backend health endpoint."""
    version: str = "?"
    status: str = "ok"

    model_config = ConfigDict(extra="ignore")


class GraphRequest(BaseModel):
    """
    The exact parameters sent to the backend for one graph query.

    Derived from ViewParameters; two equal requests always share a fetch key.
    """
    repo: str
    view: ViewKind
    depth: int
    root: Optional[str] = None
    direction: Optional[Direction] = None
    include_metrics: bool = False
    include_security: bool = False
    cluster_by: ClusterBy = ClusterBy.NONE

    model_config = ConfigDict(frozen=True)

    def to_query_params(self) -> Dict[str, str]:
        """Query string parameters, omitting unset optionals."""
        params: Dict[str, str] = {}
        for key, value in self.model_dump(mode="json").items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[key] = str(value)
        return params

    def fetch_key(self) -> tuple:
        """Hashable cache key; a pure function of the request fields."""
        return ("graph",) + tuple(sorted(self.to_query_params().items()))
