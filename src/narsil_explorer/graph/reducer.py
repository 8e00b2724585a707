"""
Graph Reducer - bound a code graph to a renderable size.

Large call graphs make interactive rendering unusable, so before a graph is
handed to the canvas it is pruned to at most `max_nodes` nodes. The nodes
that survive are the most connected ones, ranked by undirected degree:

    score(n) = |edges with source n| + |edges with target n|

Ranking is a stable sort on descending score, so ties keep the order the
backend sent them in and the result is deterministic for identical input.
Only edges with both endpoints in the kept set survive.

Scores are always computed from the graph passed in. Reducing an already
reduced graph can therefore rank differently than reducing the raw graph
once, because edges to dropped nodes no longer contribute.
"""

import logging
from collections import Counter
from typing import List, Optional, Tuple

from ..config import MAX_NODES_CEILING
from ..core.types import CodeGraph, GraphEdge, GraphNode

logger = logging.getLogger(__name__)


def connectivity_scores(graph: CodeGraph) -> Counter:
    """
    Undirected degree per node id.

    Edges pointing at ids that are not in the node set still count for the
    endpoint that is present.
    """
    scores: Counter = Counter()
    for edge in graph.edges:
        scores[edge.source] += 1
        scores[edge.target] += 1
    return scores


def rank_nodes(graph: CodeGraph) -> List[GraphNode]:
    """Nodes ordered by descending connectivity, ties in input order."""
    scores = connectivity_scores(graph)
    # sorted() is stable, so equal scores keep their original positions
    return sorted(graph.nodes, key=lambda node: -scores[node.id])


def reduce_graph(
    graph: CodeGraph,
    max_nodes: int,
    ceiling: int = MAX_NODES_CEILING,
) -> CodeGraph:
    """
    Bound `graph` to at most `max_nodes` nodes.

    Args:
        graph: The graph to reduce. Never mutated.
        max_nodes: Upper bound on the number of returned nodes.
        ceiling: Bound at or above which no reduction is applied.

    Returns:
        `graph` itself when no reduction is needed, otherwise a new graph
        whose nodes are in ranking order and whose metadata counts match.
    """
    if max_nodes >= ceiling or len(graph.nodes) <= max_nodes:
        return graph

    kept_nodes = rank_nodes(graph)[: max(max_nodes, 0)]
    kept_ids = {node.id for node in kept_nodes}
    kept_edges: List[GraphEdge] = [
        edge for edge in graph.edges
        if edge.source in kept_ids and edge.target in kept_ids
    ]

    logger.debug(
        f"Reduced graph from {len(graph.nodes)} to {len(kept_nodes)} nodes "
        f"({len(graph.edges)} -> {len(kept_edges)} edges)"
    )
    return CodeGraph.build(kept_nodes, kept_edges, graph.metadata)


class ReducedGraphCache:
    """
    Last-inputs / last-output memo around `reduce_graph`.

    The reduction is recomputed only when the raw graph object or the bound
    changes. Graph identity (not equality) is the key, since a refetch that
    returns an equal graph is still a new snapshot.
    """

    def __init__(self, ceiling: int = MAX_NODES_CEILING):
        self.ceiling = ceiling
        self._inputs: Optional[Tuple[int, int]] = None
        self._source: Optional[CodeGraph] = None
        self._output: Optional[CodeGraph] = None
        self.computations = 0

    def get(self, graph: Optional[CodeGraph], max_nodes: int) -> Optional[CodeGraph]:
        if graph is None:
            return None

        inputs = (id(graph), max_nodes)
        # Holding _source keeps id(graph) from being reused by another object
        if self._inputs == inputs and self._source is graph:
            return self._output

        self._output = reduce_graph(graph, max_nodes, self.ceiling)
        self._inputs = inputs
        self._source = graph
        self.computations += 1
        return self._output

    def clear(self) -> None:
        self._inputs = None
        self._source = None
        self._output = None
