"""
Selection Controller - the inspected node and "explore from here".

Single-click inspection and double-click re-rooting are
independent: re-rooting changes the query, never the selection.
"""

import logging
from typing import Optional

from ..core.types import CodeGraph, GraphNode
from .query import QueryOrchestrator

logger = logging.getLogger(__name__)


class SelectionController:
    """
    Holds at most one selected node.

    A new fetch never clears the selection. If the node is missing from the
    rendered graph the selection stays in place and `is_available` reports
    False so the detail panel can mark it unavailable.
    """

    def __init__(self, orchestrator: QueryOrchestrator):
        self._orchestrator = orchestrator
        self._selected: Optional[GraphNode] = None

    @property
    def selected(self) -> Optional[GraphNode]:
        return self._selected

    def select(self, node: Optional[GraphNode]) -> None:
        self._selected = node
        logger.debug(f"Selected node: {node.id if node else None}")

    def clear(self) -> None:
        self.select(None)

    def focus_as_root(self, node: GraphNode) -> None:
        """Recenter the next query on `node`."""
        self._orchestrator.set_root(node.id)
        logger.info(f"Exploring from {node.id}")

    def is_available(self, graph: Optional[CodeGraph]) -> bool:
        if self._selected is None:
            return False
        if graph is None:
            return False
        return graph.has_node(self._selected.id)
