"""
Interactive exploration controller.

The session ties the pieces together; each piece is usable on its own.
"""

from .fetch import FetchTicket, GraphQuery, QueryState
from .gate import ConnectionStatusGate, GateState
from .query import QueryOrchestrator, ViewParameters
from .selection import SelectionController
from .session import ExplorerSession
from .view import CanvasState, ExplorerView, GraphStats

__all__ = [
    "CanvasState",
    "ConnectionStatusGate",
    "ExplorerSession",
    "ExplorerView",
    "FetchTicket",
    "GateState",
    "GraphQuery",
    "GraphStats",
    "QueryOrchestrator",
    "QueryState",
    "SelectionController",
    "ViewParameters",
]
