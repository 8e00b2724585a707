"""
Connection Status Gate.

Three-state gate in front of the whole explorer:

    CONNECTING --health ok-->     READY
    CONNECTING --health failed--> ERROR   (terminal for the session)

Only READY renders the interactive experience. ERROR shows how to start
the backend and must never lead to a graph fetch.
"""

import logging
from enum import StrEnum
from typing import Optional

from ..core.types import HealthInfo

logger = logging.getLogger(__name__)


class GateState(StrEnum):
    CONNECTING = "connecting"
    ERROR = "error"
    READY = "ready"


class ConnectionStatusGate:
    """Tracks backend reachability for one session."""

    def __init__(self) -> None:
        self.state = GateState.CONNECTING
        self.health: Optional[HealthInfo] = None
        self.error: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.state == GateState.READY

    @property
    def version(self) -> str:
        return self.health.version if self.health else "?"

    def on_health_ok(self, health: HealthInfo) -> None:
        if self.state != GateState.CONNECTING:
            logger.debug(f"Ignoring health result in state {self.state}")
            return
        self.health = health
        self.state = GateState.READY
        logger.info(f"Connected to narsil-mcp v{health.version}")

    def on_health_failed(self, reason: str) -> None:
        if self.state != GateState.CONNECTING:
            logger.debug(f"Ignoring health failure in state {self.state}")
            return
        self.error = reason
        self.state = GateState.ERROR
        logger.warning(f"Backend unreachable: {reason}")
