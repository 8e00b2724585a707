"""
Query Orchestrator - single source of truth for view parameters.

Owns everything that decides which subgraph is requested from the backend,
derives the GraphRequest sent to the fetch layer, and decides whether a
fetch should happen at all.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from ..config import DEFAULT_DEPTH, DEFAULT_DIRECTION, DEFAULT_VIEW
from ..core.types import ClusterBy, Direction, GraphRequest, ViewKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewParameters:
    """
    Stored query parameters.

    `direction` may hold a value while `view` is not CALL; it is dropped
    when the request is derived, so switching back to CALL restores it.
    """
    repository: str = ""
    view: ViewKind = DEFAULT_VIEW
    depth: int = DEFAULT_DEPTH
    root: Optional[str] = None
    direction: Direction = DEFAULT_DIRECTION
    include_metrics: bool = False
    include_security: bool = False
    clustered: bool = False

    @property
    def cluster_by(self) -> ClusterBy:
        return ClusterBy.FILE if self.clustered else ClusterBy.NONE

    @property
    def effective_direction(self) -> Optional[Direction]:
        return self.direction if self.view == ViewKind.CALL else None


class QueryOrchestrator:
    """
    Narrow operation set over ViewParameters.

    Every setter replaces exactly one field. `refresh_count` increments on
    each manual refresh so the fetch layer can tell a refresh apart from an
    unchanged re-render.
    """

    def __init__(self, params: Optional[ViewParameters] = None):
        self._params = params or ViewParameters()
        self._has_auto_selected = False
        self._had_repositories = False
        self.refresh_count = 0

    @property
    def params(self) -> ViewParameters:
        return self._params

    def _update(self, **changes) -> None:
        self._params = replace(self._params, **changes)
        logger.debug(f"View parameters updated: {changes}")

    def set_repository(self, repository: str) -> None:
        self._update(repository=repository)

    def set_view_kind(self, view: ViewKind) -> None:
        self._update(view=ViewKind(view))

    def set_depth(self, depth: int) -> None:
        """Set the traversal depth; negative values are clamped to 0."""
        self._update(depth=max(depth, 0))

    def set_root(self, root: Optional[str]) -> None:
        self._update(root=root or None)

    def set_direction(self, direction: Direction) -> None:
        self._update(direction=Direction(direction))

    def set_include_metrics(self, enabled: bool) -> None:
        self._update(include_metrics=bool(enabled))

    def set_include_security(self, enabled: bool) -> None:
        self._update(include_security=bool(enabled))

    def set_clustered(self, clustered: bool) -> None:
        self._update(clustered=bool(clustered))

    def set_cluster_by(self, cluster_by: ClusterBy) -> None:
        self.set_clustered(ClusterBy(cluster_by) == ClusterBy.FILE)

    def on_repositories(self, repositories: Optional[Sequence[str]]) -> bool:
        """
        React to a (possibly new) repository list.

        Selects the first repository once, on the transition from an absent
        or empty list to a non-empty one, and only if nothing is selected.

        Returns:
            True if a repository was auto-selected by this call.
        """
        available = bool(repositories)
        became_available = available and not self._had_repositories
        self._had_repositories = available

        if not became_available or self._has_auto_selected:
            return False
        if self._params.repository:
            return False

        self._has_auto_selected = True
        self.set_repository(repositories[0])
        logger.info(f"Auto-selected repository: {repositories[0]}")
        return True

    @property
    def fetch_enabled(self) -> bool:
        return bool(self._params.repository)

    def graph_request(self) -> Optional[GraphRequest]:
        """The request for the current parameters, or None when disabled."""
        if not self.fetch_enabled:
            return None
        params = self._params
        return GraphRequest(
            repo=params.repository,
            view=params.view,
            depth=params.depth,
            root=params.root,
            direction=params.effective_direction,
            include_metrics=params.include_metrics,
            include_security=params.include_security,
            cluster_by=params.cluster_by,
        )

    def fetch_key(self) -> Optional[tuple]:
        request = self.graph_request()
        return request.fetch_key() if request is not None else None

    def refresh(self) -> None:
        """Ask for a refetch with the parameters unchanged."""
        self.refresh_count += 1
        logger.debug(f"Refresh requested (#{self.refresh_count})")
