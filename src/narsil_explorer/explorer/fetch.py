"""
Graph Query - keyed fetch state for the graph endpoint.

Every fetch is issued under a FetchTicket carrying the fetch key of the
request it was made for. When a response arrives it is always cached under
its own key, but it only becomes the visible result if its key is still the
current one. A late response for superseded parameters can therefore never
overwrite state produced by a newer request.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol, Tuple

from ..config import STALE_TIME_SECONDS
from ..core.exceptions import ExplorerError
from ..core.types import GraphRequest, GraphResponse

logger = logging.getLogger(__name__)


class GraphBackend(Protocol):
    """Anything that can answer a GraphRequest (NarsilClient in production)."""

    def graph(self, request: GraphRequest) -> GraphResponse: ...


@dataclass(frozen=True)
class FetchTicket:
    """Handle for one in-flight request."""
    key: tuple
    request: GraphRequest
    sequence: int


@dataclass
class QueryState:
    """What the presentation layer sees for the current key."""
    data: Optional[GraphResponse] = None
    error: Optional[str] = None
    pending: bool = False
    key: Optional[tuple] = None


@dataclass
class _CacheEntry:
    response: GraphResponse
    fetched_at: float = field(default_factory=time.monotonic)


class GraphQuery:
    """
    Keyed cache plus current-key tracking for graph requests.

    `issue` / `resolve` / `fail` form the asynchronous protocol; `load`
    drives both halves synchronously against a GraphBackend.
    """

    def __init__(
        self,
        stale_time: float = STALE_TIME_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = stale_time
        self._clock = clock
        self._cache: Dict[tuple, _CacheEntry] = {}
        self._sequence = 0
        self._in_flight: Dict[tuple, FetchTicket] = {}
        # Highest sequence issued per key; older tickets for a key are stale
        self._latest: Dict[tuple, int] = {}
        self.state = QueryState()

    def _fresh_entry(self, key: tuple) -> Optional[_CacheEntry]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at > self.stale_time:
            return None
        return entry

    def activate(self, request: Optional[GraphRequest]) -> bool:
        """
        Make `request` the current query.

        Returns:
            True if a network fetch is needed for it, False if the query is
            disabled or answered from a fresh cache entry.
        """
        if request is None:
            self.state = QueryState()
            return False

        key = request.fetch_key()
        entry = self._fresh_entry(key)
        if entry is not None:
            self.state = QueryState(data=entry.response, key=key)
            return False

        self.state = QueryState(pending=True, key=key)
        return True

    def issue(self, request: GraphRequest, force: bool = False) -> Optional[FetchTicket]:
        """
        Start a fetch for `request` unless one for the same key is in flight.

        Returns:
            The ticket to resolve, or None if the request is deduplicated or
            already answered from cache.
        """
        key = request.fetch_key()
        if not force and not self.activate(request):
            return None
        if force:
            self.state = QueryState(data=self.state.data, pending=True, key=key)

        if key in self._in_flight and not force:
            return None

        self._sequence += 1
        ticket = FetchTicket(key=key, request=request, sequence=self._sequence)
        self._in_flight[key] = ticket
        self._latest[key] = ticket.sequence
        logger.debug(f"Issued graph fetch #{ticket.sequence} for {request.repo}")
        return ticket

    def _is_current(self, ticket: FetchTicket) -> bool:
        if self._latest.get(ticket.key, 0) > ticket.sequence:
            return False
        return self.state.key == ticket.key

    def _finish(self, ticket: FetchTicket) -> None:
        if self._in_flight.get(ticket.key) is ticket:
            del self._in_flight[ticket.key]

    def resolve(self, ticket: FetchTicket, response: GraphResponse) -> bool:
        """
        Record a response. Returns True if it became the visible result.
        """
        current = self._is_current(ticket)
        self._finish(ticket)

        if response.error is None:
            self._cache[ticket.key] = _CacheEntry(response, self._clock())

        if not current:
            logger.debug(f"Discarding stale graph response #{ticket.sequence}")
            return False

        self.state = QueryState(data=response, error=response.error, key=ticket.key)
        return True

    def fail(self, ticket: FetchTicket, error: str) -> bool:
        """Record a transport failure. Returns True if it is visible."""
        current = self._is_current(ticket)
        self._finish(ticket)
        if not current:
            return False
        self.state = QueryState(error=error, key=ticket.key)
        return True

    def load(
        self,
        backend: GraphBackend,
        request: Optional[GraphRequest],
        enabled: bool = True,
        force: bool = False,
    ) -> QueryState:
        """
        Bring `state` up to date for `request`, fetching if necessary.

        With `enabled=False` (or no request) no backend call is made.
        """
        if not enabled or request is None:
            self.activate(None)
            return self.state

        ticket = self.issue(request, force=force)
        if ticket is None:
            return self.state

        try:
            response = backend.graph(ticket.request)
        except ExplorerError as e:
            logger.warning(f"Graph fetch failed: {e}")
            self.fail(ticket, str(e))
        else:
            self.resolve(ticket, response)
        return self.state

    def invalidate(self, key: Optional[tuple] = None) -> None:
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)

    @property
    def cached_keys(self) -> Tuple[tuple, ...]:
        return tuple(self._cache)
