"""
HTTP client for the narsil-mcp backend.

narsil-mcp exposes a small read-only HTTP API when started with `--http`:

    GET /health  -> {"version": "...", "status": "ok"}
    GET /repos   -> ["repo", ...]  or  {"repos": ["repo", ...]}
    GET /graph   -> {"graph": {...}}  or  {"error": "..."}

Connection failures, timeouts and 5xx responses are retried a bounded
number of times before the matching ExplorerError is raised.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from ..config import DEFAULT_BASE_URL, REQUEST_TIMEOUT_SECONDS, RETRY_COUNT
from .exceptions import BackendUnavailableError, GraphFetchError
from .types import GraphRequest, GraphResponse, HealthInfo

logger = logging.getLogger(__name__)


class NarsilClient:
    """
    Synchronous client for the narsil-mcp HTTP API.

    Attributes:
        base_url: Root URL of the backend.
        retries: Extra attempts after a failed request.
        backoff: Multiplier for exponential backoff between attempts (seconds).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        retries: int = RETRY_COUNT,
        backoff: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.retries = retries
        self.backoff = backoff
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def __enter__(self) -> "NarsilClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _should_retry_on_result(response: httpx.Response) -> bool:
        return response.status_code >= 500

    def _get(self, endpoint: str, params: Optional[dict] = None) -> httpx.Response:
        @retry(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=self.backoff, max=10),
            retry=(
                retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException))
                | retry_if_result(self._should_retry_on_result)
            ),
            retry_error_callback=lambda state: state.outcome.result(),
        )
        def _request() -> httpx.Response:
            logger.debug(f"GET {self.base_url}{endpoint} params={params}")
            return self._client.get(endpoint, params=params)

        return _request()

    def health(self) -> HealthInfo:
        """
        Check that the backend is reachable.

        Raises:
            BackendUnavailableError: If every attempt failed.
        """
        try:
            response = self._get("/health")
            response.raise_for_status()
            return HealthInfo.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            raise BackendUnavailableError(self.base_url, str(e)) from e

    def repositories(self) -> List[str]:
        """
        List the repositories indexed by the backend, in backend order.

        Raises:
            BackendUnavailableError: If the list could not be fetched or is not a
                list.
        """
        try:
            response = self._get("/repos")
            response.raise_for_status()
            payload: Any = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BackendUnavailableError(self.base_url, str(e)) from e

        if isinstance(payload, dict):
            payload = payload.get("repos")
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise BackendUnavailableError(
                self.base_url, f"Unexpected repository list: {type(payload).__name__}"
            )
        return [str(repo) for repo in payload]

    def graph(self, request: GraphRequest) -> GraphResponse:
        """
        Fetch one graph.

        A backend-reported error comes back as `GraphResponse.error`, not as
        an exception.

        Raises:
            GraphFetchError: On transport failure, a non-JSON response or a body
                that does not match the graph schema.
        """
        try:
            response = self._get("/graph", params=request.to_query_params())
        except httpx.HTTPError as e:
            raise GraphFetchError(f"Graph request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise GraphFetchError(
                f"Backend returned HTTP {response.status_code} with a non-JSON body",
                status_code=response.status_code,
            ) from e

        if isinstance(payload, dict) and payload.get("error"):
            return GraphResponse(error=str(payload["error"]))

        if response.is_error:
            raise GraphFetchError(
                f"Backend returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            graph_response = GraphResponse.model_validate(payload)
        except ValidationError as e:
            raise GraphFetchError(f"Malformed graph from backend: {e}") from e

        if graph_response.graph is not None:
            logger.info(
                f"Fetched {request.view} graph for {request.repo}: "
                f"{len(graph_response.graph.nodes)} nodes, "
                f"{len(graph_response.graph.edges)} edges"
            )
        return graph_response
