"""
Unit tests for the narsil-mcp HTTP client.

Requests are answered by httpx.MockTransport, so no server is needed.
"""

import httpx
import pytest

from narsil_explorer.core.client import NarsilClient
from narsil_explorer.core.exceptions import BackendUnavailableError, GraphFetchError
from narsil_explorer.core.types import Direction, GraphRequest, ViewKind

GRAPH_PAYLOAD = {
    "graph": {
        "nodes": [
            {"id": "main", "label": "main", "kind": "function", "file_path": "src/main.rs", "line": 3},
            {"id": "run", "label": "run", "kind": "function", "metrics": {"cyclomatic": 4}},
        ],
        "edges": [{"source": "main", "target": "run", "kind": "calls"}],
        "metadata": {"node_count": 2, "edge_count": 1, "view": "call"},
    }
}


def make_client(handler, retries: int = 1) -> NarsilClient:
    return NarsilClient(
        "http://narsil.test",
        retries=retries,
        backoff=0,
        transport=httpx.MockTransport(handler),
    )


class TestHealth:
    def test_health_ok(self):
        client = make_client(lambda request: httpx.Response(200, json={"version": "1.1.0", "status": "ok"}))
        health = client.health()
        assert health.version == "1.1.0"
        assert health.status == "ok"

    def test_health_connection_failure_is_retried_then_raised(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler, retries=1)
        with pytest.raises(BackendUnavailableError) as exc_info:
            client.health()

        assert len(calls) == 2
        assert "http://narsil.test" in str(exc_info.value)

    def test_health_recovers_on_retry(self):
        responses = iter([
            httpx.Response(503),
            httpx.Response(200, json={"version": "2.0"}),
        ])
        client = make_client(lambda request: next(responses))
        assert client.health().version == "2.0"

    def test_health_persistent_5xx_raises(self):
        client = make_client(lambda request: httpx.Response(500), retries=2)
        with pytest.raises(BackendUnavailableError):
            client.health()


class TestRepositories:
    def test_bare_list(self):
        client = make_client(lambda request: httpx.Response(200, json=["repoX", "repoY"]))
        assert client.repositories() == ["repoX", "repoY"]

    def test_wrapped_list(self):
        client = make_client(lambda request: httpx.Response(200, json={"repos": ["repoX"]}))
        assert client.repositories() == ["repoX"]

    def test_empty(self):
        client = make_client(lambda request: httpx.Response(200, json={"repos": None}))
        assert client.repositories() == []

    def test_string_instead_of_list_rejected(self):
        client = make_client(lambda request: httpx.Response(200, json={"repos": "repoX"}))
        with pytest.raises(BackendUnavailableError):
            client.repositories()

    def test_scalar_payload_rejected(self):
        client = make_client(lambda request: httpx.Response(200, json={"repos": 5}))
        with pytest.raises(BackendUnavailableError):
            client.repositories()


class TestGraph:
    def test_sends_query_params(self):
        seen = {}

        def handler(request):
            seen.update(dict(request.url.params))
            assert request.url.path == "/graph"
            return httpx.Response(200, json=GRAPH_PAYLOAD)

        client = make_client(handler)
        client.graph(GraphRequest(
            repo="repoX",
            view=ViewKind.CALL,
            depth=2,
            root="main",
            direction=Direction.OUT,
            include_metrics=True,
        ))

        assert seen == {
            "repo": "repoX",
            "view": "call",
            "depth": "2",
            "root": "main",
            "direction": "out",
            "include_metrics": "true",
            "include_security": "false",
            "cluster_by": "none",
        }

    def test_omits_unset_optionals(self):
        seen = {}

        def handler(request):
            seen.update(dict(request.url.params))
            return httpx.Response(200, json=GRAPH_PAYLOAD)

        make_client(handler).graph(GraphRequest(repo="r", view=ViewKind.IMPORT, depth=1))
        assert "root" not in seen
        assert "direction" not in seen

    def test_parses_graph(self):
        client = make_client(lambda request: httpx.Response(200, json=GRAPH_PAYLOAD))
        response = client.graph(GraphRequest(repo="r", view=ViewKind.CALL, depth=2))

        graph = response.graph
        assert response.error is None
        assert [n.id for n in graph.nodes] == ["main", "run"]
        assert graph.nodes[0].location == "src/main.rs:3"
        assert graph.nodes[1].metrics == {"cyclomatic": 4}
        assert graph.metadata.edge_count == 1

    def test_backend_error_returned_as_data(self):
        client = make_client(lambda request: httpx.Response(400, json={"error": "unknown repo"}))
        response = client.graph(GraphRequest(repo="nope", view=ViewKind.CALL, depth=2))
        assert response.error == "unknown repo"
        assert response.graph is None

    def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = make_client(handler, retries=0)
        with pytest.raises(GraphFetchError):
            client.graph(GraphRequest(repo="r", view=ViewKind.CALL, depth=2))

    def test_non_json_error_raises(self):
        client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"), retries=0)
        with pytest.raises(GraphFetchError) as exc_info:
            client.graph(GraphRequest(repo="r", view=ViewKind.CALL, depth=2))
        assert exc_info.value.status_code == 502

    def test_malformed_graph_raises_fetch_error(self):
        payload = {"graph": {"nodes": [{"id": "a"}], "edges": []}}
        client = make_client(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(GraphFetchError) as exc_info:
            client.graph(GraphRequest(repo="r", view=ViewKind.CALL, depth=2))
        assert "Malformed graph" in str(exc_info.value)

    def test_non_object_body_raises_fetch_error(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2, 3]))
        with pytest.raises(GraphFetchError):
            client.graph(GraphRequest(repo="r", view=ViewKind.CALL, depth=2))
