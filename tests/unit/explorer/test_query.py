"""Unit tests for the query orchestrator."""

import pytest

from narsil_explorer.core.types import ClusterBy, Direction, ViewKind
from narsil_explorer.explorer.query import QueryOrchestrator, ViewParameters


class TestSetters:
    @pytest.fixture
    def orchestrator(self):
        return QueryOrchestrator(ViewParameters(repository="repoX"))

    def test_each_setter_changes_one_field(self, orchestrator):
        before = orchestrator.params

        orchestrator.set_depth(5)
        after = orchestrator.params

        assert after.depth == 5
        assert after.repository == before.repository
        assert after.view == before.view
        assert after.direction == before.direction
        assert after.include_metrics == before.include_metrics

    def test_negative_depth_clamped_to_zero(self, orchestrator):
        orchestrator.set_depth(-1)
        assert orchestrator.params.depth == 0

    def test_empty_root_is_cleared(self, orchestrator):
        orchestrator.set_root("main")
        assert orchestrator.params.root == "main"
        orchestrator.set_root("")
        assert orchestrator.params.root is None

    def test_flags(self, orchestrator):
        orchestrator.set_include_metrics(True)
        orchestrator.set_include_security(True)
        request = orchestrator.graph_request()
        assert request.include_metrics is True
        assert request.include_security is True

    def test_cluster_by_derived_from_toggle(self, orchestrator):
        assert orchestrator.graph_request().cluster_by == ClusterBy.NONE
        orchestrator.set_clustered(True)
        assert orchestrator.graph_request().cluster_by == ClusterBy.FILE
        orchestrator.set_cluster_by(ClusterBy.NONE)
        assert orchestrator.params.clustered is False


class TestDirection:
    def test_direction_passed_for_call_view(self):
        orchestrator = QueryOrchestrator(ViewParameters(repository="r"))
        orchestrator.set_direction(Direction.OUT)
        assert orchestrator.graph_request().direction == Direction.OUT

    def test_direction_dropped_for_other_views_but_remembered(self):
        orchestrator = QueryOrchestrator(ViewParameters(repository="r"))
        orchestrator.set_direction(Direction.IN)

        orchestrator.set_view_kind(ViewKind.IMPORT)
        assert orchestrator.graph_request().direction is None
        assert "direction" not in orchestrator.graph_request().to_query_params()
        assert orchestrator.params.direction == Direction.IN

        orchestrator.set_view_kind(ViewKind.CALL)
        assert orchestrator.graph_request().direction == Direction.IN


class TestFetchGating:
    def test_disabled_without_repository(self):
        orchestrator = QueryOrchestrator()
        assert orchestrator.fetch_enabled is False
        assert orchestrator.graph_request() is None
        assert orchestrator.fetch_key() is None

    def test_enabled_with_repository(self):
        orchestrator = QueryOrchestrator()
        orchestrator.set_repository("repoX")
        assert orchestrator.fetch_enabled is True
        request = orchestrator.graph_request()
        assert request.repo == "repoX"
        assert request.view == ViewKind.CALL
        assert request.depth == 2

    def test_fetch_key_is_pure_function_of_parameters(self):
        a = QueryOrchestrator(ViewParameters(repository="r", depth=3))
        b = QueryOrchestrator(ViewParameters(repository="r", depth=3))
        assert a.fetch_key() == b.fetch_key()

        b.set_depth(4)
        assert a.fetch_key() != b.fetch_key()

    def test_refresh_does_not_change_parameters(self):
        orchestrator = QueryOrchestrator(ViewParameters(repository="r"))
        key = orchestrator.fetch_key()
        orchestrator.refresh()
        assert orchestrator.fetch_key() == key
        assert orchestrator.refresh_count == 1


class TestAutoDefault:
    def test_selects_first_repository_on_first_list(self):
        orchestrator = QueryOrchestrator()
        assert orchestrator.on_repositories([]) is False
        assert orchestrator.on_repositories(["repoX", "repoY"]) is True
        assert orchestrator.params.repository == "repoX"

    def test_absent_list_then_available(self):
        orchestrator = QueryOrchestrator()
        orchestrator.on_repositories(None)
        orchestrator.on_repositories(["repoX", "repoY"])
        assert orchestrator.params.repository == "repoX"

    def test_does_not_override_user_selection(self):
        orchestrator = QueryOrchestrator()
        orchestrator.set_repository("repoY")
        orchestrator.on_repositories([])
        assert orchestrator.on_repositories(["repoX", "repoY"]) is False
        assert orchestrator.params.repository == "repoY"

    def test_fires_only_once(self):
        orchestrator = QueryOrchestrator()
        orchestrator.on_repositories(["repoX"])
        orchestrator.set_repository("")

        # Same list again, then empty, then non-empty: no second auto-pick
        orchestrator.on_repositories(["repoX"])
        orchestrator.on_repositories([])
        orchestrator.on_repositories(["repoZ"])
        assert orchestrator.params.repository == ""

    def test_repeated_list_is_not_a_transition(self):
        orchestrator = QueryOrchestrator()
        orchestrator.set_repository("mine")
        orchestrator.on_repositories(["repoX"])
        orchestrator.set_repository("")
        assert orchestrator.on_repositories(["repoX"]) is False
        assert orchestrator.params.repository == ""
