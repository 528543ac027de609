"""Tests for the read-side graph view."""

from __future__ import annotations

from hobbygraph.models import Person
from hobbygraph.views import build_graph_view, build_social_graph, find_half_edges, score_tier


def _p(pid, friends=(), score=0.0, age=20):
    return Person(id=pid, display_name=pid.upper(), age=age, friends=frozenset(friends), popularity_score=score)


class TestScoreTier:
    def test_strictly_above_threshold_is_high(self):
        assert score_tier(5.5) == "high"
        assert score_tier(5.0) == "low"
        assert score_tier(2.0, threshold=1.5) == "high"


class TestBuildGraphView:
    """Tests for build_graph_view."""

    def test_nodes_and_deduplicated_edges(self):
        persons = [_p("a", ["b", "c"], 6.0, age=30), _p("b", ["a"], 1.5), _p("c", ["a"], 1.0)]
        view = build_graph_view(persons)

        assert [n["id"] for n in view.nodes] == ["a", "b", "c"]
        node_a = view.nodes[0]
        assert node_a["label"] == "A (30)"
        assert node_a["tier"] == "high"
        assert node_a["degree"] == 2
        assert view.edges == [{"source": "a", "target": "b"}, {"source": "a", "target": "c"}]
        assert view.metrics["edge_count"] == 2.0
        assert view.metrics["number_of_components"] == 1.0
        assert view.warnings == []

    def test_half_edges_are_warnings_not_edges(self):
        persons = [_p("a", ["b"]), _p("b")]
        view = build_graph_view(persons)
        assert view.edges == []
        assert len(view.warnings) == 1
        assert find_half_edges(persons) == [("a", "b")]

    def test_empty_graph(self):
        view = build_graph_view([])
        assert view.nodes == []
        assert view.metrics["density"] == 0.0

    def test_social_graph_is_undirected(self):
        graph = build_social_graph([_p("a", ["b"]), _p("b", ["a"])])
        assert graph.has_edge("b", "a")
        assert graph.number_of_edges() == 1
