"""
Read-side projections over committed state.

Builds an undirected NetworkX graph from the store listing and flattens it
into the node/edge payload the graph UI consumes. Nothing here mutates; a
one-sided friendship found while building is reported as a warning, never
repaired.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

from .models import Person

logger = logging.getLogger(__name__)

DEFAULT_HIGH_TIER_THRESHOLD = 5.0


def score_tier(popularity_score: float, threshold: float = DEFAULT_HIGH_TIER_THRESHOLD) -> str:
    """'high' for scores strictly above the threshold, else 'low'."""
    return "high" if popularity_score > threshold else "low"


def find_half_edges(persons: Iterable[Person]) -> list[tuple[str, str]]:
    """Return (holder, missing_side) pairs where only one direction is recorded."""
    by_id = {p.id: p for p in persons}
    half_edges = []
    for person in by_id.values():
        for friend_id in sorted(person.friends):
            friend = by_id.get(friend_id)
            if friend is None or person.id not in friend.friends:
                half_edges.append((person.id, friend_id))
    return half_edges


@dataclass
class GraphView:
    """Flattened social graph for the UI"""

    nodes: list[dict[str, Any]]
    edges: list[dict[str, str]]
    metrics: dict[str, float]
    warnings: list[str] = field(default_factory=list)


def build_social_graph(persons: Iterable[Person]) -> nx.Graph:
    """Undirected graph of mutual friendships, nodes keyed by person id."""
    persons = list(persons)
    graph = nx.Graph()
    for person in persons:
        graph.add_node(
            person.id,
            display_name=person.display_name,
            age=person.age,
            popularity_score=person.popularity_score,
            interests=list(person.interests),
        )

    by_id = {p.id: p for p in persons}
    for person in persons:
        for friend_id in person.friends:
            friend = by_id.get(friend_id)
            if friend is not None and person.id in friend.friends:
                graph.add_edge(person.id, friend_id)
    return graph


def build_graph_view(persons: Iterable[Person], high_tier_threshold: float = DEFAULT_HIGH_TIER_THRESHOLD) -> GraphView:
    """Project committed persons into nodes, deduplicated edges and metrics."""
    persons = list(persons)
    graph = build_social_graph(persons)

    warnings = []
    half_edges = find_half_edges(persons)
    for holder, missing in half_edges:
        logger.error(f"Graph view found one-sided friendship {holder} -> {missing}")
        warnings.append(f"Person {holder} lists {missing} as a friend but the friendship is not mutual")

    nodes = []
    for node_id in graph.nodes():
        data = graph.nodes[node_id]
        nodes.append(
            {
                "id": node_id,
                "label": f"{data['display_name']} ({data['age']})",
                "popularity_score": data["popularity_score"],
                "tier": score_tier(data["popularity_score"], high_tier_threshold),
                "degree": graph.degree(node_id),
            }
        )

    edges = [{"source": source, "target": target} for source, target in sorted(tuple(sorted(e)) for e in graph.edges())]

    metrics = {
        "node_count": float(graph.number_of_nodes()),
        "edge_count": float(len(edges)),
        "density": float(nx.density(graph)) if graph.number_of_nodes() > 1 else 0.0,
        "number_of_components": float(nx.number_connected_components(graph)) if graph.number_of_nodes() else 0.0,
    }

    return GraphView(nodes=nodes, edges=edges, metrics=metrics, warnings=warnings)
