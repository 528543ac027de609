"""
Pydantic schemas for the graph view endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel


class GraphNode(BaseModel):
    """Node in the social graph"""

    id: str
    label: str  # "<display_name> (<age>)"
    popularity_score: float
    tier: str  # 'high' or 'low'
    degree: int = 0


class GraphEdge(BaseModel):
    """Undirected friendship edge"""

    source: str
    target: str


class GraphResponse(BaseModel):
    """Complete graph data"""

    nodes: list[GraphNode]
    edges: list[GraphEdge]
    metrics: dict[str, float] = {}
    warnings: list[str] = []  # One-sided friendships found while building
