"""
Graph Router - read-only graph view for the visualization UI.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from hobbygraph.coordinator import MutationCoordinator
from hobbygraph.views import build_graph_view

from ..dependencies import get_coordinator
from ..schemas import GraphEdge, GraphNode, GraphResponse
from ..settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["graph"])


@router.get("/api/graph")
async def get_graph(coordinator: Annotated[MutationCoordinator, Depends(get_coordinator)]) -> GraphResponse:
    """Nodes (with popularity tier) and deduplicated friendship edges."""
    persons = await asyncio.to_thread(coordinator.list_persons)
    view = build_graph_view(persons, high_tier_threshold=get_settings().high_tier_threshold)

    if view.warnings:
        logger.warning(f"Graph view has {len(view.warnings)} one-sided friendships")

    return GraphResponse(
        nodes=[GraphNode(**node) for node in view.nodes],
        edges=[GraphEdge(**edge) for edge in view.edges],
        metrics=view.metrics,
        warnings=view.warnings,
    )
