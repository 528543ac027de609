"""
Pydantic schemas for the Hobbygraph API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .graph import GraphEdge, GraphNode, GraphResponse
from .persons import (
    FriendRequest,
    FriendshipResponse,
    InterestRequest,
    MessageResponse,
    PersonCreate,
    PersonListResponse,
    PersonResponse,
    PersonUpdate,
)

__all__ = [
    "FriendRequest",
    "FriendshipResponse",
    "GraphEdge",
    "GraphNode",
    "GraphResponse",
    "InterestRequest",
    "MessageResponse",
    "PersonCreate",
    "PersonListResponse",
    "PersonResponse",
    "PersonUpdate",
]
