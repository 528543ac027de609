"""
Hobbygraph - friendship consistency and popularity engine.

This package contains:
- models: the Person snapshot
- interests: interest normalization and set operations
- graph: symmetric friendship edges
- popularity: scoring and affected-set recomputation
- coordinator: the locked entry point for every mutation
- store: PersonStore contract plus in-memory and PocketBase backends
- views: read-side graph projection
"""

from hobbygraph.coordinator import MutationCoordinator
from hobbygraph.errors import (
    ConcurrentModificationError,
    ConflictError,
    HobbygraphError,
    InconsistentStateError,
    LockTimeoutError,
    NotFoundError,
    ValidationError,
)
from hobbygraph.models import Person
from hobbygraph.store import InMemoryPersonStore, PersonStore

__all__ = [
    "ConcurrentModificationError",
    "ConflictError",
    "HobbygraphError",
    "InMemoryPersonStore",
    "InconsistentStateError",
    "LockTimeoutError",
    "MutationCoordinator",
    "NotFoundError",
    "Person",
    "PersonStore",
    "ValidationError",
]
