"""Person stores."""

from .interfaces import PersonStore
from .memory_store import InMemoryPersonStore
from .pocketbase_store import PocketBasePersonStore

__all__ = [
    "InMemoryPersonStore",
    "PersonStore",
    "PocketBasePersonStore",
]
