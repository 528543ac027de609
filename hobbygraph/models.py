"""Domain model for people in the social graph."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Person:
    """A node in the social graph.

    Instances are immutable snapshots. Mutations build a new snapshot with
    ``evolve`` and hand it to the store together with the version they were
    derived from.
    """

    id: str
    display_name: str
    age: int
    interests: tuple[str, ...] = ()
    friends: frozenset[str] = frozenset()
    popularity_score: float = 0.0
    version: int = 0
    created_at: datetime = field(default_factory=_utcnow)

    def evolve(self, **changes: Any) -> Person:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
