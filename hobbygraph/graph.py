"""Symmetric friendship edges.

An edge between A and B exists iff ``B in A.friends`` and ``A in B.friends``.
Exactly one half present is a defect: it is detected and surfaced as
``InconsistentStateError``, never produced and never repaired here.
"""

from __future__ import annotations

import logging
from enum import Enum

from .errors import (
    ConcurrentModificationError,
    ConflictError,
    InconsistentStateError,
    ValidationError,
    VersionConflictError,
)
from .models import Person
from .popularity import PopularityEngine, affected_by_edge_change
from .store.interfaces import PersonStore

logger = logging.getLogger(__name__)


class EdgeState(Enum):
    """Whether a symmetric edge exists between two records"""

    ABSENT = "absent"
    PRESENT = "present"


def edge_state(a: Person, b: Person) -> EdgeState:
    """Classify the edge between two committed records.

    Raises:
        InconsistentStateError: if only one direction is recorded
    """
    forward = b.id in a.friends
    backward = a.id in b.friends
    if forward and backward:
        return EdgeState.PRESENT
    if not forward and not backward:
        return EdgeState.ABSENT

    logger.error(f"Half edge between {a.id} and {b.id} (forward={forward}, backward={backward})")
    raise InconsistentStateError(
        f"Friendship between {a.id} and {b.id} is one-sided",
        details={"a": a.id, "b": b.id, "a_has_b": forward, "b_has_a": backward},
    )


def validate_pair(a: str, b: str) -> None:
    if not isinstance(a, str) or not isinstance(b, str) or not a.strip() or not b.strip():
        raise ValidationError("Person ids must be non-empty strings", details={"a": a, "b": b})
    if a == b:
        raise ValidationError("A person cannot be friends with themselves", details={"id": a})


class FriendshipGraph:
    """Link and unlink people as single atomic commits.

    Both halves of the edge are written in the same batch as the new scores
    of the two endpoints.
    """

    def __init__(self, store: PersonStore, popularity: PopularityEngine, max_retries: int = 3):
        self.store = store
        self.popularity = popularity
        self.max_retries = max_retries

    def link(self, a: str, b: str) -> set[str]:
        """Create the edge a <-> b and return the affected ids ``{a, b}``.

        Raises:
            ValidationError: if ``a == b``
            NotFoundError: if either person is absent
            ConflictError: if the edge already exists
            InconsistentStateError: if only half of the edge exists
        """
        validate_pair(a, b)
        return self._commit_edge(a, b, EdgeState.PRESENT)

    def unlink(self, a: str, b: str) -> set[str]:
        """Remove the edge a <-> b and return the affected ids ``{a, b}``.

        Raises:
            ValidationError: if ``a == b``
            NotFoundError: if either person is absent
            ConflictError: if the edge does not exist
            InconsistentStateError: if only half of the edge exists
        """
        validate_pair(a, b)
        return self._commit_edge(a, b, EdgeState.ABSENT)

    def _commit_edge(self, a: str, b: str, target: EdgeState) -> set[str]:
        for attempt in range(1, self.max_retries + 1):
            rec_a = self.store.get(a)
            rec_b = self.store.get(b)

            if edge_state(rec_a, rec_b) == target:
                if target == EdgeState.PRESENT:
                    raise ConflictError(f"{a} and {b} are already friends", details={"a": a, "b": b})
                raise ConflictError(f"{a} and {b} are not friends", details={"a": a, "b": b})

            if target == EdgeState.PRESENT:
                new_a = rec_a.evolve(friends=rec_a.friends | {b})
                new_b = rec_b.evolve(friends=rec_b.friends | {a})
            else:
                new_a = rec_a.evolve(friends=rec_a.friends - {b})
                new_b = rec_b.evolve(friends=rec_b.friends - {a})

            affected = affected_by_edge_change(a, b)
            writes = self.popularity.scored_writes([new_a, new_b], affected)
            try:
                self.store.put_all_if_version(writes)
            except VersionConflictError:
                logger.debug(f"Edge commit {a}<->{b} conflicted (attempt {attempt}/{self.max_retries})")
                continue

            logger.info(f"Friendship {a} <-> {b} is now {target.value}")
            return affected

        raise ConcurrentModificationError(
            f"Could not commit friendship change between {a} and {b} after {self.max_retries} attempts",
            details={"a": a, "b": b},
        )
