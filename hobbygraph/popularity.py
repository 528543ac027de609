"""
Popularity scoring and recomputation.

popularity = number of friends + 0.5 * (interests shared with each friend, summed)

The score of P depends only on P's own friends and interests and on the
interests of P's direct friends. That gives the affected-set rules:

- P's interests change      -> {P} | friends(P)
- edge between P and Q      -> {P, Q}
- other profile fields      -> nothing
- creation                  -> {P}
- deletion                  -> nothing (a deletable person has no friends)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal

from . import interests as interest_set
from .errors import (
    ConcurrentModificationError,
    InconsistentStateError,
    NotFoundError,
    VersionConflictError,
)
from .models import Person
from .store.interfaces import PersonStore

logger = logging.getLogger(__name__)

SHARED_INTEREST_WEIGHT = Decimal("0.5")


def round_half_up(value: Decimal | float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def score(person: Person, friend_records: Sequence[Person]) -> float:
    """Compute the popularity score of ``person`` from its friends' records.

    Pure: no I/O. ``friend_records`` must be exactly the records of
    ``person.friends``.
    """
    shared = sum(interest_set.overlap_count(person.interests, f.interests) for f in friend_records)
    raw = Decimal(len(friend_records)) + SHARED_INTEREST_WEIGHT * shared
    return round_half_up(raw)


def affected_by_interest_change(person: Person) -> set[str]:
    return {person.id, *person.friends}


def affected_by_edge_change(a: str, b: str) -> set[str]:
    return {a, b}


class PopularityEngine:
    """Scores an affected-node set against pending changes.

    Structural changes and the scores they imply are committed together in
    a single ``put_all_if_version`` batch, so no reader ever sees new
    friends or interests next to a stale score.
    """

    def __init__(self, store: PersonStore, max_retries: int = 3):
        """Initialize engine.

        Args:
            store: Store holding the committed records
            max_retries: Attempts per batch before giving up with
                ConcurrentModificationError
        """
        self.store = store
        self.max_retries = max_retries

    def _lookup(self, person_id: str, pending: Mapping[str, Person]) -> Person:
        if person_id in pending:
            return pending[person_id]
        return self.store.get(person_id)

    def _load_friends(self, person: Person, pending: Mapping[str, Person]) -> list[Person]:
        friends = []
        for friend_id in sorted(person.friends):
            try:
                friend = self._lookup(friend_id, pending)
            except NotFoundError as e:
                logger.error(f"Person {person.id} lists missing friend {friend_id}")
                raise InconsistentStateError(
                    f"Person {person.id} lists friend {friend_id} which does not exist",
                    details={"id": person.id, "friend_id": friend_id},
                ) from e
            if person.id not in friend.friends:
                logger.error(f"Half edge: {person.id} -> {friend_id} without reverse")
                raise InconsistentStateError(
                    f"Friendship between {person.id} and {friend_id} is one-sided",
                    details={"id": person.id, "friend_id": friend_id},
                )
            friends.append(friend)
        return friends

    def scored_writes(self, changed: Sequence[Person], affected: Iterable[str]) -> list[tuple[Person, int]]:
        """Build one batch committing ``changed`` with every affected score.

        ``changed`` holds records derived from committed snapshots that have
        not been written yet; their ``version`` is still the one they were
        read at. Scores for ``affected`` are computed as if ``changed`` were
        already committed. Nothing is written here, so a one-sided friendship
        raises ``InconsistentStateError`` before any change lands.

        Unchanged records whose score stays the same are left out of the batch.
        """
        pending = {p.id: p for p in changed}
        scored: dict[str, Person] = {}
        for person_id in sorted(set(affected)):
            person = self._lookup(person_id, pending)
            new_score = score(person, self._load_friends(person, pending))
            if person_id in pending or new_score != person.popularity_score:
                scored[person_id] = person.evolve(popularity_score=new_score)

        writes = []
        for person_id in sorted(pending.keys() | scored.keys()):
            record = scored.get(person_id) or pending[person_id]
            writes.append((record, record.version))
        return writes

    def recompute_affected(self, person_ids: Iterable[str]) -> dict[str, float]:
        """Recompute every id in the set and return the committed scores.

        Idempotent: running it again on an unchanged snapshot writes nothing
        and returns the same scores.

        Raises:
            NotFoundError: if a person does not exist
            InconsistentStateError: if a friendship is one-sided
            ConcurrentModificationError: if every attempt lost a version race
        """
        ids = sorted(set(person_ids))
        for attempt in range(1, self.max_retries + 1):
            writes = self.scored_writes([], ids)
            try:
                if writes:
                    self.store.put_all_if_version(writes)
            except VersionConflictError:
                logger.debug(f"Score batch for {ids} conflicted (attempt {attempt}/{self.max_retries})")
                continue
            for record, _ in writes:
                logger.debug(f"Score for {record.id} is now {record.popularity_score}")
            return {person_id: self.store.get(person_id).popularity_score for person_id in ids}

        raise ConcurrentModificationError(
            f"Could not commit popularity for {ids} after {self.max_retries} attempts",
            details={"ids": ids},
        )
