"""
MutationCoordinator - the single entry point for every graph mutation.

Each operation runs as one cycle:

1. validate the input (before any lock is taken)
2. acquire per-person locks in ascending id order
3. apply the interest or friendship change to the committed snapshot
4. derive the affected-node set and score it against the pending change
5. commit the change and the new scores as one versioned batch
6. release the locks

Callers cannot change interests or friendships without going through here,
so no structural change is ever committed without the scores it implies.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

from . import interests as interest_set
from .commands import (
    CreatePersonCommand,
    InterestCommand,
    PairCommand,
    PersonIdCommand,
    UpdateProfileCommand,
    parse_command,
)
from .errors import (
    ConcurrentModificationError,
    ConflictError,
    LockTimeoutError,
    ValidationError,
    VersionConflictError,
)
from .graph import FriendshipGraph, validate_pair
from .locks import PersonLockManager
from .models import Person
from .popularity import PopularityEngine, affected_by_interest_change
from .store.interfaces import PersonStore

logger = logging.getLogger(__name__)

# A change returns the new record and whether the interest set changed
Change = Callable[[Person], tuple[Person, bool]]


class MutationCoordinator:
    """Serializes mutations per person and keeps popularity coherent."""

    def __init__(
        self,
        store: PersonStore,
        lock_timeout_seconds: float = 5.0,
        max_commit_retries: int = 3,
        locks: PersonLockManager | None = None,
    ):
        """Initialize coordinator.

        Args:
            store: Store holding the committed person records
            lock_timeout_seconds: Bounded wait for an operation's lock set
            max_commit_retries: Attempts for each optimistic commit
            locks: Lock manager to share with other coordinators on the same store
        """
        self.store = store
        self.max_retries = max_commit_retries
        self.locks = locks or PersonLockManager(timeout_seconds=lock_timeout_seconds)
        self.popularity = PopularityEngine(store, max_retries=max_commit_retries)
        self.graph = FriendshipGraph(store, self.popularity, max_retries=max_commit_retries)

    # ========================================
    # Reads
    # ========================================

    def get_person(self, person_id: str) -> Person:
        cmd = parse_command(PersonIdCommand, person_id=person_id)
        return self.store.get(cmd.person_id)

    def list_persons(self) -> list[Person]:
        return self.store.list_all()

    # ========================================
    # Mutations
    # ========================================

    def create_person(self, display_name: str, age: int, interests: Sequence[str] | None = None) -> Person:
        """Create a friendless person. Affected set is the new person alone."""
        cmd = parse_command(
            CreatePersonCommand,
            display_name=display_name,
            age=age,
            interests=[] if interests is None else interests,
        )
        initial = interest_set.from_raw(cmd.interests)

        created = self.store.create(Person(id="", display_name=cmd.display_name, age=cmd.age, interests=initial))
        with self.locks.hold([created.id]):
            self.popularity.recompute_affected({created.id})
            person = self.store.get(created.id)

        logger.info(f"Created person {person.id} ({person.display_name}, {len(person.interests)} interests)")
        return person

    def update_profile(
        self,
        person_id: str,
        display_name: str | None = None,
        age: int | None = None,
        interests: Sequence[str] | None = None,
    ) -> Person:
        """Apply a partial profile update.

        Scores are recomputed for the person and their friends only when the
        normalized interest set actually changes.
        """
        cmd = parse_command(
            UpdateProfileCommand,
            person_id=person_id,
            display_name=display_name,
            age=age,
            interests=interests,
        )
        if not cmd.has_changes():
            raise ValidationError("No fields to update", details={"id": cmd.person_id})
        if cmd.interests is not None:
            # Reject malformed or duplicate interests before locking
            interest_set.from_raw(cmd.interests)

        def change(current: Person) -> tuple[Person, bool]:
            updates: dict[str, object] = {}
            if cmd.display_name is not None:
                updates["display_name"] = cmd.display_name
            if cmd.age is not None:
                updates["age"] = cmd.age
            changed = False
            if cmd.interests is not None:
                new_interests, changed = interest_set.replace(current.interests, cmd.interests)
                updates["interests"] = new_interests
            return current.evolve(**updates), changed

        if cmd.interests is None:
            with self.locks.hold([cmd.person_id]):
                person = self._apply(cmd.person_id, change)
        else:
            with self._hold_with_friends(cmd.person_id):
                person = self._apply(cmd.person_id, change)

        logger.info(f"Updated profile of person {person.id}")
        return person

    def add_interest(self, person_id: str, interest: str) -> Person:
        """Add one interest; recomputes the person and all of their friends."""
        cmd = parse_command(InterestCommand, person_id=person_id, interest=interest)
        interest_set.normalize(cmd.interest)

        def change(current: Person) -> tuple[Person, bool]:
            new_interests, added = interest_set.add(current.interests, cmd.interest)
            return current.evolve(interests=new_interests), added

        with self._hold_with_friends(cmd.person_id):
            person = self._apply(cmd.person_id, change)

        logger.info(f"Added interest '{cmd.interest.strip()}' to person {person.id}")
        return person

    def remove_interest(self, person_id: str, interest: str) -> Person:
        """Remove one interest; recomputes the person and all of their friends."""
        cmd = parse_command(InterestCommand, person_id=person_id, interest=interest)
        interest_set.normalize(cmd.interest)

        def change(current: Person) -> tuple[Person, bool]:
            new_interests, removed = interest_set.remove(current.interests, cmd.interest)
            return current.evolve(interests=new_interests), removed

        with self._hold_with_friends(cmd.person_id):
            person = self._apply(cmd.person_id, change)

        logger.info(f"Removed interest '{cmd.interest.strip()}' from person {person.id}")
        return person

    def link(self, person_id: str, friend_id: str) -> tuple[Person, Person]:
        """Befriend two people and recompute both scores."""
        cmd = parse_command(PairCommand, person_id=person_id, friend_id=friend_id)
        validate_pair(cmd.person_id, cmd.friend_id)

        with self.locks.hold([cmd.person_id, cmd.friend_id]):
            self.graph.link(cmd.person_id, cmd.friend_id)
            return self.store.get(cmd.person_id), self.store.get(cmd.friend_id)

    def unlink(self, person_id: str, friend_id: str) -> tuple[Person, Person]:
        """Remove a friendship and recompute both scores."""
        cmd = parse_command(PairCommand, person_id=person_id, friend_id=friend_id)
        validate_pair(cmd.person_id, cmd.friend_id)

        with self.locks.hold([cmd.person_id, cmd.friend_id]):
            self.graph.unlink(cmd.person_id, cmd.friend_id)
            return self.store.get(cmd.person_id), self.store.get(cmd.friend_id)

    def delete_person(self, person_id: str) -> None:
        """Delete a friendless person. No scores depend on them."""
        cmd = parse_command(PersonIdCommand, person_id=person_id)

        with self.locks.hold([cmd.person_id]):
            person = self.store.get(cmd.person_id)
            if person.friends:
                raise ConflictError(
                    f"Person {person.id} still has {len(person.friends)} friends; unlink them first",
                    details={"id": person.id, "friends": sorted(person.friends)},
                )
            self.store.delete(person.id)

        logger.info(f"Deleted person {cmd.person_id}")

    # ========================================
    # Internals
    # ========================================

    @contextmanager
    def _hold_with_friends(self, person_id: str) -> Iterator[Person]:
        """Lock a person together with everyone currently their friend.

        Friends are read first, then the whole set is locked in order and
        the person re-read. If the friend set moved in between, the locks
        are dropped and the acquisition retried until the lock timeout is
        used up.
        """
        deadline = time.monotonic() + self.locks.timeout_seconds
        attempt = 0
        while True:
            attempt += 1
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise LockTimeoutError(
                    f"Friends of person {person_id} kept changing while acquiring locks",
                    details={"id": person_id, "attempts": attempt - 1},
                )
            snapshot = self.store.get(person_id)
            with self.locks.hold({person_id, *snapshot.friends}, timeout=remaining):
                current = self.store.get(person_id)
                if current.friends == snapshot.friends:
                    yield current
                    return
            logger.debug(f"Friends of {person_id} changed while locking (attempt {attempt})")

    def _apply(self, person_id: str, change: Change) -> Person:
        """Run a fetch-change-score-commit cycle for one person.

        The change and every score it affects are committed in one batch, so
        a failure while scoring leaves the stored records untouched. Must be
        called with the person's lock held.
        """
        for attempt in range(1, self.max_retries + 1):
            current = self.store.get(person_id)
            updated, interests_changed = change(current)
            affected = affected_by_interest_change(updated) if interests_changed else set()
            writes = self.popularity.scored_writes([updated], affected)
            try:
                self.store.put_all_if_version(writes)
            except VersionConflictError:
                logger.debug(f"Commit for {person_id} conflicted (attempt {attempt}/{self.max_retries})")
                continue
            return self.store.get(person_id)

        raise ConcurrentModificationError(
            f"Could not commit changes to person {person_id} after {self.max_retries} attempts",
            details={"id": person_id},
        )
