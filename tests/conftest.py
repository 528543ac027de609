"""
Root test configuration and fixtures for hobbygraph.

This conftest.py provides common fixtures for all test categories:
- unit/: Fast, isolated tests of the core engine
- unit/api/: HTTP layer tests through FastAPI's TestClient

Note: sys.path manipulation is handled here to ensure imports work correctly.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hobbygraph.coordinator import MutationCoordinator  # noqa: E402
from hobbygraph.models import Person  # noqa: E402
from hobbygraph.popularity import score  # noqa: E402
from hobbygraph.store.memory_store import InMemoryPersonStore  # noqa: E402


def create_mock_pocketbase() -> Mock:
    """Create a mock PocketBase instance with a chainable collection."""
    mock_pb = Mock()
    mock_collection = Mock()
    mock_collection.get_full_list = Mock(return_value=[])
    mock_collection.get_one = Mock()
    mock_collection.create = Mock()
    mock_collection.update = Mock()
    mock_collection.delete = Mock()
    mock_pb.collection = Mock(return_value=mock_collection)
    return mock_pb


@pytest.fixture
def mock_pocketbase() -> Mock:
    """Create a mock PocketBase instance for tests that need it."""
    return create_mock_pocketbase()


@pytest.fixture
def store() -> InMemoryPersonStore:
    return InMemoryPersonStore()


@pytest.fixture
def coordinator(store: InMemoryPersonStore) -> MutationCoordinator:
    return MutationCoordinator(store, lock_timeout_seconds=2.0, max_commit_retries=3)


@pytest.fixture
def make_person(coordinator: MutationCoordinator) -> Callable[..., Person]:
    """Factory creating people through the coordinator."""

    def _make(name: str = "Alex", age: int = 30, interests: Sequence[str] = ()) -> Person:
        return coordinator.create_person(name, age, list(interests))

    return _make


def graph_violations(records: Sequence[Person]) -> list[str]:
    """List symmetry, self-edge and score-coherence problems in a snapshot."""
    persons = {p.id: p for p in records}
    problems = []
    for person in persons.values():
        if person.id in person.friends:
            problems.append(f"{person.id} is its own friend")
        friends = []
        for friend_id in person.friends:
            if friend_id not in persons:
                problems.append(f"{person.id} lists missing friend {friend_id}")
            elif person.id not in persons[friend_id].friends:
                problems.append(f"half edge {person.id} -> {friend_id}")
            else:
                friends.append(persons[friend_id])
        if len(friends) == len(person.friends):
            expected = score(person, friends)
            if person.popularity_score != expected:
                problems.append(f"{person.id} score {person.popularity_score} != expected {expected}")
    return problems


def assert_graph_invariants(store: InMemoryPersonStore) -> None:
    """Check symmetry, no self-edges, and score coherence for every person."""
    problems = graph_violations(store.list_all())
    assert not problems, problems


class CommitRecordingStore(InMemoryPersonStore):
    """In-memory store that checks the whole graph after every commit.

    Problems are collected rather than asserted so that commits made from
    worker threads are checked too.
    """

    def __init__(self) -> None:
        super().__init__()
        self.commits: list[list[str]] = []
        self.violations: list[str] = []

    def put_all_if_version(self, writes: Sequence[tuple[Person, int]]) -> list[Person]:
        committed = super().put_all_if_version(writes)
        self.commits.append([p.id for p in committed])
        self.violations.extend(graph_violations(self.list_all()))
        return committed


@pytest.fixture
def check_invariants(store: InMemoryPersonStore) -> Callable[[], None]:
    return lambda: assert_graph_invariants(store)


@pytest.fixture
def recording_store() -> CommitRecordingStore:
    return CommitRecordingStore()


@pytest.fixture
def recording_coordinator(recording_store: CommitRecordingStore) -> MutationCoordinator:
    return MutationCoordinator(recording_store, lock_timeout_seconds=2.0, max_commit_retries=3)
