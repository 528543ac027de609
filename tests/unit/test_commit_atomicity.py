"""Every committed state is coherent, and failed operations commit nothing.

These tests run against ``CommitRecordingStore``, which re-checks symmetry
and score coherence across the whole graph after each commit. A structural
change written before its scores would show up there as a violation.
"""

from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from hobbygraph.errors import ConflictError, InconsistentStateError, NotFoundError
from hobbygraph.models import Person


def _snapshot(store, ids):
    return {pid: store.get(pid) for pid in ids}


class TestEveryCommitIsCoherent:
    """No reader can observe a structural change without its scores."""

    def test_link_then_add_interest(self, recording_coordinator, recording_store):
        a = recording_coordinator.create_person("A", 30, ["music", "chess"])
        b = recording_coordinator.create_person("B", 31, ["chess", "coding"])

        recording_coordinator.link(a.id, b.id)
        recording_coordinator.add_interest(b.id, "music")

        assert recording_store.violations == []
        assert recording_store.get(a.id).popularity_score == 2.0
        assert recording_store.get(b.id).popularity_score == 2.0

    def test_each_mutation_is_a_single_commit(self, recording_coordinator, recording_store):
        a = recording_coordinator.create_person("A", 30, ["music"])
        b = recording_coordinator.create_person("B", 31, ["music", "chess"])
        c = recording_coordinator.create_person("C", 32, ["art"])
        recording_coordinator.link(a.id, b.id)
        recording_coordinator.link(a.id, c.id)
        recording_store.commits.clear()

        recording_coordinator.add_interest(a.id, "chess")
        recording_coordinator.remove_interest(a.id, "music")
        recording_coordinator.update_profile(a.id, interests=["music", "art"])
        recording_coordinator.unlink(a.id, c.id)

        # A plus every friend whose score moved, in one batch per operation
        assert recording_store.commits == [
            sorted([a.id, b.id]),  # chess shared with B
            sorted([a.id, b.id]),  # music no longer shared with B
            sorted([a.id, c.id]),  # art shared with C, music with B again
            sorted([a.id, c.id]),
        ]
        assert recording_store.violations == []

    def test_profile_change_without_interests_commits_only_the_person(
        self, recording_coordinator, recording_store
    ):
        a = recording_coordinator.create_person("A", 30, ["music"])
        b = recording_coordinator.create_person("B", 31, ["music"])
        recording_coordinator.link(a.id, b.id)
        recording_store.commits.clear()

        recording_coordinator.update_profile(a.id, display_name="Ann", age=40)

        assert recording_store.commits == [[a.id]]
        assert recording_store.violations == []

    def test_concurrent_workload_never_exposes_an_incoherent_state(self, recording_coordinator, recording_store):
        topics = ["music", "chess", "coding", "hiking"]
        ids = [
            recording_coordinator.create_person(f"P{i}", 20 + i, random.sample(topics, 2)).id for i in range(6)
        ]

        def worker(seed):
            rng = random.Random(seed)
            for _ in range(30):
                op = rng.choice(["link", "unlink", "add", "remove"])
                try:
                    if op in ("link", "unlink"):
                        x, y = rng.sample(ids, 2)
                        getattr(recording_coordinator, op)(x, y)
                    elif op == "add":
                        recording_coordinator.add_interest(rng.choice(ids), rng.choice(topics))
                    else:
                        recording_coordinator.remove_interest(rng.choice(ids), rng.choice(topics))
                except (ConflictError, NotFoundError):
                    pass

        with ThreadPoolExecutor(max_workers=4) as pool:
            for f in [pool.submit(worker, seed) for seed in range(4)]:
                f.result()

        assert recording_store.commits
        assert recording_store.violations == []


class TestFailedOperationsCommitNothing:
    """A one-sided friendship found while scoring aborts the whole operation."""

    @pytest.fixture
    def half_linked(self, store):
        """A lists X as a friend, X does not list A."""
        store.create(Person(id="a", display_name="A", age=30, interests=("music",), friends=frozenset({"x"})))
        store.create(Person(id="x", display_name="X", age=31, interests=("music",)))
        store.create(Person(id="b", display_name="B", age=32, interests=("music",)))
        return ["a", "x", "b"]

    def test_add_interest_leaves_records_unchanged(self, coordinator, store, half_linked):
        before = _snapshot(store, half_linked)

        with pytest.raises(InconsistentStateError):
            coordinator.add_interest("a", "chess")

        assert _snapshot(store, half_linked) == before
        assert store.get("a").interests == ("music",)

    def test_remove_interest_leaves_records_unchanged(self, coordinator, store, half_linked):
        before = _snapshot(store, half_linked)

        with pytest.raises(InconsistentStateError):
            coordinator.remove_interest("a", "music")

        assert _snapshot(store, half_linked) == before

    def test_link_leaves_records_unchanged(self, coordinator, store, half_linked):
        before = _snapshot(store, half_linked)

        with pytest.raises(InconsistentStateError):
            coordinator.link("a", "b")

        assert _snapshot(store, half_linked) == before
        assert coordinator.locks.active_count() == 0
