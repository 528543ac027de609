"""Tests for InMemoryPersonStore."""

from __future__ import annotations

import pytest

from hobbygraph.errors import NotFoundError, VersionConflictError
from hobbygraph.models import Person


class TestInMemoryPersonStore:
    """Tests for the conditional-write contract."""

    def test_create_assigns_id_and_version(self, store):
        created = store.create(Person(id="", display_name="Ada", age=36))
        assert created.id
        assert created.version == 1
        assert store.get(created.id) == created

    def test_get_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            store.get("nope")

    def test_put_if_version_bumps_version(self, store):
        created = store.create(Person(id="", display_name="Ada", age=36))
        updated = store.put_if_version(created.evolve(age=37), created.version)
        assert updated.version == 2
        assert store.get(created.id).age == 37

    def test_stale_version_is_rejected(self, store):
        created = store.create(Person(id="", display_name="Ada", age=36))
        store.put_if_version(created.evolve(age=37), 1)
        with pytest.raises(VersionConflictError):
            store.put_if_version(created.evolve(age=99), 1)
        assert store.get(created.id).age == 37

    def test_multi_write_is_all_or_nothing(self, store):
        a = store.create(Person(id="", display_name="A", age=1))
        b = store.create(Person(id="", display_name="B", age=2))
        with pytest.raises(VersionConflictError):
            store.put_all_if_version([(a.evolve(age=10), a.version), (b.evolve(age=20), b.version + 5)])
        assert store.get(a.id).age == 1
        assert store.get(b.id).age == 2

    def test_delete(self, store):
        created = store.create(Person(id="", display_name="Ada", age=36))
        store.delete(created.id)
        with pytest.raises(NotFoundError):
            store.get(created.id)
        with pytest.raises(NotFoundError):
            store.delete(created.id)

    def test_put_after_delete_is_not_found(self, store):
        created = store.create(Person(id="", display_name="Ada", age=36))
        store.delete(created.id)
        with pytest.raises(NotFoundError):
            store.put_if_version(created, created.version)

    def test_list_all_in_creation_order(self, store):
        ids = [store.create(Person(id="", display_name=n, age=1)).id for n in "ABC"]
        assert [p.id for p in store.list_all()] == ids
