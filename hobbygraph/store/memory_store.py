"""Thread-safe in-memory person store.

Default backend for local development and the backend the test suite runs
against. A single mutex guards the record map, so multi-record commits are
atomic.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Sequence

from ..errors import NotFoundError, VersionConflictError
from ..logging_config import TRACE
from ..models import Person
from .interfaces import PersonStore

logger = logging.getLogger(__name__)


class InMemoryPersonStore(PersonStore):
    """Dict-backed store with per-record versions."""

    def __init__(self) -> None:
        self._records: dict[str, Person] = {}
        self._lock = threading.Lock()

    def get(self, person_id: str) -> Person:
        with self._lock:
            record = self._records.get(person_id)
        if record is None:
            raise NotFoundError(f"Person {person_id} not found", details={"id": person_id})
        return record

    def put_if_version(self, record: Person, expected_version: int) -> Person:
        return self.put_all_if_version([(record, expected_version)])[0]

    def put_all_if_version(self, writes: Sequence[tuple[Person, int]]) -> list[Person]:
        with self._lock:
            # Check every write before applying any of them
            for record, expected in writes:
                current = self._records.get(record.id)
                if current is None:
                    raise NotFoundError(f"Person {record.id} not found", details={"id": record.id})
                if current.version != expected:
                    raise VersionConflictError(
                        f"Person {record.id} changed concurrently",
                        details={"id": record.id, "expected": expected, "actual": current.version},
                    )

            committed = []
            for record, expected in writes:
                stored = record.evolve(version=expected + 1)
                self._records[record.id] = stored
                committed.append(stored)

        logger.log(TRACE, f"Committed {[p.id for p in committed]}")
        return committed

    def create(self, record: Person) -> Person:
        person_id = record.id or uuid.uuid4().hex
        stored = record.evolve(id=person_id, version=1)
        with self._lock:
            if person_id in self._records:
                raise VersionConflictError(f"Person {person_id} already exists", details={"id": person_id})
            self._records[person_id] = stored
        logger.log(TRACE, f"Created person {person_id}")
        return stored

    def delete(self, person_id: str) -> None:
        with self._lock:
            if self._records.pop(person_id, None) is None:
                raise NotFoundError(f"Person {person_id} not found", details={"id": person_id})
        logger.log(TRACE, f"Deleted person {person_id}")

    def list_all(self) -> list[Person]:
        with self._lock:
            # Dict order is creation order; updates keep their slot
            return list(self._records.values())
