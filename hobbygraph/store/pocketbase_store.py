"""PocketBase-backed person store.

Records live in a ``persons`` collection with the fields ``display_name``,
``age``, ``interests`` (json), ``friends`` (json), ``popularity_score``,
``version`` and ``created_at``.

PocketBase has no conditional update, so version checks are done client side
(read, compare, write). That is only safe while every writer goes through
the coordinator's per-person locks, which is the case for a single API
process.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from pocketbase import PocketBase
from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from ..errors import InconsistentStateError, NotFoundError, VersionConflictError
from ..logging_config import TRACE
from ..models import Person
from .interfaces import PersonStore

logger = logging.getLogger(__name__)


def _parse_json_list(value: Any) -> list[str]:
    """Handle both parsed lists and JSON text for json fields."""
    if not value:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return []
        return [str(v) for v in parsed] if isinstance(parsed, list) else []
    return []


def _parse_created(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00").replace(" ", "T"))
        except ValueError:
            return datetime.now(UTC)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


class PocketBasePersonStore(PersonStore):
    """Person store on top of a PocketBase collection."""

    def __init__(self, pb_client: PocketBase, collection: str = "persons") -> None:
        self.pb = pb_client
        self.collection_name = collection

    def _collection(self) -> Any:
        return self.pb.collection(self.collection_name)

    def _map_to_person(self, db_record: Any) -> Person:
        return Person(
            id=str(db_record.id),
            display_name=str(getattr(db_record, "display_name", "") or ""),
            age=int(getattr(db_record, "age", 0) or 0),
            interests=tuple(_parse_json_list(getattr(db_record, "interests", None))),
            friends=frozenset(_parse_json_list(getattr(db_record, "friends", None))),
            popularity_score=float(getattr(db_record, "popularity_score", 0.0) or 0.0),
            version=int(getattr(db_record, "version", 0) or 0),
            created_at=_parse_created(getattr(db_record, "created_at", None)),
        )

    @staticmethod
    def _to_body(record: Person, version: int) -> dict[str, Any]:
        return {
            "display_name": record.display_name,
            "age": record.age,
            "interests": list(record.interests),
            "friends": sorted(record.friends),
            "popularity_score": record.popularity_score,
            "version": version,
            "created_at": record.created_at.isoformat(),
        }

    def get(self, person_id: str) -> Person:
        try:
            db_record = self._collection().get_one(person_id)
        except ClientResponseError as e:
            if e.status == 404:
                raise NotFoundError(f"Person {person_id} not found", details={"id": person_id}) from e
            raise
        return self._map_to_person(db_record)

    def put_if_version(self, record: Person, expected_version: int) -> Person:
        return self.put_all_if_version([(record, expected_version)])[0]

    def put_all_if_version(self, writes: Sequence[tuple[Person, int]]) -> list[Person]:
        originals: list[Person] = []
        for record, expected in writes:
            current = self.get(record.id)
            if current.version != expected:
                raise VersionConflictError(
                    f"Person {record.id} changed concurrently",
                    details={"id": record.id, "expected": expected, "actual": current.version},
                )
            originals.append(current)

        committed: list[Person] = []
        for record, expected in writes:
            try:
                db_record = self._collection().update(record.id, self._to_body(record, expected + 1))
            except ClientResponseError as e:
                self._rollback(committed, originals)
                if e.status == 404:
                    raise NotFoundError(f"Person {record.id} not found", details={"id": record.id}) from e
                raise
            logger.log(TRACE, f"Updated person {record.id} to version {expected + 1}")
            committed.append(self._map_to_person(db_record))
        return committed

    def _rollback(self, committed: list[Person], originals: list[Person]) -> None:
        """Restore records already written by a failed multi-record commit."""
        by_id = {p.id: p for p in originals}
        for written in committed:
            original = by_id[written.id]
            try:
                # Bump past the partial write so stale readers conflict
                self._collection().update(original.id, self._to_body(original, written.version + 1))
            except ClientResponseError as e:
                logger.error(f"Rollback of person {original.id} failed: {e}")
                raise InconsistentStateError(
                    "Partial multi-record commit could not be rolled back",
                    details={"id": original.id},
                ) from e
            logger.warning(f"Rolled back partial write of person {original.id}")

    def create(self, record: Person) -> Person:
        db_record = self._collection().create(self._to_body(record, 1))
        logger.log(TRACE, f"Created person {db_record.id}")
        return self._map_to_person(db_record)

    def delete(self, person_id: str) -> None:
        try:
            self._collection().delete(person_id)
        except ClientResponseError as e:
            if e.status == 404:
                raise NotFoundError(f"Person {person_id} not found", details={"id": person_id}) from e
            raise
        logger.log(TRACE, f"Deleted person {person_id}")

    def list_all(self) -> list[Person]:
        records = self._collection().get_full_list(query_params={"sort": "created_at"})
        return [self._map_to_person(r) for r in records]
