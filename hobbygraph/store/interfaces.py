"""Abstract store contract consumed by the core.

The core never assumes a particular database. It needs point reads,
conditional writes keyed on a record version, creation, deletion and a full
listing for read-side views.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models import Person


class PersonStore(ABC):
    """Abstract base class for person stores"""

    @abstractmethod
    def get(self, person_id: str) -> Person:
        """Return the committed record.

        Raises:
            NotFoundError: if no person has this id
        """

    @abstractmethod
    def put_if_version(self, record: Person, expected_version: int) -> Person:
        """Write ``record`` only if the stored version equals ``expected_version``.

        Returns the committed record with its version bumped.

        Raises:
            NotFoundError: if the record no longer exists
            VersionConflictError: if the stored version moved on
        """

    @abstractmethod
    def put_all_if_version(self, writes: Sequence[tuple[Person, int]]) -> list[Person]:
        """Conditionally write several records as one all-or-nothing commit."""

    @abstractmethod
    def create(self, record: Person) -> Person:
        """Persist a new record and return it with its assigned id."""

    @abstractmethod
    def delete(self, person_id: str) -> None:
        """Remove a record.

        Raises:
            NotFoundError: if no person has this id
        """

    @abstractmethod
    def list_all(self) -> list[Person]:
        """Return every committed record. Used by read-side views only."""
