"""Per-person exclusive locks with ordered, bounded acquisition.

Each person id maps to one ``threading.Lock``. Operations that touch several
people acquire their locks in ascending id order, so two operations on the
same pair can never deadlock. Lock entries are reference counted and
dropped once nobody holds or waits for them.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from .errors import LockTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class PersonLockManager:
    """Thread-safe registry of per-person locks."""

    def __init__(self, timeout_seconds: float = 5.0):
        """Initialize lock manager.

        Args:
            timeout_seconds: Longest total wait for one operation's lock set
        """
        self._timeout = timeout_seconds
        self._entries: dict[str, _LockEntry] = {}
        self._registry_lock = threading.Lock()

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    def _checkout(self, person_id: str) -> _LockEntry:
        with self._registry_lock:
            entry = self._entries.get(person_id)
            if entry is None:
                entry = _LockEntry()
                self._entries[person_id] = entry
            entry.users += 1
            return entry

    def _checkin(self, person_id: str) -> None:
        with self._registry_lock:
            entry = self._entries[person_id]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[person_id]

    def active_count(self) -> int:
        """Number of ids currently held or waited on."""
        with self._registry_lock:
            return len(self._entries)

    @contextmanager
    def hold(self, person_ids: Iterable[str], timeout: float | None = None) -> Iterator[list[str]]:
        """Hold the locks for all ``person_ids`` for the duration of the block.

        Yields the sorted list of locked ids.

        Raises:
            LockTimeoutError: if the whole set is not acquired within the
                timeout; any locks taken so far are released first
        """
        ordered = sorted(set(person_ids))
        deadline = time.monotonic() + (self._timeout if timeout is None else timeout)
        acquired: list[tuple[str, _LockEntry]] = []

        try:
            for person_id in ordered:
                entry = self._checkout(person_id)
                remaining = max(0.0, deadline - time.monotonic())
                if not entry.lock.acquire(timeout=remaining):
                    self._checkin(person_id)
                    raise LockTimeoutError(
                        f"Timed out waiting for lock on person {person_id}",
                        details={"id": person_id, "requested": ordered},
                    )
                acquired.append((person_id, entry))
            logger.debug(f"Acquired locks {ordered}")
            yield ordered
        finally:
            for person_id, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(person_id)
            if acquired:
                logger.debug(f"Released locks {[pid for pid, _ in acquired]}")
