"""Error taxonomy for graph mutations.

Every failure a caller can see is one of these classes. The ``code``
attribute is stable and is what the HTTP layer reports alongside the
message.
"""

from __future__ import annotations

from typing import Any


class HobbygraphError(Exception):
    """Base exception for all graph and interest errors."""

    code: str = "hobbygraph_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} :: {self.details}"
        return f"[{self.code}] {self.message}"


class ValidationError(HobbygraphError):
    """Raised when input is malformed. Never retried."""

    code = "validation_error"


class NotFoundError(HobbygraphError):
    """Raised when a referenced person (or interest) does not exist."""

    code = "not_found"


class ConflictError(HobbygraphError):
    """Raised when an operation violates a uniqueness or existence precondition."""

    code = "conflict"


class InconsistentStateError(HobbygraphError):
    """Raised when a half friend edge is found. Treated as a defect."""

    code = "inconsistent_state"


class ConcurrentModificationError(HobbygraphError):
    """Raised when optimistic commits keep losing to other writers."""

    code = "concurrent_modification"


class LockTimeoutError(HobbygraphError):
    """Raised when per-person locks cannot be acquired in time."""

    code = "lock_timeout"


class VersionConflictError(HobbygraphError):
    """Raised by stores when a conditional write finds a newer version.

    Internal to the core: retry loops turn it into
    ``ConcurrentModificationError`` once they give up.
    """

    code = "version_conflict"

