"""Value-level logic for a person's interest set.

Interests are stored as an ordered tuple of display strings. Two entries are
the same interest when their normalized forms (trimmed, lowercased) match.
The first insertion decides the display casing.

All functions here are pure: they return new tuples and never touch a store.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import NewType

from .errors import ConflictError, NotFoundError, ValidationError

NormalizedInterest = NewType("NormalizedInterest", str)


def normalize(raw: object) -> NormalizedInterest:
    """Trim and lowercase an interest for comparison.

    Raises:
        ValidationError: if ``raw`` is not a string or is blank after trimming
    """
    if not isinstance(raw, str):
        raise ValidationError("Interest must be a string", details={"value": repr(raw)})
    trimmed = raw.strip()
    if not trimmed:
        raise ValidationError("Interest must not be empty")
    return NormalizedInterest(trimmed.lower())


def normalized_set(interests: Iterable[str]) -> frozenset[NormalizedInterest]:
    return frozenset(normalize(i) for i in interests)


def add(interests: Sequence[str], raw: str) -> tuple[tuple[str, ...], bool]:
    """Append ``raw`` (trimmed, casing kept) to the set.

    Raises:
        ValidationError: if ``raw`` is blank
        ConflictError: if an existing member has the same normalized form
    """
    key = normalize(raw)
    for existing in interests:
        if normalize(existing) == key:
            raise ConflictError(
                f"Interest '{raw.strip()}' already present as '{existing}'",
                details={"interest": existing},
            )
    return (*interests, raw.strip()), True


def remove(interests: Sequence[str], raw: str) -> tuple[tuple[str, ...], bool]:
    """Drop the member whose normalized form matches ``raw``.

    Raises:
        ValidationError: if ``raw`` is blank
        NotFoundError: if no member matches
    """
    key = normalize(raw)
    kept = tuple(i for i in interests if normalize(i) != key)
    if len(kept) == len(interests):
        raise NotFoundError(f"Interest '{raw.strip()}' not found", details={"interest": raw.strip()})
    return kept, True


def overlap_count(a: Iterable[str], b: Iterable[str]) -> int:
    """Number of normalized interests present in both sets."""
    return len(normalized_set(a) & normalized_set(b))


def from_raw(raws: Iterable[str]) -> tuple[str, ...]:
    """Build an interest set from request input.

    A duplicate within the request is malformed input, so it surfaces as
    ``ValidationError`` rather than ``ConflictError``.
    """
    result: tuple[str, ...] = ()
    for raw in raws:
        try:
            result, _ = add(result, raw)
        except ConflictError as e:
            raise ValidationError(f"Duplicate interest in request: {e.message}", details=e.details) from e
    return result


def replace(current: Sequence[str], desired: Iterable[str]) -> tuple[tuple[str, ...], bool]:
    """Rewrite ``current`` so it holds exactly the interests in ``desired``.

    Members that survive keep their stored casing and position; new ones are
    appended in request order. Returns the new tuple and whether the
    normalized set changed.
    """
    wanted = from_raw(desired)
    wanted_keys = normalized_set(wanted)

    result = tuple(current)
    for existing in current:
        if normalize(existing) not in wanted_keys:
            result, _ = remove(result, existing)

    present = normalized_set(result)
    for raw in wanted:
        if normalize(raw) not in present:
            result, _ = add(result, raw)

    return result, normalized_set(result) != normalized_set(current)
