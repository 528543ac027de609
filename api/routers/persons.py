"""
Persons Router - Endpoints for people, friendships and interests.

This router handles:
- Person CRUD (create, list, fetch, partial update, delete)
- Linking and unlinking friends
- Adding and removing interests ("hobbies")

Every mutation is delegated to the MutationCoordinator, which is blocking,
so handlers run it in a worker thread. Domain errors propagate to the
handlers registered in ``api.errors``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from hobbygraph.coordinator import MutationCoordinator

from ..dependencies import get_coordinator
from ..schemas import (
    FriendRequest,
    FriendshipResponse,
    InterestRequest,
    MessageResponse,
    PersonCreate,
    PersonListResponse,
    PersonResponse,
    PersonUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])

Coordinator = Annotated[MutationCoordinator, Depends(get_coordinator)]
PersonId = Annotated[str, Path(description="Person ID")]


# ========================================
# Person CRUD
# ========================================


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_person(body: PersonCreate, coordinator: Coordinator) -> PersonResponse:
    """Create a person with no friends and a popularity score of 0."""
    person = await asyncio.to_thread(
        coordinator.create_person,
        body.display_name,
        body.age,
        [] if body.interests is None else body.interests,
    )
    return PersonResponse.from_person(person)


@router.get("")
async def list_persons(coordinator: Coordinator) -> PersonListResponse:
    """List every person."""
    persons = await asyncio.to_thread(coordinator.list_persons)
    return PersonListResponse(users=[PersonResponse.from_person(p) for p in persons])


@router.get("/{person_id}")
async def get_person(person_id: PersonId, coordinator: Coordinator) -> PersonResponse:
    """Fetch one person."""
    person = await asyncio.to_thread(coordinator.get_person, person_id)
    return PersonResponse.from_person(person)


@router.put("/{person_id}")
async def update_person(person_id: PersonId, body: PersonUpdate, coordinator: Coordinator) -> PersonResponse:
    """Update display name, age and/or the full interest list."""
    person = await asyncio.to_thread(
        coordinator.update_profile,
        person_id,
        body.display_name,
        body.age,
        body.interests,
    )
    return PersonResponse.from_person(person)


@router.delete("/{person_id}")
async def delete_person(person_id: PersonId, coordinator: Coordinator) -> MessageResponse:
    """Delete a person who has no friends."""
    await asyncio.to_thread(coordinator.delete_person, person_id)
    return MessageResponse(message="User deleted")


# ========================================
# Friendships
# ========================================


@router.post("/{person_id}/link")
async def link_person(person_id: PersonId, body: FriendRequest, coordinator: Coordinator) -> FriendshipResponse:
    """Create a mutual friendship."""
    user, friend = await asyncio.to_thread(coordinator.link, person_id, body.friend_id)
    return FriendshipResponse(
        message="Users linked (mutual friendship created)",
        user=PersonResponse.from_person(user),
        friend=PersonResponse.from_person(friend),
    )


@router.delete("/{person_id}/unlink")
async def unlink_person(person_id: PersonId, body: FriendRequest, coordinator: Coordinator) -> FriendshipResponse:
    """Remove a mutual friendship."""
    user, friend = await asyncio.to_thread(coordinator.unlink, person_id, body.friend_id)
    return FriendshipResponse(
        message="Users unlinked (friendship removed)",
        user=PersonResponse.from_person(user),
        friend=PersonResponse.from_person(friend),
    )


# ========================================
# Interests
# ========================================


@router.put("/{person_id}/hobby")
async def add_hobby(person_id: PersonId, body: InterestRequest, coordinator: Coordinator) -> PersonResponse:
    """Add an interest; the person's and their friends' scores are refreshed."""
    person = await asyncio.to_thread(coordinator.add_interest, person_id, body.hobby)
    return PersonResponse.from_person(person)


@router.delete("/{person_id}/hobby")
async def remove_hobby(person_id: PersonId, body: InterestRequest, coordinator: Coordinator) -> PersonResponse:
    """Remove an interest; the person's and their friends' scores are refreshed."""
    person = await asyncio.to_thread(coordinator.remove_interest, person_id, body.hobby)
    return PersonResponse.from_person(person)
