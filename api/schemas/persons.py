"""
Pydantic schemas for person, friendship and interest endpoints.

Request bodies are deliberately loose here; the coordinator runs the strict
checks so every entry point rejects the same inputs the same way. Fields
also accept the web client's spellings (``username``, ``hobbies``,
``friendId``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from hobbygraph.models import Person


class PersonCreate(BaseModel):
    """Request body for creating a person"""

    display_name: Any = Field(default=None, validation_alias=AliasChoices("display_name", "username"))
    age: Any = None
    interests: Any = Field(default=None, validation_alias=AliasChoices("interests", "hobbies"))


class PersonUpdate(BaseModel):
    """Request body for a partial profile update"""

    display_name: Any = Field(default=None, validation_alias=AliasChoices("display_name", "username"))
    age: Any = None
    interests: Any = Field(default=None, validation_alias=AliasChoices("interests", "hobbies"))


class FriendRequest(BaseModel):
    """Request body for link and unlink"""

    friend_id: Any = Field(default=None, validation_alias=AliasChoices("friend_id", "friendId"))


class InterestRequest(BaseModel):
    """Request body for adding or removing an interest"""

    hobby: Any = None


class PersonResponse(BaseModel):
    """A committed person record"""

    id: str
    display_name: str
    age: int
    interests: list[str]
    friends: list[str]
    popularity_score: float
    version: int
    created_at: datetime

    @classmethod
    def from_person(cls, person: Person) -> PersonResponse:
        return cls(
            id=person.id,
            display_name=person.display_name,
            age=person.age,
            interests=list(person.interests),
            friends=sorted(person.friends),
            popularity_score=person.popularity_score,
            version=person.version,
            created_at=person.created_at,
        )


class PersonListResponse(BaseModel):
    users: list[PersonResponse]


class FriendshipResponse(BaseModel):
    """Both sides of a link or unlink"""

    message: str
    user: PersonResponse
    friend: PersonResponse


class MessageResponse(BaseModel):
    message: str
