"""Strict input schemas checked at the coordinator boundary.

Every public mutation validates its input here before any lock is taken.
Pydantic failures are re-raised as ``hobbygraph.errors.ValidationError``.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

CommandT = TypeVar("CommandT", bound=BaseModel)


def _clean_name(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("display_name must not be empty")
    return v


class CreatePersonCommand(BaseModel):
    """Input for creating a person"""

    model_config = ConfigDict(extra="forbid")

    display_name: StrictStr
    age: StrictInt = Field(ge=0)
    interests: list[StrictStr] = Field(default_factory=list)

    @field_validator("display_name", mode="after")
    @classmethod
    def validate_display_name(cls, v: str) -> str:
        return _clean_name(v)  # type: ignore[return-value]


class UpdateProfileCommand(BaseModel):
    """Input for a partial profile update. Omitted fields stay unchanged."""

    model_config = ConfigDict(extra="forbid")

    person_id: StrictStr = Field(min_length=1)
    display_name: StrictStr | None = None
    age: StrictInt | None = Field(default=None, ge=0)
    interests: list[StrictStr] | None = None

    @field_validator("display_name", mode="after")
    @classmethod
    def validate_display_name(cls, v: str | None) -> str | None:
        return _clean_name(v)

    def has_changes(self) -> bool:
        return any(v is not None for v in (self.display_name, self.age, self.interests))


class InterestCommand(BaseModel):
    """Input for adding or removing one interest"""

    model_config = ConfigDict(extra="forbid")

    person_id: StrictStr = Field(min_length=1)
    interest: StrictStr


class PersonIdCommand(BaseModel):
    model_config = ConfigDict(extra="forbid")

    person_id: StrictStr = Field(min_length=1)


class PairCommand(BaseModel):
    """Input for link and unlink"""

    model_config = ConfigDict(extra="forbid")

    person_id: StrictStr = Field(min_length=1)
    friend_id: StrictStr = Field(min_length=1)


def parse_command(model: type[CommandT], **data: Any) -> CommandT:
    """Validate ``data`` against ``model``.

    Raises:
        ValidationError: with the pydantic error list in ``details``
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()
        ]
        summary = "; ".join(f"{err['field']}: {err['message']}" for err in errors)
        raise ValidationError(f"Invalid {model.__name__}: {summary}", details={"errors": errors}) from e
