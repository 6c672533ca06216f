"""User schemas for request/response validation."""

from enum import Enum
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email

MAX_IDENTITY_LENGTH = 100


class UserRole(str, Enum):
    """Role assigned to a user account."""

    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """User record as returned by every read operation."""

    id: UUID
    email: str
    role: UserRole
    sub: str
    name: str | None = None
    avatar_id: str | None = None
    deleted: str = ""


class Empty(BaseModel):
    """Empty acknowledgement."""


class RequestSchema(BaseModel):
    """Base for inbound request shapes.

    Each subclass declares its own rules and the message returned when they
    fail; field-level detail never reaches the caller.
    """

    invalid_message: ClassVar[str] = "Invalid request"


class AuthRequest(RequestSchema):
    """Authenticate or provision a user by email."""

    invalid_message: ClassVar[str] = "Invalid email or code"

    email: str = Field(..., min_length=1, max_length=MAX_IDENTITY_LENGTH)
    sub: str = Field(..., min_length=1, max_length=MAX_IDENTITY_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email_syntax(cls, v: str) -> str:
        """Check email syntax, keeping the address exactly as sent."""
        validate_email(v)
        return v


class UserIds(RequestSchema):
    """Set of user ids to stream."""

    user_ids: set[UUID] = Field(default_factory=set)


class UserId(RequestSchema):
    """Single user id."""

    user_id: UUID


class UpdateUserRequest(RequestSchema):
    """Profile fields a user may change."""

    id: UUID
    name: str | None = None
    avatar_id: str | None = None


class DeleteUserRequest(RequestSchema):
    """Soft delete request; all three fields must match the stored row.

    Missing strings default to empty and simply match nothing.
    """

    id: UUID
    sub: str = ""
    email: str = ""
