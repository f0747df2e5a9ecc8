"""
User data models for the Users Service.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class User(BaseModel):
    """A user record as published by the remote directory."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


class UserListResponse(BaseModel):
    """One page of ``GET /users?page=N``."""

    page: int = 0
    per_page: int = 0
    total: int = 0
    total_pages: Optional[int] = None
    data: List[User] = []

    @field_validator("data", mode="before")
    @classmethod
    def null_data_is_empty(cls, v):
        return [] if v is None else v


class UserResponse(BaseModel):
    """Body of ``GET /users/{id}``."""

    data: Optional[User] = None


class LookupStatus(str, Enum):
    """Outcome of a single-user lookup."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class UserLookup:
    """Result of looking up one user by id.

    ``FOUND`` may still carry ``user=None`` when the directory answered
    successfully with an empty ``data`` field.
    """

    user_id: int
    status: LookupStatus
    user: Optional[User] = None

    @classmethod
    def found(cls, user_id: int, user: Optional[User]) -> "UserLookup":
        return cls(user_id=user_id, status=LookupStatus.FOUND, user=user)

    @classmethod
    def not_found(cls, user_id: int) -> "UserLookup":
        return cls(user_id=user_id, status=LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, user_id: int) -> "UserLookup":
        return cls(user_id=user_id, status=LookupStatus.FAILED)
