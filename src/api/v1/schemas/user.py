"""Pydantic schemas for User directory API."""

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from domain.entities.profile import Profile


class UserResponse(BaseModel):
    """Schema for a user profile."""

    id: UUID
    username: str
    email: Optional[str] = None

    @classmethod
    def from_entity(cls, profile: Profile) -> "UserResponse":
        return cls(id=profile.id, username=profile.username, email=profile.email)


class UserDetailResponse(BaseModel):
    """Schema for single user response."""

    data: UserResponse


class UserSearchResponse(BaseModel):
    """Schema for user search results.

    ``meta.self_match`` is true when the query matches the caller, who is
    always excluded from results. ``meta.error`` is set when the lookup failed.
    """

    data: list[UserResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
