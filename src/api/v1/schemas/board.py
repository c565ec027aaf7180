"""Pydantic schemas for Board API."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import ASSIGNABLE_ROLE_PATTERN
from api.v1.schemas.invitation import InviteUsersResponse
from domain.entities.board import Board


class BoardCreate(BaseModel):
    """Schema for creating a Board, optionally inviting users right away."""

    title: str = Field(..., min_length=1, max_length=255)
    workspace_id: Optional[UUID] = None
    background_image: Optional[str] = Field(None, max_length=2048)
    invitee_ids: list[UUID] = Field(default_factory=list)
    role: str = Field("member", pattern=ASSIGNABLE_ROLE_PATTERN)


class BoardResponse(BaseModel):
    """Schema for Board response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Sprint Planning",
                "owner_id": "456e4567-e89b-12d3-a456-426614174000",
                "workspace_id": "789e4567-e89b-12d3-a456-426614174000",
                "background_image": None,
                "member_count": 2,
                "created_at": "2026-02-01T10:00:00",
                "updated_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: UUID
    title: str
    owner_id: UUID
    workspace_id: Optional[UUID] = None
    background_image: Optional[str] = None
    member_count: int = 1
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, board: Board) -> "BoardResponse":
        return cls(
            id=board.id,
            title=board.title,
            owner_id=board.owner_id,
            workspace_id=board.workspace_id,
            background_image=board.background_image,
            member_count=len(board.members) + 1,
            created_at=board.created_at,
            updated_at=board.updated_at,
        )


class BoardDetailResponse(BaseModel):
    """Schema for single Board response."""

    data: BoardResponse


class BoardCreatedResponse(BaseModel):
    """Schema for board creation response, with the initial invitation results."""

    data: BoardResponse
    invitations: Optional[InviteUsersResponse] = None


class BoardListResponse(BaseModel):
    """Schema for list of Boards response."""

    data: list[BoardResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
