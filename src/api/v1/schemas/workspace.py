"""Pydantic schemas for Workspace API."""

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.workspace import Workspace


class WorkspaceCreate(BaseModel):
    """Schema for creating a Workspace."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class WorkspaceResponse(BaseModel):
    """Schema for Workspace response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "My Team",
                "description": "Team workspace for project management",
                "owner_id": "456e4567-e89b-12d3-a456-426614174000",
                "member_count": 3,
                "created_at": "2026-02-01T10:00:00",
                "updated_at": "2026-02-01T10:00:00",
            }
        },
    )

    id: UUID
    name: str
    description: Optional[str]
    owner_id: UUID
    member_count: int = 1
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, workspace: Workspace) -> "WorkspaceResponse":
        return cls(
            id=workspace.id,
            name=workspace.name,
            description=workspace.description,
            owner_id=workspace.owner_id,
            # The owner is implicit and not stored in ``members``
            member_count=len(workspace.members) + 1,
            created_at=workspace.created_at,
            updated_at=workspace.updated_at,
        )


class WorkspaceDetailResponse(BaseModel):
    """Schema for single Workspace response."""

    data: WorkspaceResponse


class WorkspaceListResponse(BaseModel):
    """Schema for list of Workspaces response."""

    data: List[WorkspaceResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
