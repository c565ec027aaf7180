"""Pydantic schemas for Invitation API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import ASSIGNABLE_ROLE_PATTERN
from domain.entities.invitation import Invitation
from domain.entities.reconciliation import InviteResult


class InviteUsersRequest(BaseModel):
    """Schema for inviting users to a board or workspace."""

    user_ids: list[UUID] = Field(..., min_length=1)
    role: str = Field("member", pattern=ASSIGNABLE_ROLE_PATTERN)


class InvitationResponse(BaseModel):
    """Schema for Invitation response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "container_type": "board",
                "container_id": "456e4567-e89b-12d3-a456-426614174000",
                "invited_user_id": "789e4567-e89b-12d3-a456-426614174000",
                "invited_by_user_id": "abce4567-e89b-12d3-a456-426614174000",
                "role": "member",
                "status": "pending",
                "created_at": "2026-02-01T10:00:00",
                "responded_at": None,
            }
        },
    )

    id: UUID
    container_type: str
    container_id: UUID
    invited_user_id: UUID
    invited_by_user_id: UUID
    role: str
    status: str
    created_at: datetime
    responded_at: datetime | None = None

    @classmethod
    def from_entity(cls, invitation: Invitation) -> "InvitationResponse":
        return cls(
            id=invitation.id,
            container_type=invitation.container_type.value,
            container_id=invitation.container_id,
            invited_user_id=invitation.invited_user_id,
            invited_by_user_id=invitation.invited_by_user_id,
            role=invitation.role.label,
            status=invitation.status.value,
            created_at=invitation.created_at,
            responded_at=invitation.responded_at,
        )


class InvitationDetailResponse(BaseModel):
    """Schema for single Invitation response."""

    data: InvitationResponse


class InvitationListResponse(BaseModel):
    """Schema for list of Invitations response."""

    data: list[InvitationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class CandidateOutcomeResponse(BaseModel):
    """What happened to one invited user."""

    user_id: UUID
    outcome: str
    detail: str
    invitation: InvitationResponse | None = None


class InviteUsersResponse(BaseModel):
    """Per-candidate results of an invite request."""

    data: list[CandidateOutcomeResponse]
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: InviteResult) -> "InviteUsersResponse":
        return cls(
            data=[
                CandidateOutcomeResponse(
                    user_id=o.user_id,
                    outcome=o.outcome.value,
                    detail=o.detail,
                    invitation=InvitationResponse.from_entity(o.invitation)
                    if o.invitation
                    else None,
                )
                for o in result.outcomes
            ],
            meta={
                "total": len(result.outcomes),
                "created": len(result.created),
                "rejected": len(result.rejected),
            },
        )
