"""Pydantic schemas for container membership (members, leave, remove)."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from domain.entities.reconciliation import RemovalResult
from domain.services.container_service import MemberView


class MemberResponse(BaseModel):
    """Schema for one member of a board or workspace."""

    user_id: UUID
    role: str
    added_at: datetime | None = None
    username: str = ""
    email: str | None = None

    @classmethod
    def from_view(cls, member: MemberView) -> "MemberResponse":
        return cls(
            user_id=member.user_id,
            role=member.role.label,
            added_at=member.added_at,
            username=member.profile.username if member.profile else "",
            email=member.profile.email if member.profile else None,
        )


class MemberListResponse(BaseModel):
    """Schema for list of members response."""

    data: list[MemberResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class MemberEntryResponse(BaseModel):
    """Schema for the member entry created by accepting an invitation."""

    user_id: UUID
    role: str
    added_at: datetime


class AcceptInvitationResponse(BaseModel):
    """Schema for invitation acceptance response."""

    data: MemberEntryResponse


class RemovalWarningResponse(BaseModel):
    """A best-effort step of a removal that did not complete."""

    container_type: str
    container_id: UUID
    reason: str


class RemovalData(BaseModel):
    """Outcome of removing or leaving."""

    container_type: str
    container_id: UUID
    user_id: UUID
    removed: bool
    cascaded_board_ids: list[UUID] = Field(default_factory=list)
    warnings: list[RemovalWarningResponse] = Field(default_factory=list)


class RemovalResponse(BaseModel):
    """Schema for remove/leave response."""

    data: RemovalData

    @classmethod
    def from_result(cls, result: RemovalResult) -> "RemovalResponse":
        return cls(
            data=RemovalData(
                container_type=result.container_type.value,
                container_id=result.container_id,
                user_id=result.user_id,
                removed=result.removed,
                cascaded_board_ids=result.cascaded_board_ids,
                warnings=[
                    RemovalWarningResponse(
                        container_type=w.container_type.value,
                        container_id=w.container_id,
                        reason=w.reason,
                    )
                    for w in result.warnings
                ],
            )
        )
