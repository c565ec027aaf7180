"""Invitation domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.membership import ContainerRole, ContainerType


class InvitationStatus(StrEnum):
    """Status of a board or workspace invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    REMOVED = "removed"


# Terminal states after which the same pair may be invited again
REINVITABLE_STATUSES = frozenset(
    {InvitationStatus.DECLINED, InvitationStatus.CANCELLED, InvitationStatus.REMOVED}
)


@dataclass
class Invitation:
    """Domain entity for an invitation to a board or workspace."""

    container_type: ContainerType
    container_id: UUID
    invited_user_id: UUID
    invited_by_user_id: UUID
    role: ContainerRole = ContainerRole.MEMBER
    id: UUID = field(default_factory=uuid4)
    status: InvitationStatus = InvitationStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    responded_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == InvitationStatus.PENDING

    def resolve(self, status: InvitationStatus) -> None:
        """Move the invitation into a terminal status."""
        self.status = status
        self.responded_at = datetime.utcnow()
