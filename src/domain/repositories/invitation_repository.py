"""Invitation repository protocol."""

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.membership import ContainerType


class IInvitationRepository(Protocol):
    """Repository interface for Invitation entities."""

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation."""
        ...

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        ...

    async def get_for_container(
        self, container_type: ContainerType, container_id: UUID
    ) -> list[Invitation]:
        """Get all invitations for a container, newest first."""
        ...

    async def get_for_pair(
        self, container_type: ContainerType, container_id: UUID, user_id: UUID
    ) -> list[Invitation]:
        """Get all invitations for a (container, invited user) pair, newest first."""
        ...

    async def get_pending_for_users(
        self, container_type: ContainerType, container_id: UUID, user_ids: list[UUID]
    ) -> list[Invitation]:
        """Get pending invitations of a container for any of ``user_ids``."""
        ...

    async def get_pending_for_user(self, user_id: UUID) -> list[Invitation]:
        """Get all pending invitations addressed to a user."""
        ...

    async def update_status(self, id: UUID, status: InvitationStatus) -> Invitation:
        """Update the status of an invitation."""
        ...

    async def delete_for_pair(
        self,
        container_type: ContainerType,
        container_id: UUID,
        user_id: UUID,
        statuses: Iterable[InvitationStatus],
    ) -> int:
        """Delete a pair's invitations in the given statuses. Returns the count."""
        ...

    async def cancel_pending_for_container(
        self, container_type: ContainerType, container_id: UUID
    ) -> int:
        """Mark every pending invitation of a container cancelled. Returns the count."""
        ...
