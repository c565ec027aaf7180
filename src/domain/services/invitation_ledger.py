"""Invitation ledger: invitation records and their status lifecycle."""

from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from core.exceptions import (
    DuplicatePendingError,
    InvalidTransitionError,
    InvitationAlreadyResolvedError,
    InvitationNotFoundError,
)
from domain.entities.invitation import (
    REINVITABLE_STATUSES,
    Invitation,
    InvitationStatus,
)
from domain.entities.membership import ContainerRole, ContainerType
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

# Statuses that still grant or promise access and are closed by a removal
SETTLED_ON_REMOVAL = frozenset({InvitationStatus.PENDING, InvitationStatus.ACCEPTED})


class InvitationLedger:
    """Owns the invitation state machine.

    ``pending`` moves to exactly one of accepted/declined/cancelled/removed.
    At most one pending invitation exists per (container, invited user).
    A pair whose last invitation was declined, cancelled or removed can be
    invited again; the stale rows are deleted before the new one is inserted.

    All methods run inside the caller's unit of work (caller manages commit).
    """

    async def create(
        self,
        uow: IUnitOfWork,
        container_type: ContainerType,
        container_id: UUID,
        invited_user_id: UUID,
        invited_by_user_id: UUID,
        role: ContainerRole = ContainerRole.MEMBER,
    ) -> Invitation:
        """Create a pending invitation for the pair.

        Raises:
            DuplicatePendingError: If the pair already has a pending invitation,
                including one inserted concurrently by another request.
        """
        existing = await self.find_pending(uow, container_type, container_id, [invited_user_id])
        if existing:
            raise DuplicatePendingError(str(container_id), str(invited_user_id))

        cleared = await uow.invitations.delete_for_pair(
            container_type, container_id, invited_user_id, REINVITABLE_STATUSES
        )
        if cleared:
            logger.info(
                "stale_invitations_cleared",
                container_type=container_type.value,
                container_id=str(container_id),
                user_id=str(invited_user_id),
                count=cleared,
            )

        invitation = Invitation(
            container_type=container_type,
            container_id=container_id,
            invited_user_id=invited_user_id,
            invited_by_user_id=invited_by_user_id,
            role=role,
        )
        try:
            return await uow.invitations.create(invitation)
        except IntegrityError:
            # Lost a race against a concurrent insert for the same pair
            await uow.rollback()
            raise DuplicatePendingError(str(container_id), str(invited_user_id)) from None

    async def transition(
        self,
        uow: IUnitOfWork,
        invitation_id: UUID,
        new_status: InvitationStatus,
    ) -> Invitation:
        """Move a pending invitation to a terminal status.

        Raises:
            InvitationNotFoundError: If the invitation does not exist.
            InvalidTransitionError: If ``new_status`` is ``pending``.
            InvitationAlreadyResolvedError: If the invitation is not pending.
        """
        invitation = await uow.invitations.get_by_id(invitation_id)
        if not invitation:
            raise InvitationNotFoundError(str(invitation_id))

        if new_status == InvitationStatus.PENDING:
            raise InvalidTransitionError(invitation.status.value, new_status.value)

        if not invitation.is_pending:
            raise InvitationAlreadyResolvedError(str(invitation_id), invitation.status.value)

        return await uow.invitations.update_status(invitation_id, new_status)

    async def find_pending(
        self,
        uow: IUnitOfWork,
        container_type: ContainerType,
        container_id: UUID,
        user_ids: list[UUID],
    ) -> list[Invitation]:
        """Pending invitations of the container addressed to any of ``user_ids``."""
        return await uow.invitations.get_pending_for_users(  # type: ignore[no-any-return]
            container_type, container_id, user_ids
        )

    async def find_by_pair(
        self,
        uow: IUnitOfWork,
        container_type: ContainerType,
        container_id: UUID,
        user_id: UUID,
    ) -> Invitation | None:
        """Most recent invitation for the pair, whatever its status."""
        invitations = await uow.invitations.get_for_pair(container_type, container_id, user_id)
        return invitations[0] if invitations else None

    async def settle_pair(
        self,
        uow: IUnitOfWork,
        container_type: ContainerType,
        container_id: UUID,
        user_id: UUID,
    ) -> list[Invitation]:
        """Close out a pair's invitations after the user lost access.

        Pending and accepted invitations both become ``removed``; the pair can
        be invited again afterwards. Returns the invitations that changed.
        """
        return [
            await uow.invitations.update_status(invitation.id, InvitationStatus.REMOVED)
            for invitation in await uow.invitations.get_for_pair(
                container_type, container_id, user_id
            )
            if invitation.status in SETTLED_ON_REMOVAL
        ]

    async def cancel_for_container(
        self,
        uow: IUnitOfWork,
        container_type: ContainerType,
        container_id: UUID,
    ) -> int:
        """Cancel every pending invitation of a container that is going away."""
        return await uow.invitations.cancel_pending_for_container(  # type: ignore[no-any-return]
            container_type, container_id
        )
