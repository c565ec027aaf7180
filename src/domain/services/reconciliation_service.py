"""Reconciliation service: keeps member lists and the invitation ledger in step."""

from collections.abc import Callable, Iterable
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import (
    AppException,
    DuplicatePendingError,
    ForbiddenError,
    InsufficientPermissionsError,
    InvitationAlreadyResolvedError,
    InvitationNotFoundError,
    InviteBatchTooLargeError,
    NotAMemberError,
)
from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.membership import (
    ContainerRole,
    ContainerType,
    MemberEntry,
    has_permission,
)
from domain.entities.reconciliation import (
    CandidateOutcome,
    InviteOutcome,
    InviteResult,
    RemovalResult,
    RemovalWarning,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.invitation_ledger import InvitationLedger
from domain.services.membership_store import Container, MembershipStore, load_container

logger = structlog.get_logger()

# Minimum role needed to invite into or remove from a container
MANAGE_ROLE = {
    ContainerType.WORKSPACE: ContainerRole.OWNER,
    ContainerType.BOARD: ContainerRole.ADMIN,
}


class ReconciliationService:
    """Orchestrates invite, accept, remove and leave across both stores.

    The members list is the live access truth; the ledger is the record of
    who was asked. Every operation here updates both so they never disagree.
    Removals from a workspace cascade to the boards inside it.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        membership_store: MembershipStore | None = None,
        ledger: InvitationLedger | None = None,
        batch_limit: int | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._members = membership_store or MembershipStore()
        self._ledger = ledger or InvitationLedger()
        self._batch_limit = batch_limit

    # --- Invite ---

    async def invite_users(
        self,
        container_type: ContainerType,
        container_id: UUID,
        requester_id: UUID,
        candidate_ids: Iterable[UUID],
        role: ContainerRole = ContainerRole.MEMBER,
    ) -> InviteResult:
        """Invite several users to a board or workspace.

        Each distinct candidate gets exactly one outcome, in request order.
        Validation failures are outcomes, not exceptions; only a missing
        container, an unauthorized requester or a store failure raise.

        Raises:
            WorkspaceNotFoundError / BoardNotFoundError: If the container is missing.
            InsufficientPermissionsError: If the requester may not invite here.
            StoreUnavailableError: If the database is unreachable.
        """
        if role == ContainerRole.OWNER:
            raise ValueError("invitations cannot grant the owner role")

        candidates = list(dict.fromkeys(candidate_ids))
        if self._batch_limit is not None and len(candidates) > self._batch_limit:
            raise InviteBatchTooLargeError(len(candidates), self._batch_limit)

        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id)
            self._require_manager(container, requester_id)

            # Board inside a workspace: only workspace members may be invited
            gate = None
            if container_type == ContainerType.BOARD and container.workspace_id:  # type: ignore[union-attr]
                gate = await uow.workspaces.get(container.workspace_id)  # type: ignore[union-attr]

        result = InviteResult(container_type=container_type, container_id=container_id)
        for user_id in candidates:
            if gate is not None and not self._members.is_member(gate, user_id):
                outcome = CandidateOutcome(
                    user_id=user_id,
                    outcome=InviteOutcome.NOT_WORKSPACE_MEMBER,
                    detail="User must join the workspace before joining its boards",
                )
            else:
                outcome = await self._invite_one(
                    container_type, container_id, requester_id, user_id, role
                )

            if outcome.succeeded:
                logger.info(
                    "invitation_created",
                    container_type=container_type.value,
                    container_id=str(container_id),
                    invited_user_id=str(user_id),
                    invited_by_user_id=str(requester_id),
                    invitation_id=str(outcome.invitation.id),  # type: ignore[union-attr]
                )
            else:
                logger.info(
                    "invitation_rejected",
                    container_type=container_type.value,
                    container_id=str(container_id),
                    invited_user_id=str(user_id),
                    outcome=outcome.outcome.value,
                )
            result.outcomes.append(outcome)

        return result

    async def _invite_one(
        self,
        container_type: ContainerType,
        container_id: UUID,
        requester_id: UUID,
        user_id: UUID,
        role: ContainerRole,
    ) -> CandidateOutcome:
        # One unit of work per candidate so a conflict never rolls back the others
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                return CandidateOutcome(user_id, InviteOutcome.NOT_FOUND, "User does not exist")

            if container_type == ContainerType.WORKSPACE:
                container = await uow.workspaces.get(container_id)
            else:
                container = await uow.boards.get(container_id)
            if not container:
                return CandidateOutcome(
                    user_id, InviteOutcome.ERROR, f"The {container_type.value} no longer exists"
                )

            if self._members.is_member(container, user_id):
                return CandidateOutcome(
                    user_id, InviteOutcome.ALREADY_MEMBER, "User is already a member"
                )

            try:
                invitation = await self._ledger.create(
                    uow, container_type, container_id, user_id, requester_id, role
                )
            except DuplicatePendingError:
                existing = await self._ledger.find_by_pair(uow, container_type, container_id, user_id)
                return CandidateOutcome(
                    user_id,
                    InviteOutcome.ALREADY_PENDING,
                    "User already has a pending invitation",
                    existing if existing and existing.is_pending else None,
                )

            await uow.commit()
            return CandidateOutcome(user_id, InviteOutcome.CREATED, "Invitation sent", invitation)

    # --- Respond ---

    async def accept_invitation(self, invitation_id: UUID, acting_user_id: UUID) -> MemberEntry:
        """Accept an invitation and add the invitee to the container.

        The ledger update and the membership write commit together.

        Raises:
            InvitationNotFoundError: If the invitation does not exist.
            ForbiddenError: If the acting user is not the invitee.
            InvitationAlreadyResolvedError: If the invitation is not pending.
            WorkspaceNotFoundError / BoardNotFoundError: If the container was
                deleted; the invitation is cancelled in that case.
        """
        async with self._uow_factory() as uow:
            invitation = await self._get_addressed_invitation(uow, invitation_id, acting_user_id)
            if not invitation.is_pending:
                raise InvitationAlreadyResolvedError(str(invitation_id), invitation.status.value)

            try:
                container = await load_container(
                    uow, invitation.container_type, invitation.container_id
                )
            except AppException:
                await self._ledger.transition(uow, invitation_id, InvitationStatus.CANCELLED)
                await uow.commit()
                raise

            await self._ledger.transition(uow, invitation_id, InvitationStatus.ACCEPTED)
            updated = await self._members.add_member(
                uow, container, acting_user_id, invitation.role
            )
            await uow.commit()

        logger.info(
            "invitation_accepted",
            invitation_id=str(invitation_id),
            container_type=invitation.container_type.value,
            container_id=str(invitation.container_id),
            user_id=str(acting_user_id),
        )
        entry = self._members.entry_for(updated, acting_user_id)
        return entry or MemberEntry(user_id=acting_user_id, role=invitation.role)

    async def decline_invitation(self, invitation_id: UUID, acting_user_id: UUID) -> Invitation:
        """Decline an invitation addressed to the acting user."""
        async with self._uow_factory() as uow:
            await self._get_addressed_invitation(uow, invitation_id, acting_user_id)
            declined = await self._ledger.transition(
                uow, invitation_id, InvitationStatus.DECLINED
            )
            await uow.commit()

        logger.info("invitation_declined", invitation_id=str(invitation_id))
        return declined

    async def cancel_invitation(self, invitation_id: UUID, requester_id: UUID) -> Invitation:
        """Withdraw a pending invitation. Allowed for the inviter and container managers."""
        async with self._uow_factory() as uow:
            invitation = await uow.invitations.get_by_id(invitation_id)
            if not invitation:
                raise InvitationNotFoundError(str(invitation_id))

            if invitation.invited_by_user_id != requester_id:
                container = await load_container(
                    uow, invitation.container_type, invitation.container_id
                )
                self._require_manager(container, requester_id)

            cancelled = await self._ledger.transition(
                uow, invitation_id, InvitationStatus.CANCELLED
            )
            await uow.commit()

        logger.info("invitation_cancelled", invitation_id=str(invitation_id))
        return cancelled

    async def _get_addressed_invitation(
        self, uow: IUnitOfWork, invitation_id: UUID, acting_user_id: UUID
    ) -> Invitation:
        invitation = await uow.invitations.get_by_id(invitation_id)
        if not invitation:
            raise InvitationNotFoundError(str(invitation_id))
        if invitation.invited_user_id != acting_user_id:
            raise ForbiddenError(
                "This invitation is addressed to another user",
                details={"invitation_id": str(invitation_id)},
            )
        return invitation  # type: ignore[no-any-return]

    # --- Remove / leave ---

    async def remove_member(
        self,
        container_type: ContainerType,
        container_id: UUID,
        requester_id: UUID,
        target_user_id: UUID,
    ) -> RemovalResult:
        """Remove a member from a board or workspace.

        Workspaces require the owner; boards accept the owner or an admin,
        but an admin cannot remove another admin. The membership change
        commits first. Ledger settlement and the board cascade run after
        it and report their failures as warnings.

        Raises:
            WorkspaceNotFoundError / BoardNotFoundError: If the container is missing.
            InsufficientPermissionsError: If the requester may not remove members.
            OwnerRemovalError: If the target is the owner.
        """
        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id)
            requester_role = self._require_manager(container, requester_id)

            target_role = self._members.role_of(container, target_user_id)
            if (
                target_user_id != requester_id
                and requester_role == ContainerRole.ADMIN
                and target_role == ContainerRole.ADMIN
            ):
                raise InsufficientPermissionsError(required_role=ContainerRole.OWNER.label)

            await self._members.remove_member(uow, container, target_user_id)
            await uow.commit()

        logger.info(
            "member_removed",
            container_type=container_type.value,
            container_id=str(container_id),
            user_id=str(target_user_id),
            removed_by=str(requester_id),
        )
        return await self._after_removal(
            container_type, container_id, target_user_id, removed=target_role is not None
        )

    async def leave_container(
        self,
        container_type: ContainerType,
        container_id: UUID,
        acting_user_id: UUID,
    ) -> RemovalResult:
        """The acting user leaves a board or workspace they belong to.

        Raises:
            WorkspaceNotFoundError / BoardNotFoundError: If the container is missing.
            ForbiddenError: If the user is the owner or not a member.
        """
        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id)

            if container.owner_id == acting_user_id:
                raise ForbiddenError(
                    f"The owner cannot leave this {container_type.value}",
                    details={"container_id": str(container_id)},
                )
            if not self._members.is_member(container, acting_user_id):
                raise ForbiddenError(
                    f"You are not a member of this {container_type.value}",
                    details={"container_id": str(container_id)},
                )

            await self._members.remove_member(uow, container, acting_user_id)
            await uow.commit()

        logger.info(
            "member_left",
            container_type=container_type.value,
            container_id=str(container_id),
            user_id=str(acting_user_id),
        )
        return await self._after_removal(container_type, container_id, acting_user_id, removed=True)

    async def _after_removal(
        self,
        container_type: ContainerType,
        container_id: UUID,
        user_id: UUID,
        removed: bool,
    ) -> RemovalResult:
        result = RemovalResult(
            container_type=container_type,
            container_id=container_id,
            user_id=user_id,
            removed=removed,
        )

        try:
            async with self._uow_factory() as uow:
                await self._ledger.settle_pair(uow, container_type, container_id, user_id)
                await uow.commit()
        except (AppException, SQLAlchemyError) as e:
            logger.warning(
                "invitation_settlement_failed",
                container_type=container_type.value,
                container_id=str(container_id),
                user_id=str(user_id),
                error=str(e),
            )
            result.warnings.append(
                RemovalWarning(container_type, container_id, f"Invitation not updated: {e}")
            )

        if container_type == ContainerType.WORKSPACE:
            await self._cascade_to_boards(container_id, user_id, result)

        return result

    async def _cascade_to_boards(
        self, workspace_id: UUID, user_id: UUID, result: RemovalResult
    ) -> None:
        try:
            async with self._uow_factory() as uow:
                boards = await uow.boards.get_for_workspace(workspace_id)
        except (AppException, SQLAlchemyError) as e:
            logger.warning(
                "board_cascade_failed",
                workspace_id=str(workspace_id),
                user_id=str(user_id),
                error=str(e),
            )
            result.warnings.append(
                RemovalWarning(
                    ContainerType.WORKSPACE, workspace_id, f"Could not list workspace boards: {e}"
                )
            )
            return

        for board in boards:
            if board.owner_id == user_id:
                result.warnings.append(
                    RemovalWarning(
                        ContainerType.BOARD, board.id, "User owns this board and keeps access"
                    )
                )
                continue

            try:
                async with self._uow_factory() as uow:
                    current = await uow.boards.get(board.id)
                    if current is None:
                        continue
                    await self._members.remove_member(uow, current, user_id)
                    await self._ledger.settle_pair(uow, ContainerType.BOARD, board.id, user_id)
                    await uow.commit()
            except (AppException, SQLAlchemyError) as e:
                logger.warning(
                    "board_cascade_failed",
                    workspace_id=str(workspace_id),
                    board_id=str(board.id),
                    user_id=str(user_id),
                    error=str(e),
                )
                result.warnings.append(RemovalWarning(ContainerType.BOARD, board.id, str(e)))
                continue

            result.cascaded_board_ids.append(board.id)

    # --- Queries ---

    async def list_pending_for_user(self, user_id: UUID) -> list[Invitation]:
        """Pending invitations addressed to the user, newest first."""
        async with self._uow_factory() as uow:
            return await uow.invitations.get_pending_for_user(user_id)  # type: ignore[no-any-return]

    async def list_container_invitations(
        self,
        container_type: ContainerType,
        container_id: UUID,
        requester_id: UUID,
    ) -> list[Invitation]:
        """Every invitation of a container. The requester must be a member."""
        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id)
            if not self._members.is_member(container, requester_id):
                raise NotAMemberError(container_type.value, str(container_id))
            return await uow.invitations.get_for_container(  # type: ignore[no-any-return]
                container_type, container_id
            )

    def _require_manager(self, container: Container, user_id: UUID) -> ContainerRole:
        """Return the user's role if it is enough to manage the container's members."""
        required = MANAGE_ROLE[container.container_type]
        role = self._members.role_of(container, user_id)
        if not has_permission(role, required):
            raise InsufficientPermissionsError(required_role=required.label)
        return role  # type: ignore[return-value]
