"""Container service: creating and reading workspaces and boards."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import (
    AppException,
    InsufficientPermissionsError,
    NotAMemberError,
    NotWorkspaceMemberError,
)
from domain.entities.board import Board
from domain.entities.membership import ContainerRole, ContainerType
from domain.entities.profile import Profile
from domain.entities.reconciliation import CandidateOutcome, InviteOutcome, InviteResult
from domain.entities.workspace import Workspace
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.invitation_ledger import InvitationLedger
from domain.services.membership_store import Container, MembershipStore, load_container
from domain.services.reconciliation_service import ReconciliationService

logger = structlog.get_logger()


@dataclass
class MemberView:
    """A container member joined with profile data for listings."""

    user_id: UUID
    role: ContainerRole
    added_at: datetime | None
    profile: Profile | None


class ContainerService:
    """Service layer for workspace and board business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        reconciliation_service: ReconciliationService,
        membership_store: MembershipStore | None = None,
        ledger: InvitationLedger | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._reconciliation = reconciliation_service
        self._members = membership_store or MembershipStore()
        self._ledger = ledger or InvitationLedger()

    async def create_workspace(
        self,
        owner_id: UUID,
        name: str,
        description: str | None = None,
    ) -> Workspace:
        """Create a workspace owned by ``owner_id`` with an empty members list."""
        async with self._uow_factory() as uow:
            created = await uow.workspaces.create(
                Workspace(name=name, owner_id=owner_id, description=description)
            )
            await uow.commit()

        logger.info("workspace_created", workspace_id=str(created.id), owner_id=str(owner_id))
        return created  # type: ignore[no-any-return]

    async def create_board(
        self,
        owner_id: UUID,
        title: str,
        workspace_id: UUID | None = None,
        background_image: str | None = None,
        invitee_ids: Sequence[UUID] = (),
        role: ContainerRole = ContainerRole.MEMBER,
    ) -> tuple[Board, InviteResult | None]:
        """Create a board and send its initial invitations.

        The board is committed before any invitation goes out. Invitation
        problems never fail the creation; they come back in the result.

        Raises:
            WorkspaceNotFoundError: If ``workspace_id`` does not exist.
            NotWorkspaceMemberError: If the owner does not belong to the workspace.
        """
        async with self._uow_factory() as uow:
            if workspace_id is not None:
                workspace = await load_container(uow, ContainerType.WORKSPACE, workspace_id)
                if not self._members.is_member(workspace, owner_id):
                    raise NotWorkspaceMemberError(str(owner_id), str(workspace_id))

            board = await uow.boards.create(
                Board(
                    title=title,
                    owner_id=owner_id,
                    workspace_id=workspace_id,
                    background_image=background_image,
                )
            )
            await uow.commit()

        logger.info(
            "board_created",
            board_id=str(board.id),
            owner_id=str(owner_id),
            workspace_id=str(workspace_id) if workspace_id else None,
        )

        if not invitee_ids:
            return board, None

        try:
            invites = await self._reconciliation.invite_users(
                ContainerType.BOARD, board.id, owner_id, invitee_ids, role
            )
        except (AppException, SQLAlchemyError) as e:
            logger.warning("board_initial_invites_failed", board_id=str(board.id), error=str(e))
            invites = InviteResult(
                container_type=ContainerType.BOARD,
                container_id=board.id,
                outcomes=[
                    CandidateOutcome(user_id, InviteOutcome.ERROR, str(e))
                    for user_id in dict.fromkeys(invitee_ids)
                ],
            )
        return board, invites

    async def delete_workspace(self, workspace_id: UUID, user_id: UUID) -> None:
        """Delete a workspace. Requires the owner.

        Pending workspace invitations are cancelled in the same transaction.
        Boards inside the workspace are kept and become personal boards.
        """
        await self._delete(ContainerType.WORKSPACE, workspace_id, user_id)

    async def delete_board(self, board_id: UUID, user_id: UUID) -> None:
        """Delete a board and cancel its pending invitations. Requires the owner."""
        await self._delete(ContainerType.BOARD, board_id, user_id)

    async def _delete(
        self, container_type: ContainerType, container_id: UUID, user_id: UUID
    ) -> None:
        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id, for_update=True)
            if not self._members.is_member(container, user_id):
                raise NotAMemberError(container_type.value, str(container_id))
            if container.owner_id != user_id:
                raise InsufficientPermissionsError(required_role=ContainerRole.OWNER.label)

            cancelled = await self._ledger.cancel_for_container(uow, container_type, container_id)
            if container_type == ContainerType.WORKSPACE:
                await uow.workspaces.delete(container_id)
            else:
                await uow.boards.delete(container_id)
            await uow.commit()

        logger.info(
            "container_deleted",
            container_type=container_type.value,
            container_id=str(container_id),
            deleted_by=str(user_id),
            cancelled_invitations=cancelled,
        )

    async def get_workspace(self, workspace_id: UUID, user_id: UUID) -> Workspace:
        """Get a workspace by ID, verifying user membership."""
        return await self._get_visible(ContainerType.WORKSPACE, workspace_id, user_id)  # type: ignore[return-value]

    async def get_board(self, board_id: UUID, user_id: UUID) -> Board:
        """Get a board by ID, verifying user membership."""
        return await self._get_visible(ContainerType.BOARD, board_id, user_id)  # type: ignore[return-value]

    async def list_workspaces_for_user(self, user_id: UUID) -> list[Workspace]:
        """Get all workspaces a user owns or is a member of."""
        async with self._uow_factory() as uow:
            return await uow.workspaces.get_all_for_user(user_id)  # type: ignore[no-any-return]

    async def list_boards_for_user(self, user_id: UUID) -> list[Board]:
        """Get all boards a user owns or is a member of."""
        async with self._uow_factory() as uow:
            return await uow.boards.get_all_for_user(user_id)  # type: ignore[no-any-return]

    async def list_workspace_boards(self, workspace_id: UUID, user_id: UUID) -> list[Board]:
        """Boards of a workspace the user can see.

        Workspace members see every board the workspace contains that they
        own or were added to.
        """
        async with self._uow_factory() as uow:
            workspace = await load_container(uow, ContainerType.WORKSPACE, workspace_id)
            if not self._members.is_member(workspace, user_id):
                raise NotAMemberError(ContainerType.WORKSPACE.value, str(workspace_id))

            boards = await uow.boards.get_for_workspace(workspace_id)
            return [board for board in boards if self._members.is_member(board, user_id)]

    async def get_members(
        self,
        container_type: ContainerType,
        container_id: UUID,
        user_id: UUID,
    ) -> list[MemberView]:
        """Owner first, then member entries in the order they were added."""
        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id)
            if not self._members.is_member(container, user_id):
                raise NotAMemberError(container_type.value, str(container_id))

            user_ids = [container.owner_id, *(entry.user_id for entry in container.members)]
            profiles = {p.id: p for p in await uow.profiles.get_many(user_ids)}

        views = [
            MemberView(
                user_id=container.owner_id,
                role=ContainerRole.OWNER,
                added_at=container.created_at,
                profile=profiles.get(container.owner_id),
            )
        ]
        views.extend(
            MemberView(
                user_id=entry.user_id,
                role=entry.role,
                added_at=entry.added_at,
                profile=profiles.get(entry.user_id),
            )
            for entry in container.members
        )
        return views

    async def _get_visible(
        self, container_type: ContainerType, container_id: UUID, user_id: UUID
    ) -> Container:
        async with self._uow_factory() as uow:
            container = await load_container(uow, container_type, container_id)
            if not self._members.is_member(container, user_id):
                raise NotAMemberError(container_type.value, str(container_id))
            return container
