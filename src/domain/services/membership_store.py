"""Membership store: the embedded ``members`` list of boards and workspaces."""

from uuid import UUID

from core.exceptions import BoardNotFoundError, OwnerRemovalError, WorkspaceNotFoundError
from domain.entities.board import Board
from domain.entities.membership import ContainerRole, ContainerType, MemberEntry
from domain.entities.workspace import Workspace
from domain.repositories.unit_of_work import IUnitOfWork

Container = Board | Workspace


async def load_container(
    uow: IUnitOfWork,
    container_type: ContainerType,
    container_id: UUID,
    for_update: bool = False,
) -> Container:
    """Fetch a board or workspace, raising the matching not-found error.

    With ``for_update`` the row is re-read from the database and locked
    until the unit of work ends.
    """
    if container_type == ContainerType.WORKSPACE:
        if for_update:
            workspace = await uow.workspaces.get_for_update(container_id)
        else:
            workspace = await uow.workspaces.get(container_id)
        if not workspace:
            raise WorkspaceNotFoundError(str(container_id))
        return workspace  # type: ignore[no-any-return]

    if for_update:
        board = await uow.boards.get_for_update(container_id)
    else:
        board = await uow.boards.get(container_id)
    if not board:
        raise BoardNotFoundError(str(container_id))
    return board  # type: ignore[no-any-return]


class MembershipStore:
    """Reads and writes the members list that decides who has access.

    The owner is implicit: never stored as an entry, always a member.
    Writes run inside the caller's unit of work (caller manages commit).
    They lock and re-read the container first and apply the change to the
    stored list, never to the caller's copy, so two writers cannot erase
    each other's entries.
    """

    @staticmethod
    def is_member(container: Container, user_id: UUID) -> bool:
        """True if the user owns the container or has a member entry."""
        if container.owner_id == user_id:
            return True
        return any(entry.user_id == user_id for entry in container.members)

    @staticmethod
    def role_of(container: Container, user_id: UUID) -> ContainerRole | None:
        """The user's role in the container, OWNER for the owner, None for outsiders."""
        if container.owner_id == user_id:
            return ContainerRole.OWNER
        entry = MembershipStore.entry_for(container, user_id)
        return entry.role if entry else None

    @staticmethod
    def entry_for(container: Container, user_id: UUID) -> MemberEntry | None:
        """The user's stored member entry, if any. Always None for the owner."""
        return next((e for e in container.members if e.user_id == user_id), None)

    async def add_member(
        self,
        uow: IUnitOfWork,
        container: Container,
        user_id: UUID,
        role: ContainerRole = ContainerRole.MEMBER,
    ) -> Container:
        """Append a member entry. No-op if the user is already a member or the owner."""
        current = await load_container(uow, container.container_type, container.id, for_update=True)
        if self.is_member(current, user_id):
            return current

        if role == ContainerRole.OWNER:
            raise ValueError("owner is implicit and cannot be assigned to a member entry")

        members = [*current.members, MemberEntry(user_id=user_id, role=role)]
        return await self._save(uow, current, members)

    async def remove_member(
        self,
        uow: IUnitOfWork,
        container: Container,
        user_id: UUID,
    ) -> Container:
        """Remove the user's member entry. No-op if absent; the owner cannot be removed."""
        if container.owner_id == user_id:
            raise OwnerRemovalError(container.container_type.value, str(container.id))

        current = await load_container(uow, container.container_type, container.id, for_update=True)
        members = [entry for entry in current.members if entry.user_id != user_id]
        if len(members) == len(current.members):
            return current

        return await self._save(uow, current, members)

    @staticmethod
    async def _save(
        uow: IUnitOfWork, container: Container, members: list[MemberEntry]
    ) -> Container:
        # The owner is never persisted as an entry
        members = [entry for entry in members if entry.user_id != container.owner_id]
        if container.container_type == ContainerType.WORKSPACE:
            return await uow.workspaces.update_members(container.id, members)
        return await uow.boards.update_members(container.id, members)
