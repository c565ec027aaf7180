"""Workspace repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.membership import MemberEntry
from domain.entities.workspace import Workspace


class IWorkspaceRepository(Protocol):
    """Repository interface for Workspace entities."""

    async def get(self, id: UUID) -> Workspace | None:
        """Get a workspace by ID."""
        ...

    async def get_for_update(self, id: UUID) -> Workspace | None:
        """Re-read a workspace and lock it for the rest of the transaction."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[Workspace]:
        """Get all workspaces a user owns or is a member of."""
        ...

    async def create(self, workspace: Workspace) -> Workspace:
        """Create a new workspace."""
        ...

    async def update_members(self, id: UUID, members: list[MemberEntry]) -> Workspace:
        """Replace the embedded members list of a workspace."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a workspace, detaching its boards. Returns False if it did not exist."""
        ...
