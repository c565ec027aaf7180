"""Board repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.board import Board
from domain.entities.membership import MemberEntry


class IBoardRepository(Protocol):
    """Repository interface for Board entities."""

    async def get(self, id: UUID) -> Board | None:
        """Get a board by ID."""
        ...

    async def get_for_update(self, id: UUID) -> Board | None:
        """Re-read a board and lock it for the rest of the transaction."""
        ...

    async def get_for_workspace(self, workspace_id: UUID) -> list[Board]:
        """Get all boards that belong to a workspace."""
        ...

    async def get_all_for_user(self, user_id: UUID) -> list[Board]:
        """Get all boards a user owns or is a member of."""
        ...

    async def create(self, board: Board) -> Board:
        """Create a new board."""
        ...

    async def update_members(self, id: UUID, members: list[MemberEntry]) -> Board:
        """Replace the embedded members list of a board."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a board. Returns False if it did not exist."""
        ...
