"""SQLAlchemy implementation of Board repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Text, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.board import Board
from domain.entities.membership import MemberEntry
from infrastructure.database.models import BoardModel


class SQLAlchemyBoardRepository:
    """SQLAlchemy implementation of IBoardRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Board | None:
        """Get a board by ID."""
        model = await self._session.get(BoardModel, id)
        return self._to_entity(model) if model else None

    async def get_for_update(self, id: UUID) -> Board | None:
        """Re-read a board and lock its row until the transaction ends."""
        stmt = (
            select(BoardModel)
            .where(BoardModel.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_workspace(self, workspace_id: UUID) -> list[Board]:
        """Get all boards that belong to a workspace."""
        stmt = (
            select(BoardModel)
            .where(BoardModel.workspace_id == workspace_id)
            .order_by(BoardModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_all_for_user(self, user_id: UUID) -> list[Board]:
        """Get all boards a user owns or is a member of."""
        stmt = (
            select(BoardModel)
            .where(
                or_(
                    BoardModel.owner_id == user_id,
                    cast(BoardModel.members, Text).contains(str(user_id)),
                )
            )
            .order_by(BoardModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        boards = [self._to_entity(model) for model in result.scalars()]
        return [
            board
            for board in boards
            if board.owner_id == user_id or any(m.user_id == user_id for m in board.members)
        ]

    async def create(self, board: Board) -> Board:
        """Create a new board."""
        model = self._to_model(board)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update_members(self, id: UUID, members: list[MemberEntry]) -> Board:
        """Replace the embedded members list of a board."""
        model = await self._session.get(BoardModel, id)

        if not model:
            raise ValueError(f"Board {id} not found")

        model.members = [entry.to_dict() for entry in members]
        model.updated_at = datetime.utcnow()

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a board."""
        model = await self._session.get(BoardModel, id)
        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    def _to_entity(self, model: BoardModel) -> Board:
        """Convert ORM model to domain entity."""
        return Board(
            id=model.id,
            title=model.title,
            owner_id=model.owner_id,
            workspace_id=model.workspace_id,
            background_image=model.background_image,
            members=[MemberEntry.from_dict(entry) for entry in model.members or []],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Board) -> BoardModel:
        """Convert domain entity to ORM model."""
        return BoardModel(
            id=entity.id,
            title=entity.title,
            owner_id=entity.owner_id,
            workspace_id=entity.workspace_id,
            background_image=entity.background_image,
            members=[entry.to_dict() for entry in entity.members],
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
