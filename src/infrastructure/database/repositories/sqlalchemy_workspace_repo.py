"""SQLAlchemy implementation of Workspace repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Text, cast, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.membership import MemberEntry
from domain.entities.workspace import Workspace
from infrastructure.database.models import BoardModel, WorkspaceModel


class SQLAlchemyWorkspaceRepository:
    """SQLAlchemy implementation of IWorkspaceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Workspace | None:
        """Get a workspace by ID."""
        model = await self._session.get(WorkspaceModel, id)
        return self._to_entity(model) if model else None

    async def get_for_update(self, id: UUID) -> Workspace | None:
        """Re-read a workspace and lock its row until the transaction ends."""
        stmt = (
            select(WorkspaceModel)
            .where(WorkspaceModel.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all_for_user(self, user_id: UUID) -> list[Workspace]:
        """Get all workspaces a user owns or is a member of.

        The JSON text match is only a prefilter; membership is confirmed on
        the decoded entries.
        """
        stmt = (
            select(WorkspaceModel)
            .where(
                or_(
                    WorkspaceModel.owner_id == user_id,
                    cast(WorkspaceModel.members, Text).contains(str(user_id)),
                )
            )
            .order_by(WorkspaceModel.created_at)
        )
        result = await self._session.execute(stmt)
        workspaces = [self._to_entity(model) for model in result.scalars()]
        return [
            ws
            for ws in workspaces
            if ws.owner_id == user_id or any(m.user_id == user_id for m in ws.members)
        ]

    async def create(self, workspace: Workspace) -> Workspace:
        """Create a new workspace."""
        model = self._to_model(workspace)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update_members(self, id: UUID, members: list[MemberEntry]) -> Workspace:
        """Replace the embedded members list of a workspace."""
        model = await self._session.get(WorkspaceModel, id)

        if not model:
            raise ValueError(f"Workspace {id} not found")

        model.members = [entry.to_dict() for entry in members]
        model.updated_at = datetime.utcnow()

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a workspace. Its boards stay, detached from the workspace."""
        model = await self._session.get(WorkspaceModel, id)
        if not model:
            return False

        # Mirrors ON DELETE SET NULL for backends that do not enforce it
        await self._session.execute(
            update(BoardModel)
            .where(BoardModel.workspace_id == id)
            .values(workspace_id=None, updated_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self._session.delete(model)
        await self._session.flush()
        return True

    def _to_entity(self, model: WorkspaceModel) -> Workspace:
        """Convert ORM model to domain entity."""
        return Workspace(
            id=model.id,
            name=model.name,
            description=model.description,
            owner_id=model.owner_id,
            members=[MemberEntry.from_dict(entry) for entry in model.members or []],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Workspace) -> WorkspaceModel:
        """Convert domain entity to ORM model."""
        return WorkspaceModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            owner_id=entity.owner_id,
            members=[entry.to_dict() for entry in entity.members],
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
