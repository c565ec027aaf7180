"""SQLAlchemy implementation of Invitation repository."""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.invitation import Invitation, InvitationStatus
from domain.entities.membership import ContainerType, parse_role
from infrastructure.database.models import InvitationModel


class SQLAlchemyInvitationRepository:
    """SQLAlchemy implementation of IInvitationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation.

        Raises ``IntegrityError`` when a pending invitation already exists for
        the pair (partial unique index ``uq_invitations_pending_pair``).
        """
        model = self._to_model(invitation)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_by_id(self, id: UUID) -> Invitation | None:
        """Get an invitation by its primary key."""
        model = await self._session.get(InvitationModel, id)
        return self._to_entity(model) if model else None

    async def get_for_container(
        self, container_type: ContainerType, container_id: UUID
    ) -> list[Invitation]:
        """Get all invitations for a container, newest first."""
        stmt = (
            select(InvitationModel)
            .where(
                InvitationModel.container_type == container_type.value,
                InvitationModel.container_id == container_id,
            )
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_pair(
        self, container_type: ContainerType, container_id: UUID, user_id: UUID
    ) -> list[Invitation]:
        """Get all invitations for a (container, invited user) pair, newest first."""
        stmt = (
            select(InvitationModel)
            .where(
                InvitationModel.container_type == container_type.value,
                InvitationModel.container_id == container_id,
                InvitationModel.invited_user_id == user_id,
            )
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_pending_for_users(
        self, container_type: ContainerType, container_id: UUID, user_ids: list[UUID]
    ) -> list[Invitation]:
        """Get pending invitations of a container for any of ``user_ids``."""
        if not user_ids:
            return []
        stmt = select(InvitationModel).where(
            InvitationModel.container_type == container_type.value,
            InvitationModel.container_id == container_id,
            InvitationModel.invited_user_id.in_(user_ids),
            InvitationModel.status == InvitationStatus.PENDING.value,
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_pending_for_user(self, user_id: UUID) -> list[Invitation]:
        """Get all pending invitations addressed to a user."""
        stmt = (
            select(InvitationModel)
            .where(
                InvitationModel.invited_user_id == user_id,
                InvitationModel.status == InvitationStatus.PENDING.value,
            )
            .order_by(InvitationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def update_status(self, id: UUID, status: InvitationStatus) -> Invitation:
        """Update the status of an invitation."""
        model = await self._session.get(InvitationModel, id)

        if not model:
            raise ValueError(f"Invitation {id} not found")

        model.status = status.value
        if status != InvitationStatus.PENDING:
            model.responded_at = datetime.utcnow()

        await self._session.flush()
        return self._to_entity(model)

    async def delete_for_pair(
        self,
        container_type: ContainerType,
        container_id: UUID,
        user_id: UUID,
        statuses: Iterable[InvitationStatus],
    ) -> int:
        """Delete a pair's invitations in the given statuses. Returns the count."""
        stmt = delete(InvitationModel).where(
            InvitationModel.container_type == container_type.value,
            InvitationModel.container_id == container_id,
            InvitationModel.invited_user_id == user_id,
            InvitationModel.status.in_([s.value for s in statuses]),
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def cancel_pending_for_container(
        self, container_type: ContainerType, container_id: UUID
    ) -> int:
        """Mark every pending invitation of a container cancelled. Returns the count."""
        stmt = (
            update(InvitationModel)
            .where(
                InvitationModel.container_type == container_type.value,
                InvitationModel.container_id == container_id,
                InvitationModel.status == InvitationStatus.PENDING.value,
            )
            .values(
                status=InvitationStatus.CANCELLED.value,
                responded_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    def _to_entity(self, model: InvitationModel) -> Invitation:
        """Convert ORM model to domain entity."""
        return Invitation(
            id=model.id,
            container_type=ContainerType(model.container_type),
            container_id=model.container_id,
            invited_user_id=model.invited_user_id,
            invited_by_user_id=model.invited_by_user_id,
            role=parse_role(model.role),
            status=InvitationStatus(model.status),
            created_at=model.created_at,
            responded_at=model.responded_at,
        )

    def _to_model(self, entity: Invitation) -> InvitationModel:
        """Convert domain entity to ORM model."""
        return InvitationModel(
            id=entity.id,
            container_type=entity.container_type.value,
            container_id=entity.container_id,
            invited_user_id=entity.invited_user_id,
            invited_by_user_id=entity.invited_by_user_id,
            role=entity.role.label,
            status=entity.status.value,
            created_at=entity.created_at,
            responded_at=entity.responded_at,
        )
