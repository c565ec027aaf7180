"""SQLAlchemy implementation of Profile repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        model = await self._session.get(ProfileModel, id)
        return self._to_entity(model) if model else None

    async def get_many(self, ids: list[UUID]) -> list[Profile]:
        """Get all profiles whose ID is in ``ids``."""
        if not ids:
            return []
        stmt = select(ProfileModel).where(ProfileModel.id.in_(ids))
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def search(
        self, query: str, exclude_user_id: UUID | None, limit: int
    ) -> list[Profile]:
        """Case-insensitive substring search on username or email.

        LIKE wildcards in ``query`` are escaped. Profiles without an email
        only match on username.
        """
        condition = or_(
            ProfileModel.username.icontains(query, autoescape=True),
            and_(
                ProfileModel.email.is_not(None),
                ProfileModel.email.icontains(query, autoescape=True),
            ),
        )
        stmt = select(ProfileModel).where(condition)
        if exclude_user_id is not None:
            stmt = stmt.where(ProfileModel.id != exclude_user_id)
        stmt = stmt.order_by(ProfileModel.username).limit(limit)

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def upsert(self, profile: Profile) -> Profile:
        """Insert a profile or update username/email of an existing one."""
        model = await self._session.get(ProfileModel, profile.id)
        if model is None:
            model = self._to_model(profile)
            self._session.add(model)
        else:
            model.username = profile.username
            if profile.email:
                model.email = profile.email
            model.updated_at = datetime.utcnow()

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            username=model.username,
            email=model.email,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            username=entity.username,
            email=entity.email,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
