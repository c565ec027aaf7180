"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by ID."""
        ...

    async def get_many(self, ids: list[UUID]) -> list[Profile]:
        """Get all profiles whose ID is in ``ids``."""
        ...

    async def search(
        self, query: str, exclude_user_id: UUID | None, limit: int
    ) -> list[Profile]:
        """Case-insensitive substring search on username or email."""
        ...

    async def upsert(self, profile: Profile) -> Profile:
        """Insert a profile or update username/email of an existing one."""
        ...
