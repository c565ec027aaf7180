"""Directory service: user lookup for invitation candidates."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import StoreUnavailableError
from domain.entities.profile import Profile
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

DEFAULT_SEARCH_LIMIT = 10


@dataclass
class UserSearchResult:
    """Profiles matching a search. ``error`` is set when the lookup failed."""

    users: list[Profile] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class DirectoryService:
    """Read access to user profiles for search and member listings."""

    # User IDs whose profile was synced by this process. Skips the upsert on
    # every authenticated request once the profile is known to exist.
    _synced_users: ClassVar[set[UUID]] = set()

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        result_limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        self._uow_factory = uow_factory
        self._result_limit = result_limit

    @classmethod
    def clear_synced_cache(cls) -> None:
        """Clear the synced-users cache. Intended for testing."""
        cls._synced_users.clear()

    async def search(self, query: str, exclude_user_id: UUID | None = None) -> UserSearchResult:
        """Find users whose username or email contains ``query``.

        Case-insensitive substring match, at most ``result_limit`` users.
        A blank query returns no users without touching the store. Store
        failures are logged and reported through ``error``, never raised.
        """
        term = query.strip()
        if not term:
            return UserSearchResult()

        try:
            async with self._uow_factory() as uow:
                users = await uow.profiles.search(term, exclude_user_id, self._result_limit)
        except (StoreUnavailableError, SQLAlchemyError) as e:
            logger.warning(
                "directory_search_failed",
                query=term,
                error=str(e),
                error_type=type(e).__name__,
            )
            return UserSearchResult(error="User search is temporarily unavailable")

        return UserSearchResult(users=list(users))

    @staticmethod
    def is_self_match(current_user: Profile, query: str) -> bool:
        """True if ``query`` would match the current user's own profile.

        Lets callers explain an otherwise empty result ("you cannot invite
        yourself") since search always excludes the requester.
        """
        term = query.strip().lower()
        if not term:
            return False
        if term in current_user.username.lower():
            return True
        return bool(current_user.email) and term in current_user.email.lower()  # type: ignore[union-attr]

    async def sync_profile(
        self,
        user_id: UUID,
        email: str | None,
        display_name: str | None = None,
    ) -> Profile:
        """Create or refresh the caller's profile from identity token claims."""
        username = (display_name or "").strip()
        if not username and email:
            username = email.split("@", 1)[0]

        async with self._uow_factory() as uow:
            profile = await uow.profiles.upsert(
                Profile(id=user_id, username=username or str(user_id)[:8], email=email)
            )
            await uow.commit()

        self._synced_users.add(user_id)
        return profile  # type: ignore[no-any-return]

    async def ensure_profile(
        self,
        user_id: UUID,
        email: str | None,
        display_name: str | None = None,
    ) -> None:
        """Sync the profile once per process so the user is searchable and invitable."""
        if user_id in self._synced_users:
            return
        await self.sync_profile(user_id, email, display_name)
        logger.info("profile_synced", user_id=str(user_id))

    async def get_profile(self, user_id: UUID) -> Profile | None:
        """Get a single profile by ID."""
        async with self._uow_factory() as uow:
            return await uow.profiles.get(user_id)  # type: ignore[no-any-return]

    async def get_profiles(self, user_ids: list[UUID]) -> dict[UUID, Profile]:
        """Profiles keyed by ID. Unknown IDs are absent from the result."""
        if not user_ids:
            return {}
        async with self._uow_factory() as uow:
            profiles = await uow.profiles.get_many(list(dict.fromkeys(user_ids)))
        return {p.id: p for p in profiles}
