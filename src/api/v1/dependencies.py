"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Annotated, Callable

from fastapi import Depends

from api.dependencies.auth import get_current_user
from core.config import settings
from domain.services.container_service import ContainerService
from domain.services.directory_service import DirectoryService
from domain.services.reconciliation_service import ReconciliationService
from infrastructure.auth.provider import TokenUser
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_directory_service() -> DirectoryService:
    """Get Directory service instance."""
    return DirectoryService(get_uow_factory(), result_limit=settings.directory_search_limit)


@lru_cache
def get_reconciliation_service() -> ReconciliationService:
    """Get Reconciliation service instance."""
    return ReconciliationService(get_uow_factory(), batch_limit=settings.invite_batch_limit)


@lru_cache
def get_container_service() -> ContainerService:
    """Get Container service instance."""
    return ContainerService(
        get_uow_factory(),
        reconciliation_service=get_reconciliation_service(),
    )


async def get_initialized_user(
    user: Annotated[TokenUser, Depends(get_current_user)],
    directory: DirectoryService = Depends(get_directory_service),
) -> TokenUser:
    """
    Current user whose profile exists in the directory.

    A user who signed up with the identity provider becomes searchable and
    invitable the first time they call the API.
    """
    await directory.ensure_profile(user.id, user.email, user.display_name)
    return user


InitializedUser = Annotated[TokenUser, Depends(get_initialized_user)]
