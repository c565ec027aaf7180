"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from pathlib import Path
from typing import Any
from uuid import uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.profile import Profile
from domain.services.container_service import ContainerService
from domain.services.directory_service import DirectoryService
from domain.services.reconciliation_service import ReconciliationService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()

UowFactory = Callable[[], SQLAlchemyUnitOfWork]


@pytest.fixture(autouse=True)
def _reset_profile_sync_cache() -> Generator[None, None, None]:
    """Each test starts with an empty database, so forget previously synced users."""
    DirectoryService.clear_synced_cache()
    yield
    DirectoryService.clear_synced_cache()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test.

    StaticPool keeps the single connection alive, so every session of the
    test sees the same in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(session_factory: async_sessionmaker[AsyncSession]) -> UowFactory:
    """Unit of Work factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def make_profile(uow_factory: UowFactory) -> Callable[..., Awaitable[Profile]]:
    """Insert a profile directly into the test database."""

    async def _make(username: str, email: str | None = None, **kwargs: Any) -> Profile:
        async with uow_factory() as uow:
            profile = await uow.profiles.upsert(Profile(username=username, email=email, **kwargs))
            await uow.commit()
            return profile

    return _make


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="testuser",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def headers_for(auth_provider: JWTAuthProvider) -> Callable[[TokenUser], dict[str, str]]:
    """Build authorization headers for any user."""

    def _headers(user: TokenUser) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(user)}"}

    return _headers


@pytest.fixture
def auth_headers(
    headers_for: Callable[[TokenUser], dict[str, str]], test_user: TokenUser
) -> dict[str, str]:
    """Create authorization headers."""
    return headers_for(test_user)


@pytest.fixture
def app(
    uow_factory: UowFactory,
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> Generator[FastAPI, None, None]:
    """
    Application wired to the test database and the test JWT secret.

    Identity comes from real HS256 tokens, so several users can talk to the
    same app by sending different Authorization headers.
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import (
        get_container_service,
        get_directory_service,
        get_reconciliation_service,
    )
    from infrastructure.database.session import get_async_session
    from main import create_app

    directory = DirectoryService(uow_factory)
    reconciliation = ReconciliationService(uow_factory, batch_limit=50)
    containers = ContainerService(uow_factory, reconciliation_service=reconciliation)

    def override_get_auth_provider() -> JWTAuthProvider:
        return auth_provider

    def override_get_directory_service() -> DirectoryService:
        return directory

    def override_get_reconciliation_service() -> ReconciliationService:
        return reconciliation

    def override_get_container_service() -> ContainerService:
        return containers

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app = create_app()
    app.dependency_overrides[get_auth_provider] = override_get_auth_provider
    app.dependency_overrides[get_directory_service] = override_get_directory_service
    app.dependency_overrides[get_reconciliation_service] = override_get_reconciliation_service
    app.dependency_overrides[get_container_service] = override_get_container_service
    app.dependency_overrides[get_async_session] = override_get_async_session

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def sign_in(
    client: AsyncClient, headers_for: Callable[[TokenUser], dict[str, str]]
) -> Callable[[str], Awaitable[tuple[TokenUser, dict[str, str]]]]:
    """Create a user, call the API once so their profile exists, return their headers."""

    async def _sign_in(name: str) -> tuple[TokenUser, dict[str, str]]:
        user = TokenUser(id=uuid4(), email=f"{name}@example.com", display_name=name)
        headers = headers_for(user)
        response = await client.get("/api/v1/users/me", headers=headers)
        assert response.status_code == 200
        return user, headers

    return _sign_in


@pytest.fixture
async def authenticated_client(
    app: FastAPI, auth_headers: dict[str, str]
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client that sends the test user's bearer token."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c
