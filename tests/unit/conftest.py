"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.board import Board
from domain.entities.membership import MemberEntry
from domain.entities.workspace import Workspace


class FakeUnitOfWork:
    """Fake Unit of Work with the four repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.workspaces = AsyncMock()
        self.boards = AsyncMock()
        self.invitations = AsyncMock()
        self.commits = 0
        self.rolled_back = False
        # Locked reads see whatever the plain read is configured to return
        for repo in (self.workspaces, self.boards):
            repo.get_for_update.side_effect = _read_through(repo)

    @property
    def committed(self) -> bool:
        return self.commits > 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def _read_through(repo: AsyncMock) -> Any:
    async def get_for_update(id: UUID) -> Any:
        return await repo.get(id)

    return get_for_update


def echo_members(containers: dict[UUID, Any]) -> Any:
    """side_effect for ``update_members`` that applies the write to ``containers``."""

    async def update_members(container_id: UUID, members: list[MemberEntry]) -> Any:
        container = containers[container_id]
        container.members = list(members)
        return container

    return update_members


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def owner_id() -> UUID:
    """The container owner."""
    return uuid4()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID (distinct from owner_id)."""
    return uuid4()


@pytest.fixture
def workspace(owner_id: UUID) -> Workspace:
    return Workspace(name="Team", owner_id=owner_id)


@pytest.fixture
def board(owner_id: UUID) -> Board:
    return Board(title="Roadmap", owner_id=owner_id)
