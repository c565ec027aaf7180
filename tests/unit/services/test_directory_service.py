"""Unit tests for DirectoryService."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from core.exceptions import StoreUnavailableError
from domain.entities.profile import Profile
from domain.services.directory_service import DirectoryService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def directory(uow: FakeUnitOfWork) -> DirectoryService:
    return DirectoryService(lambda: uow, result_limit=3)  # type: ignore[arg-type, return-value]


async def _echo(profile: Profile) -> Profile:
    return profile


class TestSearch:
    @pytest.mark.asyncio
    async def test_passes_trimmed_term_exclusion_and_limit(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        me = uuid4()
        bob = Profile(username="bob", email="bob@example.com")
        uow.profiles.search.return_value = [bob]

        result = await directory.search("  bo ", exclude_user_id=me)

        assert result.users == [bob]
        assert not result.failed
        uow.profiles.search.assert_awaited_once_with("bo", me, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query_skips_store(
        self, directory: DirectoryService, uow: FakeUnitOfWork, query: str
    ) -> None:
        result = await directory.search(query)

        assert result.users == []
        assert result.error is None
        uow.profiles.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_unavailable_is_reported_not_raised(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.search.side_effect = StoreUnavailableError()

        result = await directory.search("alice")

        assert result.failed
        assert result.users == []
        assert result.error == "User search is temporarily unavailable"

    @pytest.mark.asyncio
    async def test_database_error_is_reported_not_raised(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.search.side_effect = OperationalError("SELECT", {}, Exception("down"))

        result = await directory.search("alice")

        assert result.failed


class TestIsSelfMatch:
    def test_matches_username_case_insensitively(self) -> None:
        me = Profile(username="Alice", email="a.smith@example.com")

        assert DirectoryService.is_self_match(me, "ali")

    def test_matches_email(self) -> None:
        me = Profile(username="Alice", email="a.smith@example.com")

        assert DirectoryService.is_self_match(me, "SMITH")

    def test_no_match(self) -> None:
        me = Profile(username="Alice", email=None)

        assert not DirectoryService.is_self_match(me, "bob")
        assert not DirectoryService.is_self_match(me, "  ")


class TestProfileSync:
    @pytest.mark.asyncio
    async def test_username_from_display_name(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.upsert.side_effect = _echo
        user_id = uuid4()

        profile = await directory.sync_profile(user_id, "alice@example.com", " Alice ")

        assert profile.id == user_id
        assert profile.username == "Alice"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_username_falls_back_to_email_local_part(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.upsert.side_effect = _echo

        profile = await directory.sync_profile(uuid4(), "carol@example.com")

        assert profile.username == "carol"

    @pytest.mark.asyncio
    async def test_username_falls_back_to_id_prefix(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.upsert.side_effect = _echo
        user_id = uuid4()

        profile = await directory.sync_profile(user_id, None)

        assert profile.username == str(user_id)[:8]

    @pytest.mark.asyncio
    async def test_ensure_profile_syncs_once(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.upsert.side_effect = _echo
        user_id = uuid4()

        await directory.ensure_profile(user_id, "dave@example.com")
        await directory.ensure_profile(user_id, "dave@example.com")

        assert uow.profiles.upsert.await_count == 1

    @pytest.mark.asyncio
    async def test_clear_synced_cache_forces_resync(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        uow.profiles.upsert.side_effect = _echo
        user_id = uuid4()

        await directory.ensure_profile(user_id, None)
        DirectoryService.clear_synced_cache()
        await directory.ensure_profile(user_id, None)

        assert uow.profiles.upsert.await_count == 2


class TestGetProfiles:
    @pytest.mark.asyncio
    async def test_keyed_by_id_and_deduplicated(
        self, directory: DirectoryService, uow: FakeUnitOfWork
    ) -> None:
        alice = Profile(username="alice")
        uow.profiles.get_many.return_value = [alice]

        profiles = await directory.get_profiles([alice.id, alice.id])

        assert profiles == {alice.id: alice}
        uow.profiles.get_many.assert_awaited_once_with([alice.id])

    @pytest.mark.asyncio
    async def test_empty_input(self, directory: DirectoryService, uow: FakeUnitOfWork) -> None:
        assert await directory.get_profiles([]) == {}
        uow.profiles.get_many.assert_not_called()
