"""Integration tests for the member, leave and invite endpoints of workspaces and boards."""

from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

from infrastructure.auth.provider import TokenUser

SignIn = Callable[[str], Awaitable[tuple[TokenUser, dict[str, str]]]]


async def _invite_and_accept(
    owner: AsyncClient,
    client: AsyncClient,
    path: str,
    invitee: TokenUser,
    invitee_headers: dict[str, str],
    role: str = "member",
) -> None:
    response = await owner.post(
        f"{path}/invitations", json={"user_ids": [str(invitee.id)], "role": role}
    )
    assert response.status_code == 200
    invitation_id = response.json()["data"][0]["invitation"]["id"]
    accepted = await client.post(
        f"/api/v1/invitations/{invitation_id}/accept", headers=invitee_headers
    )
    assert accepted.status_code == 200


@pytest.fixture
async def workspace_path(authenticated_client: AsyncClient) -> str:
    response = await authenticated_client.post("/api/v1/workspaces", json={"name": "Team"})
    return f"/api/v1/workspaces/{response.json()['data']['id']}"


class TestInviteEndpoint:
    @pytest.mark.asyncio
    async def test_reports_each_candidate(
        self, authenticated_client: AsyncClient, workspace_path: str, sign_in: SignIn
    ) -> None:
        bob, _ = await sign_in("bob")
        ghost = "22222222-2222-2222-2222-222222222222"

        response = await authenticated_client.post(
            f"{workspace_path}/invitations", json={"user_ids": [str(bob.id), ghost, str(bob.id)]}
        )

        assert response.status_code == 200
        body = response.json()
        assert [(o["user_id"], o["outcome"]) for o in body["data"]] == [
            (str(bob.id), "created"),
            (ghost, "not_found"),
        ]
        assert body["meta"]["created"] == 1

    @pytest.mark.asyncio
    async def test_empty_user_ids_rejected(
        self, authenticated_client: AsyncClient, workspace_path: str
    ) -> None:
        response = await authenticated_client.post(
            f"{workspace_path}/invitations", json={"user_ids": []}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_workspace_admin_cannot_invite(
        self,
        authenticated_client: AsyncClient,
        client: AsyncClient,
        workspace_path: str,
        sign_in: SignIn,
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        carol, _ = await sign_in("carol")
        await _invite_and_accept(
            authenticated_client, client, workspace_path, bob, bob_headers, "admin"
        )

        response = await client.post(
            f"{workspace_path}/invitations",
            json={"user_ids": [str(carol.id)]},
            headers=bob_headers,
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_container_invitations_listed_for_members(
        self,
        authenticated_client: AsyncClient,
        client: AsyncClient,
        workspace_path: str,
        sign_in: SignIn,
    ) -> None:
        bob, _ = await sign_in("bob")
        _, outsider = await sign_in("mallory")
        await authenticated_client.post(
            f"{workspace_path}/invitations", json={"user_ids": [str(bob.id)]}
        )

        listed = await authenticated_client.get(f"{workspace_path}/invitations")
        hidden = await client.get(f"{workspace_path}/invitations", headers=outsider)

        assert [inv["invited_user_id"] for inv in listed.json()["data"]] == [str(bob.id)]
        assert hidden.status_code == 403


class TestMembers:
    @pytest.mark.asyncio
    async def test_lists_owner_then_members_with_profiles(
        self,
        authenticated_client: AsyncClient,
        client: AsyncClient,
        workspace_path: str,
        sign_in: SignIn,
        test_user: TokenUser,
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        await _invite_and_accept(authenticated_client, client, workspace_path, bob, bob_headers)

        response = await client.get(f"{workspace_path}/members", headers=bob_headers)

        assert response.status_code == 200
        members = response.json()["data"]
        assert [(m["user_id"], m["role"], m["username"]) for m in members] == [
            (str(test_user.id), "owner", "testuser"),
            (str(bob.id), "member", "bob"),
        ]
        assert response.json()["meta"]["total"] == 2


class TestRemoveAndLeave:
    @pytest.mark.asyncio
    async def test_workspace_removal_cascades(
        self,
        authenticated_client: AsyncClient,
        client: AsyncClient,
        workspace_path: str,
        sign_in: SignIn,
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        await _invite_and_accept(authenticated_client, client, workspace_path, bob, bob_headers)
        workspace_id = workspace_path.rsplit("/", 1)[-1]
        board = await authenticated_client.post(
            "/api/v1/boards", json={"title": "Sprint", "workspace_id": workspace_id}
        )
        board_path = f"/api/v1/boards/{board.json()['data']['id']}"
        await _invite_and_accept(authenticated_client, client, board_path, bob, bob_headers)

        response = await authenticated_client.delete(f"{workspace_path}/members/{bob.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["removed"] is True
        assert data["cascaded_board_ids"] == [board.json()["data"]["id"]]
        assert data["warnings"] == []
        assert (await client.get(board_path, headers=bob_headers)).status_code == 403
        assert (await client.get(workspace_path, headers=bob_headers)).status_code == 403

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(
        self, authenticated_client: AsyncClient, workspace_path: str, test_user: TokenUser
    ) -> None:
        response = await authenticated_client.delete(f"{workspace_path}/members/{test_user.id}")

        assert response.status_code == 400
        assert response.json()["error_code"] == "CANNOT_REMOVE_OWNER"

    @pytest.mark.asyncio
    async def test_board_admin_removes_member_but_not_admin(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        board = await authenticated_client.post("/api/v1/boards", json={"title": "Plan"})
        board_path = f"/api/v1/boards/{board.json()['data']['id']}"
        bob, bob_headers = await sign_in("bob")
        carol, carol_headers = await sign_in("carol")
        dave, dave_headers = await sign_in("dave")
        await _invite_and_accept(
            authenticated_client, client, board_path, bob, bob_headers, "admin"
        )
        await _invite_and_accept(
            authenticated_client, client, board_path, carol, carol_headers, "admin"
        )
        await _invite_and_accept(authenticated_client, client, board_path, dave, dave_headers)

        removed = await client.delete(f"{board_path}/members/{dave.id}", headers=bob_headers)
        refused = await client.delete(f"{board_path}/members/{carol.id}", headers=bob_headers)

        assert removed.status_code == 200
        assert refused.status_code == 403

    @pytest.mark.asyncio
    async def test_member_leaves_and_owner_cannot(
        self,
        authenticated_client: AsyncClient,
        client: AsyncClient,
        workspace_path: str,
        sign_in: SignIn,
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        await _invite_and_accept(authenticated_client, client, workspace_path, bob, bob_headers)

        left = await client.post(f"{workspace_path}/leave", headers=bob_headers)
        owner_leave = await authenticated_client.post(f"{workspace_path}/leave")

        assert left.status_code == 200
        assert left.json()["data"]["removed"] is True
        assert owner_leave.status_code == 403
        assert owner_leave.json()["error_code"] == "FORBIDDEN"
