"""Integration tests for invitation endpoints."""

from collections.abc import Awaitable, Callable

import pytest
from httpx import AsyncClient

from infrastructure.auth.provider import TokenUser

SignIn = Callable[[str], Awaitable[tuple[TokenUser, dict[str, str]]]]


async def _board_with_invite(
    owner: AsyncClient, invitee: TokenUser, role: str = "member"
) -> tuple[str, str]:
    """Create a board inviting ``invitee``; return (board_id, invitation_id)."""
    response = await owner.post(
        "/api/v1/boards",
        json={"title": "Roadmap", "invitee_ids": [str(invitee.id)], "role": role},
    )
    assert response.status_code == 201
    body = response.json()
    return body["data"]["id"], body["invitations"]["data"][0]["invitation"]["id"]


class TestPending:
    @pytest.mark.asyncio
    async def test_invitee_sees_pending_invitation(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        board_id, invitation_id = await _board_with_invite(authenticated_client, bob)

        response = await client.get("/api/v1/invitations/pending", headers=bob_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [inv["id"] for inv in data] == [invitation_id]
        assert data[0]["container_type"] == "board"
        assert data[0]["container_id"] == board_id
        assert data[0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_inviter_has_no_pending_invitations(
        self, authenticated_client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, _ = await sign_in("bob")
        await _board_with_invite(authenticated_client, bob)

        response = await authenticated_client.get("/api/v1/invitations/pending")

        assert response.json()["data"] == []


class TestAccept:
    @pytest.mark.asyncio
    async def test_accept_joins_board(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        board_id, invitation_id = await _board_with_invite(authenticated_client, bob, "admin")

        response = await client.post(
            f"/api/v1/invitations/{invitation_id}/accept", headers=bob_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["user_id"] == str(bob.id)
        assert response.json()["data"]["role"] == "admin"
        board = await client.get(f"/api/v1/boards/{board_id}", headers=bob_headers)
        assert board.status_code == 200
        assert board.json()["data"]["member_count"] == 2

    @pytest.mark.asyncio
    async def test_accept_twice_conflicts(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        _, invitation_id = await _board_with_invite(authenticated_client, bob)
        await client.post(f"/api/v1/invitations/{invitation_id}/accept", headers=bob_headers)

        response = await client.post(
            f"/api/v1/invitations/{invitation_id}/accept", headers=bob_headers
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVITATION_ALREADY_RESOLVED"

    @pytest.mark.asyncio
    async def test_only_invitee_can_accept(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, _ = await sign_in("bob")
        _, carol_headers = await sign_in("carol")
        _, invitation_id = await _board_with_invite(authenticated_client, bob)

        response = await client.post(
            f"/api/v1/invitations/{invitation_id}/accept", headers=carol_headers
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_unknown_invitation(self, authenticated_client: AsyncClient) -> None:
        response = await authenticated_client.post(
            "/api/v1/invitations/00000000-0000-0000-0000-000000000000/accept"
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVITATION_NOT_FOUND"


class TestDeclineAndCancel:
    @pytest.mark.asyncio
    async def test_decline_then_reinvite(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        board_id, invitation_id = await _board_with_invite(authenticated_client, bob)

        declined = await client.post(
            f"/api/v1/invitations/{invitation_id}/decline", headers=bob_headers
        )
        reinvite = await authenticated_client.post(
            f"/api/v1/boards/{board_id}/invitations", json={"user_ids": [str(bob.id)]}
        )

        assert declined.status_code == 200
        assert declined.json()["data"]["status"] == "declined"
        assert declined.json()["data"]["responded_at"] is not None
        assert reinvite.json()["data"][0]["outcome"] == "created"

    @pytest.mark.asyncio
    async def test_inviter_cancels(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        _, invitation_id = await _board_with_invite(authenticated_client, bob)

        response = await authenticated_client.post(f"/api/v1/invitations/{invitation_id}/cancel")
        pending = await client.get("/api/v1/invitations/pending", headers=bob_headers)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "cancelled"
        assert pending.json()["data"] == []

    @pytest.mark.asyncio
    async def test_invitee_cannot_cancel(
        self, authenticated_client: AsyncClient, client: AsyncClient, sign_in: SignIn
    ) -> None:
        bob, bob_headers = await sign_in("bob")
        _, invitation_id = await _board_with_invite(authenticated_client, bob)

        response = await client.post(
            f"/api/v1/invitations/{invitation_id}/cancel", headers=bob_headers
        )

        assert response.status_code == 403
        assert response.json()["error_code"] == "INSUFFICIENT_PERMISSIONS"
