"""Membership routes shared by workspaces and boards.

Both container types expose the same member, leave and invitation endpoints;
``build_membership_router`` mounts them under the container's prefix.
"""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import (
    InitializedUser,
    get_container_service,
    get_reconciliation_service,
)
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.invitation import (
    InvitationListResponse,
    InvitationResponse,
    InviteUsersRequest,
    InviteUsersResponse,
)
from api.v1.schemas.membership import MemberListResponse, MemberResponse, RemovalResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.membership import ContainerType, parse_role
from domain.services.container_service import ContainerService
from domain.services.reconciliation_service import ReconciliationService


def build_membership_router(container_type: ContainerType, prefix: str) -> APIRouter:
    """Member listing, removal, leave and invitation endpoints for one container type."""
    noun = container_type.value
    router = APIRouter(prefix=f"{prefix}/{{container_id}}", tags=[f"{noun}-members"])
    not_found: dict[int | str, dict[str, Any]] = {
        404: {"model": ErrorResponse, "description": f"{noun.capitalize()} not found"}
    }

    def limited(limit: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        # slowapi keys limits by function name; keep workspace and board buckets apart
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            func.__name__ = f"{func.__name__}_{noun}"
            return limiter.limit(limit)(func)  # type: ignore[no-any-return]

        return decorator

    @router.get(
        "/members",
        response_model=MemberListResponse,
        summary=f"List {noun} members",
        responses={403: {"model": ErrorResponse, "description": "Not a member"}, **not_found},
    )
    @limited(READ_LIMIT)
    async def list_members(
        request: Request,
        container_id: UUID,
        user: InitializedUser,
        service: ContainerService = Depends(get_container_service),
    ) -> MemberListResponse:
        """Owner first, then members with their profile data. Requires membership."""
        members = await service.get_members(container_type, container_id, user.id)
        data = [MemberResponse.from_view(m) for m in members]
        return MemberListResponse(data=data, meta={"total": len(data)})

    @router.delete(
        "/members/{user_id}",
        response_model=RemovalResponse,
        summary=f"Remove a {noun} member",
        responses={
            400: {"model": ErrorResponse, "description": "The owner cannot be removed"},
            403: {"model": ErrorResponse, "description": "Insufficient permissions"},
            **not_found,
        },
    )
    @limited(WRITE_LIMIT)
    async def remove_member(
        request: Request,
        container_id: UUID,
        user_id: UUID,
        user: InitializedUser,
        service: ReconciliationService = Depends(get_reconciliation_service),
    ) -> RemovalResponse:
        """Remove a member. Workspace removals also remove the user from its boards."""
        result = await service.remove_member(container_type, container_id, user.id, user_id)
        return RemovalResponse.from_result(result)

    @router.post(
        "/leave",
        response_model=RemovalResponse,
        summary=f"Leave a {noun}",
        responses={
            403: {"model": ErrorResponse, "description": "Owner or not a member"},
            **not_found,
        },
    )
    @limited(WRITE_LIMIT)
    async def leave(
        request: Request,
        container_id: UUID,
        user: InitializedUser,
        service: ReconciliationService = Depends(get_reconciliation_service),
    ) -> RemovalResponse:
        """Leave as a non-owner member."""
        result = await service.leave_container(container_type, container_id, user.id)
        return RemovalResponse.from_result(result)

    @router.post(
        "/invitations",
        response_model=InviteUsersResponse,
        summary=f"Invite users to a {noun}",
        responses={
            400: {"model": ErrorResponse, "description": "Too many users in one request"},
            403: {"model": ErrorResponse, "description": "Insufficient permissions"},
            **not_found,
        },
    )
    @limited(WRITE_LIMIT)
    async def invite_users(
        request: Request,
        container_id: UUID,
        body: InviteUsersRequest,
        user: InitializedUser,
        service: ReconciliationService = Depends(get_reconciliation_service),
    ) -> InviteUsersResponse:
        """Invite users. Each user gets an outcome; rejections do not fail the request."""
        result = await service.invite_users(
            container_type,
            container_id,
            requester_id=user.id,
            candidate_ids=body.user_ids,
            role=parse_role(body.role),
        )
        return InviteUsersResponse.from_result(result)

    @router.get(
        "/invitations",
        response_model=InvitationListResponse,
        summary=f"List {noun} invitations",
        responses={403: {"model": ErrorResponse, "description": "Not a member"}, **not_found},
    )
    @limited(READ_LIMIT)
    async def list_invitations(
        request: Request,
        container_id: UUID,
        user: InitializedUser,
        service: ReconciliationService = Depends(get_reconciliation_service),
    ) -> InvitationListResponse:
        """All invitations of the container, newest first. Requires membership."""
        invitations = await service.list_container_invitations(
            container_type, container_id, user.id
        )
        data = [InvitationResponse.from_entity(inv) for inv in invitations]
        return InvitationListResponse(data=data, meta={"total": len(data)})

    return router
