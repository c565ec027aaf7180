"""Invitation API routes addressed by invitation ID."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.v1.dependencies import InitializedUser, get_reconciliation_service
from api.v1.schemas.invitation import (
    InvitationDetailResponse,
    InvitationListResponse,
    InvitationResponse,
)
from api.v1.schemas.membership import AcceptInvitationResponse, MemberEntryResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.reconciliation_service import ReconciliationService

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get(
    "/pending",
    response_model=InvitationListResponse,
    summary="List my pending invitations",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_pending(
    request: Request,
    user: InitializedUser,
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> InvitationListResponse:
    """Pending board and workspace invitations addressed to the authenticated user."""
    invitations = await service.list_pending_for_user(user.id)
    data = [InvitationResponse.from_entity(inv) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/{invitation_id}/accept",
    response_model=AcceptInvitationResponse,
    summary="Accept an invitation",
    responses={
        200: {"description": "Invitation accepted, user added as member"},
        403: {"description": "Invitation addressed to another user"},
        404: {"description": "Invitation or its board/workspace not found"},
        409: {"description": "Invitation already resolved"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    invitation_id: UUID,
    user: InitializedUser,
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> AcceptInvitationResponse:
    """Accept an invitation. The user joins the board or workspace."""
    entry = await service.accept_invitation(invitation_id, user.id)
    return AcceptInvitationResponse(
        data=MemberEntryResponse(
            user_id=entry.user_id,
            role=entry.role.label,
            added_at=entry.added_at,
        )
    )


@router.post(
    "/{invitation_id}/decline",
    response_model=InvitationDetailResponse,
    summary="Decline an invitation",
    responses={
        403: {"description": "Invitation addressed to another user"},
        404: {"description": "Invitation not found"},
        409: {"description": "Invitation already resolved"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def decline_invitation(
    request: Request,
    invitation_id: UUID,
    user: InitializedUser,
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> InvitationDetailResponse:
    """Decline an invitation. The same user may be invited again later."""
    invitation = await service.decline_invitation(invitation_id, user.id)
    return InvitationDetailResponse(data=InvitationResponse.from_entity(invitation))


@router.post(
    "/{invitation_id}/cancel",
    response_model=InvitationDetailResponse,
    summary="Cancel an invitation",
    responses={
        403: {"description": "Only the inviter or a board/workspace manager may cancel"},
        404: {"description": "Invitation not found"},
        409: {"description": "Invitation already resolved"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def cancel_invitation(
    request: Request,
    invitation_id: UUID,
    user: InitializedUser,
    service: ReconciliationService = Depends(get_reconciliation_service),
) -> InvitationDetailResponse:
    """Withdraw a pending invitation."""
    invitation = await service.cancel_invitation(invitation_id, user.id)
    return InvitationDetailResponse(data=InvitationResponse.from_entity(invitation))
