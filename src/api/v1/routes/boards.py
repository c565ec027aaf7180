"""Board API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.v1.dependencies import InitializedUser, get_container_service
from api.v1.schemas.board import (
    BoardCreate,
    BoardCreatedResponse,
    BoardDetailResponse,
    BoardListResponse,
    BoardResponse,
)
from api.v1.schemas.invitation import InviteUsersResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.membership import parse_role
from domain.services.container_service import ContainerService

router = APIRouter(prefix="/boards", tags=["boards"])


@router.get(
    "",
    response_model=BoardListResponse,
    summary="List user's boards",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_boards(
    request: Request,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> BoardListResponse:
    """Boards the authenticated user owns or is a member of, newest first."""
    boards = await service.list_boards_for_user(user.id)
    data = [BoardResponse.from_entity(board) for board in boards]
    return BoardListResponse(data=data, meta={"total": len(data)})


@router.post(
    "",
    response_model=BoardCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a board",
    responses={
        201: {"description": "Board created; see `invitations` for per-user results"},
        403: {"description": "Creator is not a member of the workspace"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_board(
    request: Request,
    body: BoardCreate,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> BoardCreatedResponse:
    """Create a board, optionally in a workspace, and invite the given users.

    Invitation problems never fail the creation.
    """
    board, invites = await service.create_board(
        owner_id=user.id,
        title=body.title,
        workspace_id=body.workspace_id,
        background_image=body.background_image,
        invitee_ids=body.invitee_ids,
        role=parse_role(body.role),
    )
    return BoardCreatedResponse(
        data=BoardResponse.from_entity(board),
        invitations=InviteUsersResponse.from_result(invites) if invites else None,
    )


@router.get(
    "/{board_id}",
    response_model=BoardDetailResponse,
    summary="Get board details",
    responses={
        403: {"description": "Not a member"},
        404: {"description": "Board not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_board(
    request: Request,
    board_id: UUID,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> BoardDetailResponse:
    """Get a specific board by ID. Requires membership."""
    board = await service.get_board(board_id, user.id)
    return BoardDetailResponse(data=BoardResponse.from_entity(board))


@router.delete(
    "/{board_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete board",
    responses={
        204: {"description": "Board deleted"},
        403: {"description": "Insufficient permissions (Owner only)"},
        404: {"description": "Board not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_board(
    request: Request,
    board_id: UUID,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> None:
    """Delete a board and cancel its pending invitations. Requires Owner role."""
    await service.delete_board(board_id, user.id)
