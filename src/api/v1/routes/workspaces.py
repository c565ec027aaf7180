"""Workspace API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.v1.dependencies import InitializedUser, get_container_service
from api.v1.schemas.board import BoardListResponse, BoardResponse
from api.v1.schemas.workspace import (
    WorkspaceCreate,
    WorkspaceDetailResponse,
    WorkspaceListResponse,
    WorkspaceResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.container_service import ContainerService

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.get(
    "",
    response_model=WorkspaceListResponse,
    summary="List user's workspaces",
    responses={200: {"description": "Workspaces the user owns or is a member of"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_workspaces(
    request: Request,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> WorkspaceListResponse:
    """Get all workspaces the authenticated user belongs to."""
    workspaces = await service.list_workspaces_for_user(user.id)
    data = [WorkspaceResponse.from_entity(ws) for ws in workspaces]
    return WorkspaceListResponse(data=data, meta={"total": len(data)})


@router.post(
    "",
    response_model=WorkspaceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a workspace",
    responses={201: {"description": "Workspace created successfully"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_workspace(
    request: Request,
    body: WorkspaceCreate,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> WorkspaceDetailResponse:
    """Create a new workspace owned by the caller."""
    workspace = await service.create_workspace(
        owner_id=user.id,
        name=body.name,
        description=body.description,
    )
    return WorkspaceDetailResponse(data=WorkspaceResponse.from_entity(workspace))


@router.get(
    "/{workspace_id}",
    response_model=WorkspaceDetailResponse,
    summary="Get workspace details",
    responses={
        200: {"description": "Workspace details"},
        403: {"description": "Not a member"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_workspace(
    request: Request,
    workspace_id: UUID,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> WorkspaceDetailResponse:
    """Get a specific workspace by ID. Requires membership."""
    workspace = await service.get_workspace(workspace_id, user.id)
    return WorkspaceDetailResponse(data=WorkspaceResponse.from_entity(workspace))


@router.delete(
    "/{workspace_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete workspace",
    responses={
        204: {"description": "Workspace deleted; its boards become personal boards"},
        403: {"description": "Insufficient permissions (Owner only)"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_workspace(
    request: Request,
    workspace_id: UUID,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> None:
    """Delete a workspace and cancel its pending invitations. Requires Owner role."""
    await service.delete_workspace(workspace_id, user.id)


@router.get(
    "/{workspace_id}/boards",
    response_model=BoardListResponse,
    summary="List workspace boards",
    responses={
        403: {"description": "Not a member"},
        404: {"description": "Workspace not found"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_workspace_boards(
    request: Request,
    workspace_id: UUID,
    user: InitializedUser,
    service: ContainerService = Depends(get_container_service),
) -> BoardListResponse:
    """Boards of the workspace the caller owns or belongs to."""
    boards = await service.list_workspace_boards(workspace_id, user.id)
    data = [BoardResponse.from_entity(board) for board in boards]
    return BoardListResponse(data=data, meta={"total": len(data)})
