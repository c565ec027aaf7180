"""User directory API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import InitializedUser, get_directory_service
from api.v1.schemas.user import UserDetailResponse, UserResponse, UserSearchResponse
from core.rate_limit import READ_LIMIT, SEARCH_LIMIT, limiter
from domain.entities.profile import Profile
from domain.services.directory_service import DirectoryService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=UserDetailResponse,
    summary="Get my profile",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_me(
    request: Request,
    user: CurrentUser,
    directory: DirectoryService = Depends(get_directory_service),
) -> UserDetailResponse:
    """Return the caller's profile, refreshed from the identity token."""
    profile = await directory.sync_profile(user.id, user.email, user.display_name)
    return UserDetailResponse(data=UserResponse.from_entity(profile))


@router.get(
    "/search",
    response_model=UserSearchResponse,
    summary="Search users by username or email",
)
@limiter.limit(SEARCH_LIMIT)  # type: ignore[untyped-decorator]
async def search_users(
    request: Request,
    user: InitializedUser,
    q: str = Query("", max_length=255, description="Substring of a username or email"),
    directory: DirectoryService = Depends(get_directory_service),
) -> UserSearchResponse:
    """Find users to invite. The caller is never part of the results."""
    result = await directory.search(q, exclude_user_id=user.id)
    me = Profile(id=user.id, username=user.username, email=user.email)
    data = [UserResponse.from_entity(p) for p in result.users]
    return UserSearchResponse(
        data=data,
        meta={
            "total": len(data),
            "self_match": DirectoryService.is_self_match(me, q),
            "error": result.error,
        },
    )
