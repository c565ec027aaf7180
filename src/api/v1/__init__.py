"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.boards import router as boards_router
from api.v1.routes.invitations import router as invitations_router
from api.v1.routes.membership import build_membership_router
from api.v1.routes.users import router as users_router
from api.v1.routes.workspaces import router as workspaces_router
from domain.entities.membership import ContainerType

router = APIRouter()
router.include_router(users_router)
router.include_router(workspaces_router)
router.include_router(build_membership_router(ContainerType.WORKSPACE, "/workspaces"))
router.include_router(boards_router)
router.include_router(build_membership_router(ContainerType.BOARD, "/boards"))
router.include_router(invitations_router)
