"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    NOT_A_MEMBER = "NOT_A_MEMBER"
    NOT_WORKSPACE_MEMBER = "NOT_WORKSPACE_MEMBER"

    # Not found errors (404)
    WORKSPACE_NOT_FOUND = "WORKSPACE_NOT_FOUND"
    BOARD_NOT_FOUND = "BOARD_NOT_FOUND"
    INVITATION_NOT_FOUND = "INVITATION_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CANNOT_REMOVE_OWNER = "CANNOT_REMOVE_OWNER"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Conflict errors (409)
    ALREADY_PENDING = "ALREADY_PENDING"
    INVITATION_ALREADY_RESOLVED = "INVITATION_ALREADY_RESOLVED"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class ForbiddenError(AppException):
    """The acting user is not a valid actor for this operation."""

    def __init__(self, message: str = "Access denied", details: Any | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
            details=details,
        )


class InsufficientPermissionsError(AppException):
    """Requester lacks the role required for the operation."""

    def __init__(self, required_role: str = "admin") -> None:
        super().__init__(
            error_code=ErrorCode.INSUFFICIENT_PERMISSIONS,
            message=f"Insufficient permissions. Required role: {required_role}",
            status_code=403,
            details={"required_role": required_role},
        )


class NotAMemberError(AppException):
    """User is not a member of the container."""

    def __init__(self, container_type: str, container_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_MEMBER,
            message=f"You are not a member of this {container_type}",
            status_code=403,
            details={"container_type": container_type, "container_id": container_id},
        )


class NotWorkspaceMemberError(AppException):
    """User must belong to the board's workspace first."""

    def __init__(self, user_id: str, workspace_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_WORKSPACE_MEMBER,
            message="User is not a member of the board's workspace",
            status_code=403,
            details={"user_id": user_id, "workspace_id": workspace_id},
        )


class WorkspaceNotFoundError(AppException):
    """Workspace not found."""

    def __init__(self, workspace_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.WORKSPACE_NOT_FOUND,
            message=f"Workspace not found: {workspace_id}",
            status_code=404,
            details={"workspace_id": workspace_id},
        )


class BoardNotFoundError(AppException):
    """Board not found."""

    def __init__(self, board_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.BOARD_NOT_FOUND,
            message=f"Board not found: {board_id}",
            status_code=404,
            details={"board_id": board_id},
        )


class InvitationNotFoundError(AppException):
    """Invitation not found."""

    def __init__(self, invitation_id: str = "") -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_NOT_FOUND,
            message="Invitation not found",
            status_code=404,
            details={"invitation_id": invitation_id} if invitation_id else None,
        )


class OwnerRemovalError(AppException):
    """The owner of a container cannot be removed from it."""

    def __init__(self, container_type: str, container_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CANNOT_REMOVE_OWNER,
            message=f"The owner cannot be removed from this {container_type}",
            status_code=400,
            details={"container_type": container_type, "container_id": container_id},
        )


class InvalidTransitionError(AppException):
    """Requested invitation status change is not part of the lifecycle."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot move an invitation from '{current}' to '{requested}'",
            status_code=400,
            details={"current": current, "requested": requested},
        )


class InviteBatchTooLargeError(AppException):
    """Too many candidates in a single invite request."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=f"Cannot invite more than {limit} users at once",
            status_code=400,
            details={"size": size, "limit": limit},
        )


class DuplicatePendingError(AppException):
    """A pending invitation already exists for this user and container."""

    def __init__(self, container_id: str, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_PENDING,
            message="A pending invitation already exists for this user",
            status_code=409,
            details={"container_id": container_id, "user_id": user_id},
        )


class InvitationAlreadyResolvedError(AppException):
    """Invitation is no longer pending."""

    def __init__(self, invitation_id: str, status: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVITATION_ALREADY_RESOLVED,
            message=f"This invitation has already been {status}",
            status_code=409,
            details={"invitation_id": invitation_id, "status": status},
        )


class StoreUnavailableError(AppException):
    """The persistence backend failed. The only retryable error kind."""

    def __init__(self, message: str = "The data store is temporarily unavailable") -> None:
        super().__init__(
            error_code=ErrorCode.STORE_UNAVAILABLE,
            message=message,
            status_code=503,
            details={"retryable": True},
        )
