"""Common Pydantic schemas shared across the API."""

from typing import Any

from pydantic import BaseModel

# Roles an invitation or member entry may carry (owner is implicit)
ASSIGNABLE_ROLE_PATTERN = "^(admin|member)$"


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error_code: str
    message: str
    details: Any | None = None
