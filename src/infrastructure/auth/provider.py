"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The acting user, as asserted by a validated identity token."""

    id: UUID
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None

    @property
    def username(self) -> str:
        """Display name if the identity provider has one, else the email local part."""
        if self.display_name and self.display_name.strip():
            return self.display_name.strip()
        return self.email.split("@", 1)[0]


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the token's user, or None if the token is invalid or expired."""
        ...

    def create_token(self, user: TokenUser) -> str:
        """Create a signed token for a user (local/test use)."""
        ...
