"""Membership domain entities shared by boards and workspaces."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum, StrEnum
from uuid import UUID


class ContainerType(StrEnum):
    """Kinds of entity that own a membership list."""

    BOARD = "board"
    WORKSPACE = "workspace"


class ContainerRole(IntEnum):
    """Container role hierarchy. Higher value = more permissions.

    OWNER is implicit (the container's ``owner_id``) and never stored
    in a member entry. Use >= comparison for permission checks:
        role >= ContainerRole.ADMIN  # True if Admin or Owner
    """

    MEMBER = 20
    ADMIN = 30
    OWNER = 40

    @property
    def label(self) -> str:
        return self.name.lower()


# Roles that may be stored on a member entry or carried by an invitation
ASSIGNABLE_ROLES = {
    "admin": ContainerRole.ADMIN,
    "member": ContainerRole.MEMBER,
}


def parse_role(value: str) -> ContainerRole:
    """Map a stored role string to its enum, defaulting to MEMBER."""
    return ASSIGNABLE_ROLES.get(value, ContainerRole.MEMBER)


def has_permission(user_role: ContainerRole | None, required_role: ContainerRole) -> bool:
    """Check if a user role meets the required permission level."""
    return user_role is not None and user_role >= required_role


@dataclass
class MemberEntry:
    """One entry of a container's embedded members list."""

    user_id: UUID
    role: ContainerRole = ContainerRole.MEMBER
    added_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict[str, str]:
        return {
            "user_id": str(self.user_id),
            "role": self.role.label,
            "added_at": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "MemberEntry":
        added_at = data.get("added_at")
        return cls(
            user_id=UUID(data["user_id"]),
            role=parse_role(data.get("role", "member")),
            added_at=datetime.fromisoformat(added_at) if added_at else datetime.utcnow(),
        )
