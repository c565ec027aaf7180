"""Workspace domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from domain.entities.membership import ContainerType, MemberEntry


@dataclass
class Workspace:
    """Domain entity for a Workspace."""

    container_type: ClassVar[ContainerType] = ContainerType.WORKSPACE

    name: str
    owner_id: UUID
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    members: list[MemberEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
