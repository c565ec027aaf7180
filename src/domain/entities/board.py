"""Board domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar
from uuid import UUID, uuid4

from domain.entities.membership import ContainerType, MemberEntry


@dataclass
class Board:
    """Domain entity for a Board, optionally scoped to a workspace."""

    container_type: ClassVar[ContainerType] = ContainerType.BOARD

    title: str
    owner_id: UUID
    id: UUID = field(default_factory=uuid4)
    workspace_id: UUID | None = None
    background_image: str | None = None
    members: list[MemberEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
