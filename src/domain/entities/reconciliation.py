"""Structured results returned by the reconciliation service."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID

from domain.entities.invitation import Invitation
from domain.entities.membership import ContainerType


class InviteOutcome(StrEnum):
    """Per-candidate result of an invite request."""

    CREATED = "created"
    ALREADY_MEMBER = "already_member"
    ALREADY_PENDING = "already_pending"
    NOT_WORKSPACE_MEMBER = "not_workspace_member"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class CandidateOutcome:
    """What happened to one candidate of an invite request."""

    user_id: UUID
    outcome: InviteOutcome
    detail: str
    invitation: Invitation | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == InviteOutcome.CREATED


@dataclass
class InviteResult:
    """Outcome of ``invite_users``, one entry per distinct candidate."""

    container_type: ContainerType
    container_id: UUID
    outcomes: list[CandidateOutcome] = field(default_factory=list)

    @property
    def created(self) -> list[CandidateOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def rejected(self) -> list[CandidateOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def outcome_for(self, user_id: UUID) -> CandidateOutcome | None:
        return next((o for o in self.outcomes if o.user_id == user_id), None)


@dataclass
class RemovalWarning:
    """A best-effort step that failed during a removal."""

    container_type: ContainerType
    container_id: UUID
    reason: str


@dataclass
class RemovalResult:
    """Outcome of ``remove_member`` / ``leave_container``.

    ``removed`` is False when the target was not in the members list to
    begin with. Cascaded boards are listed even when nothing changed there.
    """

    container_type: ContainerType
    container_id: UUID
    user_id: UUID
    removed: bool
    cascaded_board_ids: list[UUID] = field(default_factory=list)
    warnings: list[RemovalWarning] = field(default_factory=list)
