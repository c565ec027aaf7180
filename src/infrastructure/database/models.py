"""SQLAlchemy ORM models."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """User profile model (synced from Supabase)."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # Older profiles were created before email was captured
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    owned_workspaces: Mapped[list["WorkspaceModel"]] = relationship(
        "WorkspaceModel",
        back_populates="owner",
        foreign_keys="WorkspaceModel.owner_id",
    )
    owned_boards: Mapped[list["BoardModel"]] = relationship(
        "BoardModel",
        back_populates="owner",
        foreign_keys="BoardModel.owner_id",
    )


class WorkspaceModel(Base):
    """Workspace model. ``members`` is a JSON array of member entries."""

    __tablename__ = "workspaces"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    owner_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    members: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    owner: Mapped["ProfileModel"] = relationship(
        "ProfileModel",
        back_populates="owned_workspaces",
        foreign_keys=[owner_id],
    )
    boards: Mapped[list["BoardModel"]] = relationship(
        "BoardModel",
        back_populates="workspace",
        foreign_keys="BoardModel.workspace_id",
    )


class BoardModel(Base):
    """Board model. ``members`` is a JSON array of member entries."""

    __tablename__ = "boards"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    workspace_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="SET NULL"),
        index=True,
    )
    background_image: Mapped[str | None] = mapped_column(String(500))
    members: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    owner: Mapped["ProfileModel"] = relationship(
        "ProfileModel",
        back_populates="owned_boards",
        foreign_keys=[owner_id],
    )
    workspace: Mapped[Optional["WorkspaceModel"]] = relationship(
        "WorkspaceModel",
        back_populates="boards",
        foreign_keys=[workspace_id],
    )


class InvitationModel(Base):
    """Board/workspace invitation model.

    ``container_id`` points at ``boards.id`` or ``workspaces.id`` depending on
    ``container_type``, so it carries no foreign key.
    """

    __tablename__ = "invitations"
    __table_args__ = (
        # At most one pending invitation per (container, invited user)
        Index(
            "uq_invitations_pending_pair",
            "container_type",
            "container_id",
            "invited_user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_invitations_invited_user_status", "invited_user_id", "status"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    container_type: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "container_type IN ('board', 'workspace')",
            name="ck_invitations_container_type",
        ),
        nullable=False,
    )
    container_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)
    invited_user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    invited_by_user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "role IN ('admin', 'member')",
            name="ck_invitations_role",
        ),
        nullable=False,
        default="member",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'declined', 'cancelled', 'removed')",
            name="ck_invitations_status",
        ),
        nullable=False,
        default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    invited_user: Mapped["ProfileModel"] = relationship(
        "ProfileModel",
        foreign_keys=[invited_user_id],
    )
    inviter: Mapped["ProfileModel"] = relationship(
        "ProfileModel",
        foreign_keys=[invited_by_user_id],
    )
