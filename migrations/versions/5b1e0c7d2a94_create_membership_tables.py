"""create_membership_tables

Revision ID: 5b1e0c7d2a94
Revises:
Create Date: 2026-10-19 09:12:44.318052

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '5b1e0c7d2a94'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, workspaces, boards and invitations tables."""
    op.create_table('profiles',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_profiles_username', 'profiles', ['username'], unique=False)

    op.create_table('workspaces',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('members', postgresql.JSONB(astext_type=sa.Text()), server_default='[]', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_workspaces_owner_id', 'workspaces', ['owner_id'], unique=False)

    op.create_table('boards',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('owner_id', sa.UUID(), nullable=False),
        sa.Column('workspace_id', sa.UUID(), nullable=True),
        sa.Column('background_image', sa.String(length=500), nullable=True),
        sa.Column('members', postgresql.JSONB(astext_type=sa.Text()), server_default='[]', nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['workspace_id'], ['workspaces.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_boards_owner_id', 'boards', ['owner_id'], unique=False)
    op.create_index('ix_boards_workspace_id', 'boards', ['workspace_id'], unique=False)

    op.create_table('invitations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('container_type', sa.String(length=20), nullable=False),
        sa.Column('container_id', sa.UUID(), nullable=False),
        sa.Column('invited_user_id', sa.UUID(), nullable=False),
        sa.Column('invited_by_user_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='member'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('responded_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("container_type IN ('board', 'workspace')", name='ck_invitations_container_type'),
        sa.CheckConstraint("role IN ('admin', 'member')", name='ck_invitations_role'),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined', 'cancelled', 'removed')",
            name='ck_invitations_status',
        ),
        sa.ForeignKeyConstraint(['invited_user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invited_by_user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    # One pending invitation per (container, invited user)
    op.create_index(
        'uq_invitations_pending_pair',
        'invitations',
        ['container_type', 'container_id', 'invited_user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )
    # Index for looking up a user's pending invitations
    op.create_index('ix_invitations_invited_user_status', 'invitations', ['invited_user_id', 'status'], unique=False)


def downgrade() -> None:
    """Drop membership tables."""
    op.drop_index('ix_invitations_invited_user_status', table_name='invitations')
    op.drop_index('uq_invitations_pending_pair', table_name='invitations')
    op.drop_table('invitations')
    op.drop_index('ix_boards_workspace_id', table_name='boards')
    op.drop_index('ix_boards_owner_id', table_name='boards')
    op.drop_table('boards')
    op.drop_index('ix_workspaces_owner_id', table_name='workspaces')
    op.drop_table('workspaces')
    op.drop_index('ix_profiles_username', table_name='profiles')
    op.drop_table('profiles')
