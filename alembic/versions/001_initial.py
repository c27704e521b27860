"""
Initial migration - create workspace runtime, trigger and presentation tables.

Revision ID: 001
Revises:
Create Date: 2026-02-11

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create workspace runtimes table
    op.create_table(
        'workspace_runtimes',
        sa.Column('workspace_id', sa.String(64), primary_key=True),
        sa.Column('mode', sa.String(20), nullable=False, default='normal'),
        sa.Column('low_confidence_streak', sa.Integer(), nullable=False, default=0),
        sa.Column('snoozed_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # Create triggers table
    op.create_table(
        'triggers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('workspace_id', sa.String(64), sa.ForeignKey('workspace_runtimes.workspace_id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('trigger_id', sa.String(64), nullable=False),
        sa.Column('type', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), default=''),
        sa.Column('description', sa.Text(), default=''),
        sa.Column('enabled', sa.Boolean(), default=True),
        sa.Column('min_interval_minutes', sa.Float(), default=0),
        sa.Column('cooldown_minutes', sa.Float(), default=0),
        sa.Column('last_fired_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('criteria', sa.JSON(), default=dict),
        sa.UniqueConstraint('workspace_id', 'type', name='uq_triggers_workspace_type'),
    )

    # Create brief presentations table
    op.create_table(
        'brief_presentations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('workspace_id', sa.String(64), sa.ForeignKey('workspace_runtimes.workspace_id', ondelete='CASCADE'), nullable=False, unique=True, index=True),
        sa.Column('current', sa.JSON(), nullable=False, default=dict),
        sa.Column('history', sa.JSON(), default=list),
        sa.Column('state', sa.String(40), nullable=False, default='presented'),
        sa.Column('user_overrides', sa.JSON(), default=list),
        sa.Column('delivered_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('brief_presentations')
    op.drop_table('triggers')
    op.drop_table('workspace_runtimes')
