"""add waitlist signups table

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create waitlist_signups with its (waitlist, email) natural key."""
    op.create_table('waitlist_signups',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('waitlist', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('reference_url', sa.String(length=2048), nullable=True),
        sa.Column('notification_sent', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('waitlist', 'email', name='uq_waitlist_signups_waitlist_email'),
    )
    op.create_index(op.f('ix_waitlist_signups_waitlist'), 'waitlist_signups', ['waitlist'], unique=False)
    op.create_index(op.f('ix_waitlist_signups_email'), 'waitlist_signups', ['email'], unique=False)
    op.create_index(op.f('ix_waitlist_signups_notification_sent'), 'waitlist_signups', ['notification_sent'], unique=False)


def downgrade() -> None:
    """Drop waitlist_signups."""
    op.drop_index(op.f('ix_waitlist_signups_notification_sent'), table_name='waitlist_signups')
    op.drop_index(op.f('ix_waitlist_signups_email'), table_name='waitlist_signups')
    op.drop_index(op.f('ix_waitlist_signups_waitlist'), table_name='waitlist_signups')
    op.drop_table('waitlist_signups')
