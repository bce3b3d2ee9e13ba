"""create_account_tables

Revision ID: 4c2d7e91a0b3
Revises:
Create Date: 2026-10-19 10:02:11.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '4c2d7e91a0b3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create accounts and account_unlocks tables."""
    op.create_table('accounts',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='participant'),
        sa.Column('visible', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('nationality', sa.String(length=100), nullable=True),
        sa.Column('starters', postgresql.JSONB(), nullable=True, server_default='[]'),
        sa.Column('interests', postgresql.JSONB(), nullable=True, server_default='[]'),
        sa.Column('socials', postgresql.JSONB(), nullable=True, server_default='{}'),
        sa.Column('unlock_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('last_unlocked_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "role IN ('participant', 'host', 'admin')", name='ck_accounts_role'
        ),
        sa.CheckConstraint('unlock_count >= 0', name='ck_accounts_unlock_count'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_accounts_role', 'accounts', ['role'], unique=False)

    op.create_table('account_unlocks',
        sa.Column('viewer_id', sa.String(length=128), nullable=False),
        sa.Column('target_id', sa.String(length=128), nullable=False),
        sa.Column('unlocked_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['viewer_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['target_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('viewer_id', 'target_id'),
    )
    op.create_index(
        'ix_account_unlocks_target_id', 'account_unlocks', ['target_id'], unique=False
    )

    # The API talks to the database with the service connection; clients
    # going through the Supabase REST layer get nothing.
    op.execute("ALTER TABLE accounts ENABLE ROW LEVEL SECURITY;")
    op.execute("ALTER TABLE account_unlocks ENABLE ROW LEVEL SECURITY;")


def downgrade() -> None:
    """Drop account tables."""
    op.drop_index('ix_account_unlocks_target_id', table_name='account_unlocks')
    op.drop_table('account_unlocks')
    op.drop_index('ix_accounts_role', table_name='accounts')
    op.drop_table('accounts')
