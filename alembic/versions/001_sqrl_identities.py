"""Initial migration - sqrl_identities

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Identity key is the primary key; rotated_to_id is a soft reference
    # and intentionally has no foreign key.
    op.create_table(
        'sqrl_identities',
        sa.Column('primary_id', sa.Text(), nullable=False),
        sa.Column('unlock_key', sa.Text(), nullable=False),
        sa.Column('verify_key', sa.Text(), nullable=False),
        sa.Column('previous_id', sa.Text(), nullable=True),
        sa.Column('sole_auth_flag', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('hard_lock_flag', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('disabled_flag', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('rotated_to_id', sa.Text(), nullable=True),
        sa.Column('button_response', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.CheckConstraint(
            'button_response >= 0 AND button_response <= 3',
            name='ck_sqrl_identities_button_response'
        ),
        sa.PrimaryKeyConstraint('primary_id')
    )

    if op.get_bind().dialect.name == 'postgresql':
        op.execute("ALTER TABLE sqrl_identities ENABLE ROW LEVEL SECURITY")


def downgrade() -> None:
    op.drop_table('sqrl_identities')
