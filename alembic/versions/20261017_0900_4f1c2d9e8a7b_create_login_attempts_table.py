"""create_login_attempts_table

Revision ID: 4f1c2d9e8a7b
Revises:
Create Date: 2026-10-17 09:00:12.481220
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers, used by Alembic
revision: str = '4f1c2d9e8a7b'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Apply migration: create_login_attempts_table"""
    op.create_table(
        'login_attempts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('identifier', sa.String(length=255), nullable=False,
                  comment='Client IP address or sentinel identifier'),
        sa.Column('attempt_count', sa.Integer(), nullable=False, server_default='0',
                  comment='Failed attempts since last reset'),
        sa.Column('last_attempt_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('now()'),
                  comment='When the last failed attempt was made'),
        sa.Column('blocked_until', sa.DateTime(timezone=True), nullable=True,
                  comment='Lockout end; null or past means not blocked'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('attempt_count >= 0', name='ck_login_attempts_count_non_negative'),
    )
    op.create_index('ix_login_attempts_identifier', 'login_attempts', ['identifier'], unique=True)
    op.create_index('ix_login_attempts_last_attempt_at', 'login_attempts', ['last_attempt_at'])
    op.create_index('ix_login_attempts_blocked_until', 'login_attempts', ['blocked_until'])


def downgrade() -> None:
    """Revert migration: create_login_attempts_table"""
    op.drop_index('ix_login_attempts_blocked_until', table_name='login_attempts')
    op.drop_index('ix_login_attempts_last_attempt_at', table_name='login_attempts')
    op.drop_index('ix_login_attempts_identifier', table_name='login_attempts')
    op.drop_table('login_attempts')
