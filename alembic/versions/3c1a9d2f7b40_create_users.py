"""create users

Revision ID: 3c1a9d2f7b40
Revises: 
Create Date: 2026-10-19 09:12:31.480211

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1a9d2f7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the users table with its unique email index."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role_type', sa.String(length=16), nullable=False),
        sa.Column('contributor_profile', sa.JSON(none_as_null=True), nullable=True),
        sa.Column('advisory_profile', sa.JSON(none_as_null=True), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(role_type = 'contributor' AND contributor_profile IS NOT NULL"
            " AND advisory_profile IS NULL)"
            " OR (role_type = 'advisory' AND advisory_profile IS NOT NULL"
            " AND contributor_profile IS NULL)",
            name='ck_users_single_profile',
        ),
        sa.CheckConstraint('length(password_hash) > 0', name='ck_users_password_hash'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)


def downgrade() -> None:
    """Drop the users table."""
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
