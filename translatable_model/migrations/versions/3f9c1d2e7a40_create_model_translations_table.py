"""create model_translations table

Revision ID: 3f9c1d2e7a40
Revises:
Create Date: 2026-10-14 02:57:45.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1d2e7a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the model_translations table."""
    op.create_table(
        'model_translations',
        # A string for numeric and string ids alike
        sa.Column('translatable_type', sa.String(length=255), nullable=False),
        sa.Column('translatable_id', sa.String(length=255), nullable=False),
        sa.Column('locale', sa.String(length=35), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('translatable_type', 'translatable_id', 'locale', 'key'),
    )


def downgrade() -> None:
    """Drop the model_translations table."""
    op.drop_table('model_translations')
