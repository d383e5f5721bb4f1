"""user_preferences

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, Sequence[str], None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user_preferences",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "last_used_preset_id",
            sa.UUID(),
            sa.ForeignKey("presets.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("preferred_intensity", sa.Float(), server_default="0.7", nullable=False),
        sa.Column("preferred_view_mode", sa.String(20), server_default="split", nullable=False),
        sa.Column("dismissed_what_next", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("preferences", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", name="uq_user_preferences_user_id"),
    )


def downgrade() -> None:
    op.drop_table("user_preferences")
