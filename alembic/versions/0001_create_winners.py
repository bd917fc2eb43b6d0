"""create winners table

Revision ID: 0001_create_winners
Revises:
Create Date: 2025-09-03 01:33:03
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_create_winners"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "winners",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("guide_id", sa.String(length=64), nullable=False),
        sa.Column("guide_name", sa.String(length=255), nullable=False),
        sa.Column("metrics", sa.JSON(), nullable=True),
        sa.Column("total_tickets", sa.Integer(), nullable=False),
        sa.Column("drawn_ticket", sa.Integer(), nullable=False),
        sa.Column("ticket_numbers", sa.Text(), nullable=True),
        sa.Column("prize_category", sa.String(length=100), nullable=False),
        sa.Column("prize_category_name", sa.String(length=255), nullable=True),
        sa.Column("draw_position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_winners"),
        sa.UniqueConstraint(
            "prize_category", "guide_id", name="uq_winners_category_guide"
        ),
    )
    op.create_index("ix_winners_guide_id", "winners", ["guide_id"])
    op.create_index("idx_winners_drawn_ticket", "winners", ["drawn_ticket"])
    op.create_index("idx_winners_prize_category", "winners", ["prize_category"])


def downgrade() -> None:
    op.drop_index("idx_winners_prize_category", table_name="winners")
    op.drop_index("idx_winners_drawn_ticket", table_name="winners")
    op.drop_index("ix_winners_guide_id", table_name="winners")
    op.drop_table("winners")
