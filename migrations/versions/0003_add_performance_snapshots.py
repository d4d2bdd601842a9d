"""add performance_snapshots table

Revision ID: 0003
Revises: 0002
Create Date: 2026-09-15

Stored pillar scores used as trend baselines.
Unique constraint (pillar_id, period_end) backs the snapshot upsert.
"""
from alembic import op
import sqlalchemy as sa

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "performance_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "pillar_id",
            sa.Integer(),
            sa.ForeignKey("pillars.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("alignment_state", sa.String(16), nullable=False),
        sa.Column("trend", sa.String(8), nullable=False),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_snapshot_pillar_id", "performance_snapshots", ["pillar_id"])
    op.create_index("ix_snapshot_period_end", "performance_snapshots", ["period_end"])
    op.create_unique_constraint(
        "uq_snapshot_pillar_period_end",
        "performance_snapshots",
        ["pillar_id", "period_end"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_snapshot_pillar_period_end", "performance_snapshots", type_="unique")
    op.drop_index("ix_snapshot_period_end", table_name="performance_snapshots")
    op.drop_index("ix_snapshot_pillar_id", table_name="performance_snapshots")
    op.drop_table("performance_snapshots")
