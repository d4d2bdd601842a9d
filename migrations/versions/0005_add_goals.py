"""add goals and milestones tables

Revision ID: 0005
Revises: 0004
Create Date: 2026-10-17

Goals hang off a pillar (nullable, SET NULL on delete); milestones belong
to one goal and are removed with it.
"""
from alembic import op
import sqlalchemy as sa

revision = "0005"
down_revision = "0004"
branch_labels = None
depends_on = None

goal_status_enum = sa.Enum(
    "active", "completed", "paused", "archived", name="goal_status_enum"
)


def upgrade() -> None:
    op.create_table(
        "goals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "pillar_id",
            sa.Integer(),
            sa.ForeignKey("pillars.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("target_date", sa.Date(), nullable=True),
        sa.Column("status", goal_status_enum, nullable=False, server_default="active"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_goals_id", "goals", ["id"])
    op.create_index("ix_goals_pillar_id", "goals", ["pillar_id"])
    op.create_index("ix_goals_status", "goals", ["status"])

    op.create_table(
        "milestones",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "goal_id",
            sa.Integer(),
            sa.ForeignKey("goals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_milestones_id", "milestones", ["id"])
    op.create_index("ix_milestones_goal_id", "milestones", ["goal_id"])


def downgrade() -> None:
    op.drop_index("ix_milestones_goal_id", table_name="milestones")
    op.drop_index("ix_milestones_id", table_name="milestones")
    op.drop_table("milestones")
    op.drop_index("ix_goals_status", table_name="goals")
    op.drop_index("ix_goals_pillar_id", table_name="goals")
    op.drop_index("ix_goals_id", table_name="goals")
    op.drop_table("goals")
    goal_status_enum.drop(op.get_bind(), checkfirst=True)
