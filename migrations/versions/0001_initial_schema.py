"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-09-01 00:00:00.000000

Pillars, standards, habits and habit logs.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- ENUM types ---
    habit_frequency_enum = sa.Enum(
        "daily", "weekly", "custom", name="habit_frequency_enum"
    )
    habit_frequency_enum.create(op.get_bind(), checkfirst=True)

    # --- pillars ---
    op.create_table(
        "pillars",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("color", sa.String(16), nullable=False, server_default="#888888"),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pillars_id", "pillars", ["id"])

    # --- standards ---
    op.create_table(
        "standards",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("pillar_id", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(256), nullable=False),
        sa.Column("metric", sa.String(128), nullable=False, server_default=""),
        sa.Column("target", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["pillar_id"], ["pillars.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_standards_id", "standards", ["id"])
    op.create_index("ix_standards_pillar_id", "standards", ["pillar_id"])

    # --- habits ---
    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("pillar_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("frequency", sa.Enum(
            "daily", "weekly", "custom",
            name="habit_frequency_enum", create_type=False,
        ), nullable=False, server_default="daily"),
        sa.Column("target_days_per_week", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("color", sa.String(16), nullable=False, server_default="#888888"),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["pillar_id"], ["pillars.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_habits_id", "habits", ["id"])
    op.create_index("ix_habits_pillar_id", "habits", ["pillar_id"])

    # --- habit_logs ---
    op.create_table(
        "habit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["habit_id"], ["habits.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("habit_id", "date", name="uq_habit_log_habit_date"),
    )
    op.create_index("ix_habit_logs_id", "habit_logs", ["id"])
    op.create_index("ix_habit_logs_habit_id", "habit_logs", ["habit_id"])
    op.create_index("ix_habit_logs_date", "habit_logs", ["date"])


def downgrade() -> None:
    op.drop_table("habit_logs")
    op.drop_table("habits")
    op.drop_table("standards")
    op.drop_table("pillars")
    sa.Enum(name="habit_frequency_enum").drop(op.get_bind(), checkfirst=True)
