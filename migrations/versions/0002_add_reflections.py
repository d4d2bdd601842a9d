"""add reflections table

Revision ID: 0002
Revises: 0001
Create Date: 2026-09-08

Journal entries. Not scored; the advisory engine reads their dates.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    reflection_type_enum = sa.Enum(
        "daily-am", "daily-pm", "weekly", "monthly", "quarterly",
        name="reflection_type_enum",
    )
    reflection_type_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "reflections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.Enum(
            "daily-am", "daily-pm", "weekly", "monthly", "quarterly",
            name="reflection_type_enum", create_type=False,
        ), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("responses", sa.Text(), nullable=True),
        sa.Column("energy_level", sa.Integer(), nullable=True),
        sa.Column("mood", sa.Integer(), nullable=True),
        sa.Column("note", sa.Text(), nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_reflections_date", "reflections", ["date"])


def downgrade() -> None:
    op.drop_index("ix_reflections_date", table_name="reflections")
    op.drop_table("reflections")
    sa.Enum(name="reflection_type_enum").drop(op.get_bind(), checkfirst=True)
