"""add advisory_alerts table

Revision ID: 0004
Revises: 0003
Create Date: 2026-09-22

Alerts produced by the advisory engine. The primary key is the rule's
deterministic alert id, which makes re-evaluation idempotent.
"""
from alembic import op
import sqlalchemy as sa

revision = "0004"
down_revision = "0003"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "advisory_alerts",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("pillar_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("action", sa.String(128), nullable=True),
        sa.Column("dismissed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_advisory_severity", "advisory_alerts", ["severity"])
    op.create_index("ix_advisory_pillar_id", "advisory_alerts", ["pillar_id"])


def downgrade() -> None:
    op.drop_index("ix_advisory_pillar_id", table_name="advisory_alerts")
    op.drop_index("ix_advisory_severity", table_name="advisory_alerts")
    op.drop_table("advisory_alerts")
