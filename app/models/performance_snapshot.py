"""
PerformanceSnapshot — stored pillar scores used as trend baselines.

Derived cache: the alignment engine never writes here. Rows are produced by
POST /alignment/snapshots, one per (pillar_id, period_end); recomputing the
same window updates the row in place.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, DateTime, Date, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class PerformanceSnapshot(Base):
    __tablename__ = "performance_snapshots"
    __table_args__ = (
        UniqueConstraint("pillar_id", "period_end", name="uq_snapshot_pillar_period_end"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    pillar_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pillars.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False, comment="0–100")
    alignment_state: Mapped[str] = mapped_column(String(16), nullable=False)
    trend: Mapped[str] = mapped_column(String(8), nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
