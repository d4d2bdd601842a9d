"""
Goal + Milestone — outcomes a pillar is working towards and their checkpoints.

Goals are not scored. The advisory engine flags active goals that have gone
90 days without a completed milestone.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, Boolean, DateTime, Date, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from app.db.base import Base


class GoalStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    paused = "paused"
    archived = "archived"


class Goal(Base):
    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    pillar_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("pillars.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    target_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        Enum(GoalStatus, name="goal_status_enum"),
        nullable=False,
        default=GoalStatus.active,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class Milestone(Base):
    __tablename__ = "milestones"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    goal_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
