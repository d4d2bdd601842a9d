"""
Habit + HabitLog — recurring practices and their dated completions.

One log per (habit_id, date); the unique constraint backs the upsert in
app/services/habits.py.
"""
from datetime import datetime, date
from sqlalchemy import (
    Integer, String, Text, Boolean, DateTime, Date, Enum, ForeignKey, func, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
import enum

from app.db.base import Base


class HabitFrequency(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    custom = "custom"


class Habit(Base):
    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    pillar_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("pillars.id", ondelete="SET NULL"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    frequency: Mapped[str] = mapped_column(
        Enum(HabitFrequency, name="habit_frequency_enum"),
        nullable=False,
        default=HabitFrequency.daily,
    )
    target_days_per_week: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    color: Mapped[str] = mapped_column(String(16), nullable=False, default="#888888")
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class HabitLog(Base):
    __tablename__ = "habit_logs"
    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_habit_log_habit_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    habit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
