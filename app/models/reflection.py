"""
Reflection — journal entries (AM/PM check-ins, weekly/monthly reviews).

Not used by scoring. The advisory engine reads dates to detect lapses and
PM moods to spot a Sunday mood drop.
responses: JSON-encoded {prompt_key: answer} stored as Text.
"""
from datetime import datetime, date
from sqlalchemy import Integer, Text, DateTime, Date, Enum, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from app.db.base import Base


class ReflectionType(str, enum.Enum):
    daily_am = "daily-am"
    daily_pm = "daily-pm"
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"


class Reflection(Base):
    __tablename__ = "reflections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    type: Mapped[str] = mapped_column(
        Enum(
            ReflectionType,
            name="reflection_type_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    responses: Mapped[str | None] = mapped_column(Text, nullable=True)
    energy_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mood: Mapped[int | None] = mapped_column(Integer, nullable=True)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
