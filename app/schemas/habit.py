"""
Habit schemas.

POST /habits                    → HabitCreate     → HabitResponse
PUT  /habits/{id}/logs/{date}   → HabitLogUpsert  → HabitLogResponse
GET  /habits/{id}/streak        → HabitStreakResponse
"""
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.habit import HabitFrequency


class HabitCreate(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=256, examples=["Gym session"])]
    pillar_id: Optional[int] = Field(
        default=None,
        description="Pillar this habit counts towards. Unassigned habits are never scored.",
    )
    target_days_per_week: int = Field(
        default=7, ge=0, le=7,
        description="Expected completions per week.",
    )
    frequency: HabitFrequency = HabitFrequency.daily
    description: str = Field(default="", max_length=2000)
    color: str = Field(default="#888888", pattern=r"^#[0-9a-fA-F]{6}$")


class HabitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    pillar_id: Optional[int]
    target_days_per_week: int
    frequency: str
    description: str
    color: str
    archived_at: Optional[str] = Field(
        default=None, description="UTC timestamp; null while active."
    )


class HabitLogUpsert(BaseModel):
    completed: bool = True
    note: str = Field(default="", max_length=2000)


class HabitLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    date: str
    completed: bool
    note: str


class HabitStreakResponse(BaseModel):
    habit_id: int
    current: int = Field(description="Consecutive completed days up to today/yesterday.")
    longest: int = Field(description="Longest run of completed days ever.")
    weekly_rate: float = Field(description="Completion rate over the last 4 weeks, 0.0–1.0.")
