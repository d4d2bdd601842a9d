"""
Goal schemas.

POST  /goals                   → GoalCreate      → GoalResponse
PATCH /goals/{id}              → GoalUpdate      → GoalResponse
POST  /goals/{id}/milestones   → MilestoneCreate → MilestoneResponse
"""
from datetime import date as date_type
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.goal import GoalStatus


class GoalCreate(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=256, examples=["Run a marathon"])]
    pillar_id: Optional[int] = None
    description: str = Field(default="", max_length=2000)
    target_date: Optional[date_type] = Field(default=None, examples=["2026-10-01"])
    status: GoalStatus = GoalStatus.active


class GoalUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    pillar_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    target_date: Optional[date_type] = None
    status: Optional[GoalStatus] = None


class GoalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    pillar_id: Optional[int]
    description: str
    target_date: Optional[str] = None
    status: str
    created_at: str


class MilestoneCreate(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=256, examples=["First 10k"])]


class MilestoneResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    goal_id: int
    title: str
    completed: bool
    completed_at: Optional[str] = None
