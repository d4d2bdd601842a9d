"""
Reflection schemas.

POST /reflections → ReflectionCreate → ReflectionResponse
"""
from datetime import date as date_type
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.reflection import ReflectionType


class ReflectionCreate(BaseModel):
    type: ReflectionType
    date: Optional[date_type] = Field(
        default=None,
        description="ISO date of the reflection. Defaults to today (UTC).",
        examples=["2026-02-20"],
    )
    responses: dict[str, str] = Field(
        default_factory=dict,
        description="Prompt key → answer.",
    )
    energy_level: Optional[int] = Field(default=None, ge=1, le=10)
    mood: Optional[int] = Field(default=None, ge=1, le=10)
    note: str = Field(default="", max_length=10_000)


class ReflectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    date: str
    responses: Optional[dict[str, Any]] = None
    energy_level: Optional[int] = None
    mood: Optional[int] = None
    note: str
