"""
Identity schemas — pillars and standards.

POST /pillars                 → PillarCreate   → PillarResponse
PATCH /pillars/{id}           → PillarUpdate   → PillarResponse
POST /pillars/{id}/standards  → StandardCreate → StandardResponse
"""
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


def _strip_name(v):
    stripped = v.strip() if isinstance(v, str) else v
    if not stripped:
        raise ValueError("name must not be empty after stripping whitespace")
    return stripped


class PillarCreate(BaseModel):
    name: Annotated[str, Field(
        min_length=1, max_length=128,
        description="Life domain name.",
        examples=["Health"],
    )]
    color: str = Field(
        default="#888888", pattern=_HEX_COLOR,
        description="Display color as #RRGGBB.",
        examples=["#4ade80"],
    )
    description: str = Field(default="", max_length=2000)
    order: Optional[int] = Field(
        default=None, ge=0,
        description="Display order. Defaults to after the last pillar.",
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        return _strip_name(v)


class PillarUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    color: Optional[str] = Field(default=None, pattern=_HEX_COLOR)
    description: Optional[str] = Field(default=None, max_length=2000)
    order: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _strip_name(v)


class PillarResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    description: str
    order: int


class StandardCreate(BaseModel):
    label: Annotated[str, Field(
        min_length=1, max_length=256,
        examples=["4 workouts per week"],
    )]
    target: float = Field(ge=0, description="Target value.", examples=[4])
    unit: Annotated[str, Field(
        min_length=1, max_length=64,
        examples=["workouts/week"],
    )]
    metric: str = Field(
        default="", max_length=128,
        description="Optional machine key, e.g. workouts_per_week.",
    )


class StandardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pillar_id: int
    label: str
    metric: str
    target: float
    unit: str
