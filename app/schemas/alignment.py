"""
Alignment schemas.

GET  /alignment            → AlignmentReportResponse
POST /alignment/snapshots  → SnapshotListResponse
GET  /alignment/snapshots  → SnapshotListResponse
"""
from pydantic import BaseModel, ConfigDict, Field


class StandardAlignmentResponse(BaseModel):
    standard_id: int
    standard_label: str
    observed: float = Field(
        description="Completions per week per habit (display only, 1 decimal)."
    )
    target: float
    score: int = Field(description="0–100, pooled completed / expected habit days.")
    label: str = Field(examples=["3.5 / 4 workouts/week"])


class PillarAlignmentResponse(BaseModel):
    pillar_id: int
    pillar_name: str
    pillar_color: str
    score: int = Field(description="0–100.")
    alignment_state: str = Field(
        description='"aligned" | "improving" | "drifting" | "regressing" | "avoiding"'
    )
    trend: str = Field(description='"up" | "down" | "flat" vs the previous snapshot.')
    standards: list[StandardAlignmentResponse]
    habit_count: int
    completed_habit_count: int = Field(description="Habits completed today.")


class AlignmentReportResponse(BaseModel):
    from_date: str = Field(serialization_alias="from")
    to_date: str = Field(serialization_alias="to")
    overall_score: int = Field(description="Rounded mean of pillar scores.")
    pillars: list[PillarAlignmentResponse]


class SnapshotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pillar_id: int
    period_start: str
    period_end: str
    score: int
    alignment_state: str
    trend: str
    note: str


class SnapshotListResponse(BaseModel):
    total: int
    items: list[SnapshotResponse]
