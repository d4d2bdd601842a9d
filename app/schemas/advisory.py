"""
Advisory schemas.

POST /advisory/evaluate → AdvisoryEvaluationResponse
GET  /advisory/alerts   → AlertListResponse
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description='Deterministic alert key, e.g. "drift-3".')
    severity: str = Field(description='"insight" | "challenge" | "warning" | "opportunity"')
    pillar_id: Optional[int] = None
    title: str
    message: str
    action: Optional[str] = None
    dismissed_at: Optional[str] = None
    created_at: str


class AlertListResponse(BaseModel):
    total: int
    items: list[AlertResponse]


class AdvisoryEvaluationResponse(BaseModel):
    created: list[str] = Field(description="Alert ids stored by this run.")
    skipped: list[str] = Field(description="Alert ids that were already stored.")


class ClearDismissedResponse(BaseModel):
    removed: int
