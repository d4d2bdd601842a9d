"""
Error envelope schemas, used to document 4xx/5xx responses in OpenAPI.

Every error body is `{code, message, details?}`; request validation
failures put per-field entries under `details.errors`.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """One rejected request field."""
    field: str = Field(examples=["target_days_per_week"])
    message: str
    type: str = Field(examples=["less_than_equal"])


class ErrorResponse(BaseModel):
    code: str = Field(examples=["PILLAR_NOT_FOUND"])
    message: str = Field(examples=["Pillar 7 not found."])
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Context such as the missing id, or `errors: list[FieldError]`.",
    )
