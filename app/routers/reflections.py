"""
Reflections router.

POST /reflections
GET  /reflections
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.reflection import Reflection
from app.schemas.reflection import ReflectionCreate, ReflectionResponse
from app.services.reflections import create_reflection, list_reflections

router = APIRouter(prefix="/reflections", tags=["reflections"])


def _parse_responses(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return None


def _reflection_to_response(r: Reflection) -> ReflectionResponse:
    return ReflectionResponse(
        id=r.id,
        type=r.type.value if hasattr(r.type, "value") else str(r.type),
        date=str(r.date),
        responses=_parse_responses(r.responses),
        energy_level=r.energy_level,
        mood=r.mood,
        note=r.note,
    )


@router.post(
    "",
    response_model=ReflectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a reflection",
)
def post_reflection(payload: ReflectionCreate, db: Session = Depends(get_db)):
    reflection = create_reflection(
        db,
        type=payload.type,
        day=payload.date or datetime.now(tz=timezone.utc).date(),
        responses=payload.responses,
        energy_level=payload.energy_level,
        mood=payload.mood,
        note=payload.note,
    )
    return _reflection_to_response(reflection)


@router.get(
    "",
    response_model=list[ReflectionResponse],
    summary="List reflections, newest first",
)
def get_reflections(
    limit: int = Query(default=50, ge=1, le=500, description="Page size."),
    db: Session = Depends(get_db),
):
    return [_reflection_to_response(r) for r in list_reflections(db, limit=limit)]
