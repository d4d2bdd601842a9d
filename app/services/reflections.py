"""
Reflection service: append and list journal entries.
"""
from __future__ import annotations

import json
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from app.models.reflection import Reflection, ReflectionType

logger = logging.getLogger(__name__)


def create_reflection(
    db: Session,
    type: ReflectionType,
    day: date,
    responses: Optional[dict[str, str]] = None,
    energy_level: Optional[int] = None,
    mood: Optional[int] = None,
    note: str = "",
) -> Reflection:
    reflection = Reflection(
        type=type,
        date=day,
        responses=json.dumps(responses) if responses else None,
        energy_level=energy_level,
        mood=mood,
        note=note,
    )
    db.add(reflection)
    db.commit()
    db.refresh(reflection)
    logger.info("Recorded %s reflection for %s", reflection.type, day)
    return reflection


def list_reflections(db: Session, limit: int = 50) -> list[Reflection]:
    """Newest first."""
    return (
        db.query(Reflection)
        .order_by(Reflection.date.desc(), Reflection.id.desc())
        .limit(limit)
        .all()
    )
