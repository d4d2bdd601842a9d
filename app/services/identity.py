"""
Identity service: declared pillars and their standards.

Deleting a pillar removes its standards, snapshots and advisory alerts, and
leaves its habits and goals unassigned (pillar_id = NULL) so their logs and
milestones survive.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import PillarNotFoundError, StandardNotFoundError
from app.models.advisory_alert import AdvisoryAlert
from app.models.goal import Goal
from app.models.habit import Habit
from app.models.performance_snapshot import PerformanceSnapshot
from app.models.pillar import Pillar, Standard

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pillars
# ---------------------------------------------------------------------------

def list_pillars(db: Session) -> list[Pillar]:
    return db.query(Pillar).order_by(Pillar.order, Pillar.id).all()


def get_pillar(db: Session, pillar_id: int) -> Pillar:
    pillar = db.get(Pillar, pillar_id)
    if pillar is None:
        raise PillarNotFoundError(pillar_id)
    return pillar


def create_pillar(
    db: Session,
    name: str,
    color: str,
    description: str = "",
    order: Optional[int] = None,
) -> Pillar:
    """Append a pillar; without an explicit order it goes last."""
    if order is None:
        current_max = db.query(func.max(Pillar.order)).scalar()
        order = 0 if current_max is None else current_max + 1

    pillar = Pillar(name=name, color=color, description=description, order=order)
    db.add(pillar)
    db.commit()
    db.refresh(pillar)
    logger.info("Created pillar %s (%r)", pillar.id, pillar.name)
    return pillar


def update_pillar(db: Session, pillar_id: int, **changes) -> Pillar:
    pillar = get_pillar(db, pillar_id)
    for key, value in changes.items():
        if value is not None:
            setattr(pillar, key, value)
    db.commit()
    db.refresh(pillar)
    return pillar


def delete_pillar(db: Session, pillar_id: int) -> None:
    pillar = get_pillar(db, pillar_id)

    db.query(Standard).filter(Standard.pillar_id == pillar_id).delete()
    db.query(PerformanceSnapshot).filter(PerformanceSnapshot.pillar_id == pillar_id).delete()
    db.query(Habit).filter(Habit.pillar_id == pillar_id).update({Habit.pillar_id: None})
    db.query(Goal).filter(Goal.pillar_id == pillar_id).update({Goal.pillar_id: None})
    db.query(AdvisoryAlert).filter(AdvisoryAlert.pillar_id == pillar_id).delete()
    db.delete(pillar)
    db.commit()
    logger.info("Deleted pillar %s", pillar_id)


# ---------------------------------------------------------------------------
# Standards
# ---------------------------------------------------------------------------

def list_standards(db: Session, pillar_id: Optional[int] = None) -> list[Standard]:
    q = db.query(Standard)
    if pillar_id is not None:
        get_pillar(db, pillar_id)
        q = q.filter(Standard.pillar_id == pillar_id)
    return q.order_by(Standard.id).all()


def create_standard(
    db: Session,
    pillar_id: int,
    label: str,
    target: float,
    unit: str,
    metric: str = "",
) -> Standard:
    get_pillar(db, pillar_id)
    standard = Standard(
        pillar_id=pillar_id, label=label, target=target, unit=unit, metric=metric,
    )
    db.add(standard)
    db.commit()
    db.refresh(standard)
    logger.info("Created standard %s under pillar %s", standard.id, pillar_id)
    return standard


def delete_standard(db: Session, standard_id: int) -> None:
    standard = db.get(Standard, standard_id)
    if standard is None:
        raise StandardNotFoundError(standard_id)
    db.delete(standard)
    db.commit()
