"""
Goal service: goals and their milestones.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import GoalNotFoundError, MilestoneNotFoundError
from app.models.goal import Goal, GoalStatus, Milestone
from app.services.identity import get_pillar

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

def get_goal(db: Session, goal_id: int) -> Goal:
    goal = db.get(Goal, goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return goal


def list_goals(
    db: Session,
    pillar_id: Optional[int] = None,
    status: Optional[GoalStatus] = None,
) -> list[Goal]:
    q = db.query(Goal)
    if pillar_id is not None:
        q = q.filter(Goal.pillar_id == pillar_id)
    if status is not None:
        q = q.filter(Goal.status == status)
    return q.order_by(Goal.id).all()


def create_goal(
    db: Session,
    title: str,
    pillar_id: Optional[int] = None,
    description: str = "",
    target_date: Optional[date] = None,
    status: GoalStatus = GoalStatus.active,
) -> Goal:
    if pillar_id is not None:
        get_pillar(db, pillar_id)
    goal = Goal(
        title=title,
        pillar_id=pillar_id,
        description=description,
        target_date=target_date,
        status=status,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info("Created goal %s (%r) under pillar %s", goal.id, goal.title, pillar_id)
    return goal


def update_goal(db: Session, goal_id: int, **changes) -> Goal:
    goal = get_goal(db, goal_id)
    if changes.get("pillar_id") is not None:
        get_pillar(db, changes["pillar_id"])
    for key, value in changes.items():
        if value is not None:
            setattr(goal, key, value)
    db.commit()
    db.refresh(goal)
    return goal


def delete_goal(db: Session, goal_id: int) -> None:
    """Delete a goal together with its milestones."""
    goal = get_goal(db, goal_id)
    db.query(Milestone).filter(Milestone.goal_id == goal_id).delete()
    db.delete(goal)
    db.commit()
    logger.info("Deleted goal %s", goal_id)


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------

def list_milestones(db: Session, goal_id: int) -> list[Milestone]:
    get_goal(db, goal_id)
    return (
        db.query(Milestone)
        .filter(Milestone.goal_id == goal_id)
        .order_by(Milestone.id)
        .all()
    )


def add_milestone(db: Session, goal_id: int, title: str) -> Milestone:
    get_goal(db, goal_id)
    milestone = Milestone(goal_id=goal_id, title=title, completed=False)
    db.add(milestone)
    db.commit()
    db.refresh(milestone)
    return milestone


def toggle_milestone(db: Session, milestone_id: int) -> Milestone:
    """Flip completion; completed_at follows the flag."""
    milestone = db.get(Milestone, milestone_id)
    if milestone is None:
        raise MilestoneNotFoundError(milestone_id)
    milestone.completed = not milestone.completed
    milestone.completed_at = datetime.now(tz=timezone.utc) if milestone.completed else None
    db.commit()
    db.refresh(milestone)
    return milestone


def delete_milestone(db: Session, milestone_id: int) -> None:
    milestone = db.get(Milestone, milestone_id)
    if milestone is None:
        raise MilestoneNotFoundError(milestone_id)
    db.delete(milestone)
    db.commit()
