"""
Goals router.

POST   /goals
GET    /goals
GET    /goals/{goal_id}
PATCH  /goals/{goal_id}
DELETE /goals/{goal_id}
POST   /goals/{goal_id}/milestones
GET    /goals/{goal_id}/milestones
POST   /milestones/{milestone_id}/toggle
DELETE /milestones/{milestone_id}
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.goal import Goal, GoalStatus, Milestone
from app.schemas.goal import (
    GoalCreate,
    GoalResponse,
    GoalUpdate,
    MilestoneCreate,
    MilestoneResponse,
)
from app.services import goals

router = APIRouter(tags=["goals"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _goal_to_response(g: Goal) -> GoalResponse:
    return GoalResponse(
        id=g.id,
        title=g.title,
        pillar_id=g.pillar_id,
        description=g.description,
        target_date=str(g.target_date) if g.target_date else None,
        status=g.status.value if hasattr(g.status, "value") else str(g.status),
        created_at=g.created_at.isoformat() if g.created_at else "",
    )


def _milestone_to_response(m: Milestone) -> MilestoneResponse:
    return MilestoneResponse(
        id=m.id,
        goal_id=m.goal_id,
        title=m.title,
        completed=m.completed,
        completed_at=m.completed_at.isoformat() if m.completed_at else None,
    )


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

@router.post(
    "/goals",
    response_model=GoalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a goal",
    responses={404: {"description": "Pillar not found."}},
)
def create_goal(payload: GoalCreate, db: Session = Depends(get_db)):
    goal = goals.create_goal(
        db,
        title=payload.title,
        pillar_id=payload.pillar_id,
        description=payload.description,
        target_date=payload.target_date,
        status=payload.status,
    )
    return _goal_to_response(goal)


@router.get(
    "/goals",
    response_model=list[GoalResponse],
    summary="List goals",
)
def list_goals(
    pillar_id: Optional[int] = Query(default=None, description="Only this pillar."),
    goal_status: Optional[GoalStatus] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
):
    rows = goals.list_goals(db, pillar_id=pillar_id, status=goal_status)
    return [_goal_to_response(g) for g in rows]


@router.get(
    "/goals/{goal_id}",
    response_model=GoalResponse,
    summary="Get one goal",
    responses={404: {"description": "Goal not found."}},
)
def get_goal(goal_id: int, db: Session = Depends(get_db)):
    return _goal_to_response(goals.get_goal(db, goal_id))


@router.patch(
    "/goals/{goal_id}",
    response_model=GoalResponse,
    summary="Edit a goal",
    responses={404: {"description": "Goal or pillar not found."}},
)
def update_goal(goal_id: int, payload: GoalUpdate, db: Session = Depends(get_db)):
    goal = goals.update_goal(db, goal_id, **payload.model_dump(exclude_unset=True))
    return _goal_to_response(goal)


@router.delete(
    "/goals/{goal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a goal and its milestones",
    responses={404: {"description": "Goal not found."}},
)
def delete_goal(goal_id: int, db: Session = Depends(get_db)):
    goals.delete_goal(db, goal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------

@router.post(
    "/goals/{goal_id}/milestones",
    response_model=MilestoneResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a milestone to a goal",
    responses={404: {"description": "Goal not found."}},
)
def add_milestone(goal_id: int, payload: MilestoneCreate, db: Session = Depends(get_db)):
    return _milestone_to_response(goals.add_milestone(db, goal_id, payload.title))


@router.get(
    "/goals/{goal_id}/milestones",
    response_model=list[MilestoneResponse],
    summary="List a goal's milestones",
    responses={404: {"description": "Goal not found."}},
)
def list_milestones(goal_id: int, db: Session = Depends(get_db)):
    return [_milestone_to_response(m) for m in goals.list_milestones(db, goal_id)]


@router.post(
    "/milestones/{milestone_id}/toggle",
    response_model=MilestoneResponse,
    summary="Flip a milestone between done and not done",
    responses={404: {"description": "Milestone not found."}},
)
def toggle_milestone(milestone_id: int, db: Session = Depends(get_db)):
    return _milestone_to_response(goals.toggle_milestone(db, milestone_id))


@router.delete(
    "/milestones/{milestone_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a milestone",
    responses={404: {"description": "Milestone not found."}},
)
def delete_milestone(milestone_id: int, db: Session = Depends(get_db)):
    goals.delete_milestone(db, milestone_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
