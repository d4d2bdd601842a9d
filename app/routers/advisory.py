"""
Advisory router.

POST   /advisory/evaluate                 — run the rules, store new alerts
GET    /advisory/alerts                   — list alerts (newest first)
POST   /advisory/alerts/{alert_id}/dismiss
DELETE /advisory/alerts/dismissed
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.advisory_alert import AdvisoryAlert
from app.schemas.advisory import (
    AdvisoryEvaluationResponse,
    AlertListResponse,
    AlertResponse,
    ClearDismissedResponse,
)
from app.services.advisory_engine import (
    clear_dismissed,
    dismiss_alert,
    evaluate_and_react,
    list_alerts,
)

router = APIRouter(prefix="/advisory", tags=["advisory"])


def _alert_to_response(a: AdvisoryAlert) -> AlertResponse:
    return AlertResponse(
        id=a.id,
        severity=a.severity,
        pillar_id=a.pillar_id,
        title=a.title,
        message=a.message,
        action=a.action,
        dismissed_at=a.dismissed_at.isoformat() if a.dismissed_at else None,
        created_at=a.created_at.isoformat() if a.created_at else "",
    )


@router.post(
    "/evaluate",
    response_model=AdvisoryEvaluationResponse,
    summary="Evaluate advisory rules against the current alignment",
)
def evaluate(db: Session = Depends(get_db)):
    """
    Score the trailing 28-day window and run every advisory rule.

    ### Rules
    | Alert id | Severity | Trigger |
    |---|---|---|
    | `drift-{pillar}` | challenge | score fell > 20 points vs previous snapshot |
    | `streak-broken-{habit}` | warning | yesterday missed after a ≥ 7-day streak |
    | `standard-viol-{standard}` | challenge | standard score < 50 |
    | `regressing-{pillar}` | warning | pillar state is `regressing` |
    | `no-reflection-ever` / `no-reflection-7d` | warning | no reflection, or none in 7 days |
    | `goal-stale-{goal}` | warning | active goal ≥ 90 days old, no completed milestone |
    | `overall-regression` | challenge | mean score > 10 below previous mean |
    | `weekend-drift` | insight | Sunday PM mood > 2 below other PM moods (≥ 4 PM reflections, ≥ 2 each) |
    | `all-aligned` | opportunity | ≥ 2 pillars, all ≥ 80 |

    Idempotent: an alert id is stored at most once and dismissed alerts
    are not recreated.
    """
    result = evaluate_and_react(db)
    return AdvisoryEvaluationResponse(created=result.created, skipped=result.skipped)


@router.get(
    "/alerts",
    response_model=AlertListResponse,
    summary="List advisory alerts",
)
def get_alerts(
    active_only: bool = Query(default=False, description="Hide dismissed alerts."),
    db: Session = Depends(get_db),
):
    items = list_alerts(db, active_only=active_only)
    return AlertListResponse(
        total=len(items),
        items=[_alert_to_response(a) for a in items],
    )


@router.post(
    "/alerts/{alert_id}/dismiss",
    response_model=AlertResponse,
    summary="Dismiss an alert",
    responses={404: {"description": "Alert not found."}},
)
def dismiss(alert_id: str, db: Session = Depends(get_db)):
    return _alert_to_response(dismiss_alert(db, alert_id))


@router.delete(
    "/alerts/dismissed",
    response_model=ClearDismissedResponse,
    summary="Delete dismissed alerts",
)
def delete_dismissed(db: Session = Depends(get_db)):
    """Removed alerts may be recreated by the next evaluation."""
    return ClearDismissedResponse(removed=clear_dismissed(db))
