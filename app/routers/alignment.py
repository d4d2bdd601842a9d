"""
Alignment router — per-pillar scores, trends and alignment states.

GET  /alignment              — score every pillar over a date range
POST /alignment/snapshots    — persist the current scores as trend baselines
GET  /alignment/snapshots    — list stored snapshots
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.performance_snapshot import PerformanceSnapshot
from app.schemas.alignment import (
    AlignmentReportResponse,
    PillarAlignmentResponse,
    SnapshotListResponse,
    SnapshotResponse,
    StandardAlignmentResponse,
)
from app.services.alignment_engine import PillarAlignment, StandardAlignment
from app.services.alignment_service import (
    AlignmentReport,
    get_alignments,
    list_snapshots,
    resolve_range,
    save_snapshots,
)

router = APIRouter(prefix="/alignment", tags=["alignment"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _standard_to_response(sa: StandardAlignment) -> StandardAlignmentResponse:
    return StandardAlignmentResponse(
        standard_id=sa.standard.id,
        standard_label=sa.standard.label,
        observed=sa.observed,
        target=sa.target,
        score=sa.score,
        label=sa.label,
    )


def _pillar_to_response(pa: PillarAlignment) -> PillarAlignmentResponse:
    return PillarAlignmentResponse(
        pillar_id=pa.pillar_id,
        pillar_name=pa.pillar_name,
        pillar_color=pa.pillar_color,
        score=pa.score,
        alignment_state=pa.alignment_state,
        trend=pa.trend,
        standards=[_standard_to_response(sa) for sa in pa.standards],
        habit_count=pa.habit_count,
        completed_habit_count=pa.completed_habit_count,
    )


def _report_to_response(report: AlignmentReport) -> AlignmentReportResponse:
    return AlignmentReportResponse(
        from_date=str(report.date_range.from_date),
        to_date=str(report.date_range.to_date),
        overall_score=report.overall_score,
        pillars=[_pillar_to_response(pa) for pa in report.alignments],
    )


def _snapshot_to_response(s: PerformanceSnapshot) -> SnapshotResponse:
    return SnapshotResponse(
        id=s.id,
        pillar_id=s.pillar_id,
        period_start=str(s.period_start),
        period_end=str(s.period_end),
        score=s.score,
        alignment_state=s.alignment_state,
        trend=s.trend,
        note=s.note,
    )


# ---------------------------------------------------------------------------
# GET /alignment
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=AlignmentReportResponse,
    summary="Alignment score, trend and state for every pillar",
    responses={422: {"description": "Invalid or inverted date range."}},
)
def alignment(
    from_date: Optional[date] = Query(
        default=None,
        alias="from",
        description="First day (inclusive). Defaults to 27 days before `to`.",
        examples=["2026-01-05"],
    ),
    to_date: Optional[date] = Query(
        default=None,
        alias="to",
        description="Last day (inclusive). Defaults to today (UTC).",
        examples=["2026-02-01"],
    ),
    db: Session = Depends(get_db),
):
    """
    Compare declared standards against habit logs for each pillar.

    ### Scoring
    - **Standard score** = completed habit days / expected habit days × 100,
      pooled over every active habit of the pillar.
    - **Pillar score** = mean of its standard scores; pillars without
      standards use the pooled habit rate; pillars with neither score 0.
    - **Trend** compares against the latest snapshot that ended before
      `from` (±5 points is flat).

    ### States (first match wins)
    | Condition | State |
    |---|---|
    | score ≥ 80 | `aligned` |
    | score ≥ 60 and trend up | `improving` |
    | score ≥ 40 | `drifting` |
    | score < 40 and trend down | `regressing` |
    | otherwise | `avoiding` |
    """
    window = resolve_range(from_date, to_date)
    return _report_to_response(get_alignments(db, window))


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

@router.post(
    "/snapshots",
    response_model=SnapshotListResponse,
    summary="Store the range's pillar scores as trend baselines",
    responses={422: {"description": "Invalid or inverted date range."}},
)
def create_snapshots(
    from_date: Optional[date] = Query(
        default=None,
        alias="from",
        description="First day (inclusive). Defaults to 27 days before `to`.",
        examples=["2026-01-05"],
    ),
    to_date: Optional[date] = Query(
        default=None,
        alias="to",
        description="Last day (inclusive). Defaults to today (UTC).",
        examples=["2026-02-01"],
    ),
    db: Session = Depends(get_db),
):
    """
    Score the range and upsert one snapshot per pillar keyed by
    (pillar, last day of the range). Calling twice updates in place.
    """
    window = resolve_range(from_date, to_date)
    rows = save_snapshots(db, window)
    return SnapshotListResponse(
        total=len(rows),
        items=[_snapshot_to_response(s) for s in rows],
    )


@router.get(
    "/snapshots",
    response_model=SnapshotListResponse,
    summary="List stored snapshots, newest first",
    responses={404: {"description": "Pillar not found."}},
)
def get_snapshots(
    pillar_id: Optional[int] = Query(default=None, description="Only this pillar."),
    limit: int = Query(default=100, ge=1, le=500, description="Page size."),
    db: Session = Depends(get_db),
):
    rows = list_snapshots(db, pillar_id=pillar_id, limit=limit)
    return SnapshotListResponse(
        total=len(rows),
        items=[_snapshot_to_response(s) for s in rows],
    )
