"""
Identity router — pillars and their standards.

POST   /pillars
GET    /pillars
GET    /pillars/{pillar_id}
PATCH  /pillars/{pillar_id}
DELETE /pillars/{pillar_id}
POST   /pillars/{pillar_id}/standards
GET    /pillars/{pillar_id}/standards
DELETE /standards/{standard_id}
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.pillar import Pillar, Standard
from app.schemas.identity import (
    PillarCreate,
    PillarResponse,
    PillarUpdate,
    StandardCreate,
    StandardResponse,
)
from app.services import identity

router = APIRouter(tags=["identity"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _pillar_to_response(p: Pillar) -> PillarResponse:
    return PillarResponse(
        id=p.id,
        name=p.name,
        color=p.color,
        description=p.description,
        order=p.order,
    )


def _standard_to_response(s: Standard) -> StandardResponse:
    return StandardResponse(
        id=s.id,
        pillar_id=s.pillar_id,
        label=s.label,
        metric=s.metric,
        target=s.target,
        unit=s.unit,
    )


# ---------------------------------------------------------------------------
# Pillars
# ---------------------------------------------------------------------------

@router.post(
    "/pillars",
    response_model=PillarResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Declare a pillar",
)
def create_pillar(payload: PillarCreate, db: Session = Depends(get_db)):
    pillar = identity.create_pillar(
        db,
        name=payload.name,
        color=payload.color,
        description=payload.description,
        order=payload.order,
    )
    return _pillar_to_response(pillar)


@router.get(
    "/pillars",
    response_model=list[PillarResponse],
    summary="List pillars in display order",
)
def list_pillars(db: Session = Depends(get_db)):
    return [_pillar_to_response(p) for p in identity.list_pillars(db)]


@router.get(
    "/pillars/{pillar_id}",
    response_model=PillarResponse,
    summary="Get one pillar",
    responses={404: {"description": "Pillar not found."}},
)
def get_pillar(pillar_id: int, db: Session = Depends(get_db)):
    return _pillar_to_response(identity.get_pillar(db, pillar_id))


@router.patch(
    "/pillars/{pillar_id}",
    response_model=PillarResponse,
    summary="Edit a pillar",
    responses={404: {"description": "Pillar not found."}},
)
def update_pillar(pillar_id: int, payload: PillarUpdate, db: Session = Depends(get_db)):
    pillar = identity.update_pillar(db, pillar_id, **payload.model_dump(exclude_unset=True))
    return _pillar_to_response(pillar)


@router.delete(
    "/pillars/{pillar_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a pillar",
    responses={404: {"description": "Pillar not found."}},
)
def delete_pillar(pillar_id: int, db: Session = Depends(get_db)):
    """
    Delete a pillar together with its standards and snapshots.
    Its habits are kept but become unassigned.
    """
    identity.delete_pillar(db, pillar_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Standards
# ---------------------------------------------------------------------------

@router.post(
    "/pillars/{pillar_id}/standards",
    response_model=StandardResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Declare a standard under a pillar",
    responses={404: {"description": "Pillar not found."}},
)
def create_standard(pillar_id: int, payload: StandardCreate, db: Session = Depends(get_db)):
    standard = identity.create_standard(
        db,
        pillar_id=pillar_id,
        label=payload.label,
        target=payload.target,
        unit=payload.unit,
        metric=payload.metric,
    )
    return _standard_to_response(standard)


@router.get(
    "/pillars/{pillar_id}/standards",
    response_model=list[StandardResponse],
    summary="List a pillar's standards",
    responses={404: {"description": "Pillar not found."}},
)
def list_standards(pillar_id: int, db: Session = Depends(get_db)):
    return [_standard_to_response(s) for s in identity.list_standards(db, pillar_id)]


@router.delete(
    "/standards/{standard_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a standard",
    responses={404: {"description": "Standard not found."}},
)
def delete_standard(standard_id: int, db: Session = Depends(get_db)):
    identity.delete_standard(db, standard_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
