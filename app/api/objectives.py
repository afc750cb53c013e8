"""Objective API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_auth
from app.models.user import User
from app.schemas.objective import ObjectiveCreate, ObjectiveRead, ObjectiveUpdate
from app.services.objectives import (
    ObjectiveNotFoundError,
    create_objective,
    delete_objective,
    list_objectives,
    update_objective,
)

router = APIRouter()


@router.get("", response_model=list[ObjectiveRead])
def get_objectives(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> list[ObjectiveRead]:
    """List objectives, highest priority first."""
    return [ObjectiveRead.model_validate(o) for o in list_objectives(db, current_user.id)]


@router.post("", response_model=ObjectiveRead, status_code=status.HTTP_201_CREATED)
def post_objective(
    body: ObjectiveCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> ObjectiveRead:
    return ObjectiveRead.model_validate(create_objective(db, current_user.id, body))


@router.patch("/{objective_id}", response_model=ObjectiveRead)
def patch_objective(
    objective_id: int,
    body: ObjectiveUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> ObjectiveRead:
    try:
        objective = update_objective(db, objective_id, current_user.id, body)
    except ObjectiveNotFoundError:
        raise HTTPException(status_code=404, detail="Objective not found") from None
    return ObjectiveRead.model_validate(objective)


@router.delete("/{objective_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_objective(
    objective_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_auth),
) -> None:
    try:
        delete_objective(db, objective_id, current_user.id)
    except ObjectiveNotFoundError:
        raise HTTPException(status_code=404, detail="Objective not found") from None
