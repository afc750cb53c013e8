"""Objective CRUD scoped to the owning user."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.models.insight import Insight
from app.models.objective import Objective
from app.schemas.objective import ObjectiveCreate, ObjectiveUpdate


class ObjectiveNotFoundError(LookupError):
    """Objective does not exist or belongs to another user."""


def list_objectives(db: Session, user_id: int) -> list[Objective]:
    """Objectives ordered highest priority first."""
    return (
        db.query(Objective)
        .filter(Objective.user_id == user_id)
        .order_by(Objective.priority, Objective.created_at, Objective.id)
        .all()
    )


def get_objective(db: Session, objective_id: int, user_id: int) -> Objective:
    objective = (
        db.query(Objective)
        .filter(Objective.id == objective_id, Objective.user_id == user_id)
        .first()
    )
    if objective is None:
        raise ObjectiveNotFoundError(f"Objective {objective_id} not found")
    return objective


def create_objective(db: Session, user_id: int, data: ObjectiveCreate) -> Objective:
    objective = Objective(
        user_id=user_id,
        type=data.type.value,
        detail=data.detail or None,
        priority=data.priority,
    )
    db.add(objective)
    db.commit()
    db.refresh(objective)
    return objective


def update_objective(
    db: Session, objective_id: int, user_id: int, data: ObjectiveUpdate
) -> Objective:
    objective = get_objective(db, objective_id, user_id)
    updates = data.model_dump(exclude_unset=True)
    if updates.get("type") is not None:
        objective.type = updates["type"].value
    if updates.get("priority") is not None:
        objective.priority = updates["priority"]
    if "detail" in updates:
        objective.detail = updates["detail"] or None
    db.commit()
    db.refresh(objective)
    return objective


def delete_objective(db: Session, objective_id: int, user_id: int) -> None:
    """Delete an objective. Its insights are kept with ``objective_id`` set to NULL."""
    objective = get_objective(db, objective_id, user_id)
    # Mirrors ON DELETE SET NULL for backends that do not enforce foreign keys
    db.query(Insight).filter(Insight.objective_id == objective.id).update(
        {Insight.objective_id: None}, synchronize_session=False
    )
    db.delete(objective)
    db.commit()
