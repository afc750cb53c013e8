"""Per-user preference weight storage.

Weights live in ``preference_weights`` rows keyed by (user, dimension, key).
Adjustments are applied server-side in a single UPDATE so concurrent feedback
on the same key accumulates instead of overwriting.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.enums import WeightDimension
from app.models.preference_weight import PreferenceWeight
from app.services.scoring import PreferenceWeights, clamp

logger = logging.getLogger(__name__)

WEIGHT_MIN = 0.5
WEIGHT_MAX = 2.0
DEFAULT_WEIGHT = 1.0


class WeightStore(ABC):
    """Read and adjust a user's learned scoring multipliers."""

    @abstractmethod
    def get_weights(self, user_id: int) -> PreferenceWeights:
        ...

    @abstractmethod
    def apply_adjustment(
        self, user_id: int, dimension: WeightDimension, key: str, delta: float
    ) -> float:
        """Add *delta* to the weight (default 1.0), clamp to [0.5, 2.0], return it."""
        ...


class InMemoryWeightStore(WeightStore):
    """Dict-backed store for scripts and unit tests."""

    def __init__(self) -> None:
        self._weights: dict[tuple[int, str, str], float] = {}

    def get_weights(self, user_id: int) -> PreferenceWeights:
        signal_weights: dict[str, float] = {}
        objective_weights: dict[str, float] = {}
        for (uid, dimension, key), weight in self._weights.items():
            if uid != user_id:
                continue
            if dimension == WeightDimension.SIGNAL_TYPE.value:
                signal_weights[key] = weight
            else:
                objective_weights[key] = weight
        return PreferenceWeights(signal_weights, objective_weights)

    def apply_adjustment(
        self, user_id: int, dimension: WeightDimension, key: str, delta: float
    ) -> float:
        slot = (user_id, WeightDimension(dimension).value, key)
        current = self._weights.get(slot, DEFAULT_WEIGHT)
        self._weights[slot] = clamp(current + delta, WEIGHT_MIN, WEIGHT_MAX)
        return self._weights[slot]


class SqlWeightStore(WeightStore):
    """SQLAlchemy-backed store. ``apply_adjustment`` commits."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_weights(self, user_id: int) -> PreferenceWeights:
        rows = self.db.execute(
            select(PreferenceWeight.dimension, PreferenceWeight.key, PreferenceWeight.weight).where(
                PreferenceWeight.user_id == user_id
            )
        ).all()
        signal_weights: dict[str, float] = {}
        objective_weights: dict[str, float] = {}
        for dimension, key, weight in rows:
            if dimension == WeightDimension.SIGNAL_TYPE.value:
                signal_weights[key] = weight
            elif dimension == WeightDimension.OBJECTIVE_TYPE.value:
                objective_weights[key] = weight
        return PreferenceWeights(signal_weights, objective_weights)

    def _atomic_update(self, user_id: int, dimension: str, key: str, delta: float) -> int:
        raw = PreferenceWeight.weight + delta
        clamped = case(
            (raw < WEIGHT_MIN, WEIGHT_MIN),
            (raw > WEIGHT_MAX, WEIGHT_MAX),
            else_=raw,
        )
        result = self.db.execute(
            update(PreferenceWeight)
            .where(
                PreferenceWeight.user_id == user_id,
                PreferenceWeight.dimension == dimension,
                PreferenceWeight.key == key,
            )
            .values(weight=clamped)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def _read(self, user_id: int, dimension: str, key: str) -> float:
        return self.db.execute(
            select(PreferenceWeight.weight).where(
                PreferenceWeight.user_id == user_id,
                PreferenceWeight.dimension == dimension,
                PreferenceWeight.key == key,
            )
        ).scalar_one()

    def apply_adjustment(
        self, user_id: int, dimension: WeightDimension, key: str, delta: float
    ) -> float:
        dimension_value = WeightDimension(dimension).value

        if self._atomic_update(user_id, dimension_value, key, delta) == 0:
            self.db.add(
                PreferenceWeight(
                    user_id=user_id,
                    dimension=dimension_value,
                    key=key,
                    weight=clamp(DEFAULT_WEIGHT + delta, WEIGHT_MIN, WEIGHT_MAX),
                )
            )
            try:
                self.db.commit()
            except IntegrityError:
                # Another request created the row first; apply on top of it
                self.db.rollback()
                logger.info(
                    "Preference weight insert raced: user_id=%s %s=%s, retrying as update",
                    user_id,
                    dimension_value,
                    key,
                )
                self._atomic_update(user_id, dimension_value, key, delta)
                self.db.commit()
        else:
            self.db.commit()

        weight = self._read(user_id, dimension_value, key)
        logger.debug(
            "Preference weight adjusted: user_id=%s %s=%s delta=%+.2f weight=%.2f",
            user_id,
            dimension_value,
            key,
            delta,
            weight,
        )
        return weight
