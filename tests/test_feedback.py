"""Tests for insight feedback and the weight learning loop."""

from __future__ import annotations

import pytest

from app.models.enums import WeightDimension
from app.services.feedback import InsightNotFoundError, record_feedback
from app.services.objectives import delete_objective
from app.services.preference_store import InMemoryWeightStore, SqlWeightStore
from tests.factories import make_insight, make_signal


class TestRecordFeedback:
    def test_thumbs_up_moves_both_weights(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner, type="launch"), objective)

        updated = record_feedback(db, insight.id, "thumbs_up", user.id)

        assert updated.feedback == "thumbs_up"
        weights = SqlWeightStore(db).get_weights(user.id)
        assert weights.for_signal_type("launch") == pytest.approx(1.1)
        assert weights.for_objective_type("marketplace") == pytest.approx(1.1)

    @pytest.mark.parametrize("feedback, expected", [("thumbs_down", 0.9), ("na", 0.85)])
    def test_negative_deltas(self, db, user, partner, objective, feedback, expected):
        insight = make_insight(db, make_signal(db, partner), objective)
        store = InMemoryWeightStore()

        record_feedback(db, insight.id, feedback, user.id, store=store)

        assert store.get_weights(user.id).for_signal_type("marketplace") == pytest.approx(expected)
        assert store.get_weights(user.id).for_objective_type("marketplace") == pytest.approx(expected)

    def test_repeat_feedback_keeps_learning(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        store = InMemoryWeightStore()
        record_feedback(db, insight.id, "thumbs_up", user.id, store=store)
        record_feedback(db, insight.id, "thumbs_up", user.id, store=store)
        assert store.get_weights(user.id).for_signal_type("marketplace") == pytest.approx(1.2)

    def test_insight_without_objective_only_moves_signal_weight(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        delete_objective(db, objective.id, user.id)
        db.refresh(insight)
        store = InMemoryWeightStore()

        record_feedback(db, insight.id, "thumbs_up", user.id, store=store)

        weights = store.get_weights(user.id)
        assert weights.for_signal_type("marketplace") == pytest.approx(1.1)
        assert dict(weights.objective_type_weights) == {}

    def test_invalid_feedback_rejected_before_any_change(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        with pytest.raises(ValueError):
            record_feedback(db, insight.id, "meh", user.id)
        db.refresh(insight)
        assert insight.feedback is None

    def test_other_users_insight_not_found(self, db, user, other_user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        store = InMemoryWeightStore()
        with pytest.raises(InsightNotFoundError):
            record_feedback(db, insight.id, "thumbs_up", other_user.id, store=store)
        assert store.get_weights(other_user.id).signal_type_weights == {}

    def test_missing_insight(self, db, user):
        with pytest.raises(InsightNotFoundError):
            record_feedback(db, 9999, "na", user.id)

    def test_feedback_uses_weight_dimension_keys(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner, type="hire"), objective)
        store = InMemoryWeightStore()
        record_feedback(db, insight.id, "thumbs_down", user.id, store=store)
        assert store._weights == {
            (user.id, WeightDimension.SIGNAL_TYPE.value, "hire"): pytest.approx(0.9),
            (user.id, WeightDimension.OBJECTIVE_TYPE.value, "marketplace"): pytest.approx(0.9),
        }
