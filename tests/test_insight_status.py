"""Tests for the insight outreach status workflow."""

from __future__ import annotations

import pytest

from app.models.enums import InsightStatus
from app.services.feedback import InsightNotFoundError
from app.services.insight_status import (
    InvalidStatusTransitionError,
    batch_update_status,
    check_transition,
    update_insight_status,
)
from tests.factories import make_insight, make_signal


class TestCheckTransition:
    def test_forward(self):
        assert check_transition("pending", InsightStatus.APPROVED) is True

    def test_same_status_is_noop(self):
        assert check_transition("approved", InsightStatus.APPROVED) is False

    def test_backward_rejected(self):
        with pytest.raises(InvalidStatusTransitionError):
            check_transition("sent", InsightStatus.READY_TO_SEND)


class TestUpdateInsightStatus:
    def test_defaults_to_approved(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        assert update_insight_status(db, insight.id, user.id).status == "approved"

    def test_can_skip_ahead(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        assert update_insight_status(db, insight.id, user.id, "sent").status == "sent"

    def test_backward_move_rejected(self, db, user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective, status="sent")
        with pytest.raises(InvalidStatusTransitionError):
            update_insight_status(db, insight.id, user.id, InsightStatus.APPROVED)
        db.refresh(insight)
        assert insight.status == "sent"

    def test_not_owned(self, db, other_user, partner, objective):
        insight = make_insight(db, make_signal(db, partner), objective)
        with pytest.raises(InsightNotFoundError):
            update_insight_status(db, insight.id, other_user.id)


class TestBatchUpdateStatus:
    def test_updates_owned_and_ignores_foreign_ids(self, db, user, other_user, partner, objective):
        from app.models import Partner

        a = make_insight(db, make_signal(db, partner), objective)
        b = make_insight(db, make_signal(db, partner), objective)
        foreign_partner = Partner(user_id=other_user.id, name="Other Co")
        db.add(foreign_partner)
        db.commit()
        foreign = make_insight(db, make_signal(db, foreign_partner))

        updated = batch_update_status(db, [a.id, b.id, foreign.id], user.id, "ready_to_send")

        assert sorted(i.id for i in updated) == sorted([a.id, b.id])
        assert {i.status for i in updated} == {"ready_to_send"}
        db.refresh(foreign)
        assert foreign.status == "pending"

    def test_already_at_status_is_included(self, db, user, partner, objective):
        a = make_insight(db, make_signal(db, partner), objective, status="approved")
        updated = batch_update_status(db, [a.id], user.id)
        assert [i.status for i in updated] == ["approved"]

    def test_backward_move_aborts_whole_batch(self, db, user, partner, objective):
        a = make_insight(db, make_signal(db, partner), objective)
        b = make_insight(db, make_signal(db, partner), objective, status="sent")
        with pytest.raises(InvalidStatusTransitionError):
            batch_update_status(db, [a.id, b.id], user.id, "approved")
        db.refresh(a)
        assert a.status == "pending"

    def test_none_owned(self, db, user, other_user, partner, objective):
        a = make_insight(db, make_signal(db, partner), objective)
        with pytest.raises(InsightNotFoundError):
            batch_update_status(db, [a.id], other_user.id)

    @pytest.mark.parametrize("ids", [[], list(range(1, 52))])
    def test_batch_size_limits(self, db, user, ids):
        with pytest.raises(ValueError, match="between 1 and 50"):
            batch_update_status(db, ids, user.id)
