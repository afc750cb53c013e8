"""Tests for deeper-play follow-up drafts."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from app.llm.router import ModelRole
from app.models import Partner
from app.services.deeper_play import (
    DEFAULT_SUGGESTED_PLAY,
    generate_deeper_play,
    generate_default_deeper_play_draft,
    recent_partner_insights,
)
from app.services.partners import PartnerNotFoundError
from tests.factories import make_insight, make_signal


def _llm(reply: str) -> MagicMock:
    llm = MagicMock()
    llm.complete.return_value = reply
    return llm


def _reply(**fields) -> str:
    payload = {
        "outreachDraft": "Hi Sam,\n\nCongrats on the AWS listing.\n\nBest,\nPat",
        "suggestedPlay": "Co-sell through AWS Marketplace private offers.",
    }
    payload.update(fields)
    return json.dumps(payload)


class TestRecentInsights:
    def test_newest_five_for_partner(self, db, partner, objective):
        for n in range(6):
            make_insight(db, make_signal(db, partner, title=f"Update {n}"), objective)

        titles = [i.signal.title for i in recent_partner_insights(db, partner.id)]
        assert titles == [f"Update {n}" for n in (5, 4, 3, 2, 1)]


class TestGenerateDeeperPlay:
    def test_uses_llm_reply(self, db, partner, objective):
        make_insight(db, make_signal(db, partner, title="Acme lists on AWS Marketplace"), objective)
        llm = _llm(_reply())

        play = generate_deeper_play(db, partner.id, partner.user_id, llm=llm)

        assert play.suggested_play == "Co-sell through AWS Marketplace private offers."
        assert play.outreach_draft.startswith("Hi Sam,")
        assert not play.used_fallback
        prompt = llm.complete.call_args.args[0]
        assert "Acme lists on AWS Marketplace" in prompt
        assert "Relevant to your Marketplace objective." in prompt
        assert '"name": "Acme"' in prompt
        kwargs = llm.complete.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_works_without_insights(self, db, partner):
        play = generate_deeper_play(db, partner.id, partner.user_id, llm=_llm(_reply()))
        assert not play.used_fallback

    def test_missing_field_gets_its_default(self, db, partner):
        play = generate_deeper_play(
            db, partner.id, partner.user_id, llm=_llm(_reply(suggestedPlay=""))
        )
        assert play.suggested_play == DEFAULT_SUGGESTED_PLAY
        assert play.outreach_draft.startswith("Hi Sam,")
        assert play.used_fallback

    @pytest.mark.parametrize("reply", ["not json", "[1, 2]", ""])
    def test_bad_reply_uses_default(self, db, partner, reply):
        play = generate_deeper_play(db, partner.id, partner.user_id, llm=_llm(reply))
        assert play.outreach_draft == generate_default_deeper_play_draft("Acme")
        assert play.suggested_play == DEFAULT_SUGGESTED_PLAY
        assert play.used_fallback

    def test_llm_error_uses_default(self, db, partner):
        llm = MagicMock()
        llm.complete.side_effect = RuntimeError("timeout")
        play = generate_deeper_play(db, partner.id, partner.user_id, llm=llm)
        assert play.outreach_draft == generate_default_deeper_play_draft("Acme")

    def test_no_api_key_uses_default(self, db, partner):
        play = generate_deeper_play(db, partner.id, partner.user_id)
        assert play.used_fallback

    def test_reasoning_model_requested(self, db, partner):
        with patch(
            "app.services.deeper_play.get_llm_provider", return_value=_llm(_reply())
        ) as get_provider:
            generate_deeper_play(db, partner.id, partner.user_id)
        assert get_provider.call_args.kwargs["role"] is ModelRole.REASONING

    def test_other_users_partner(self, db, user, other_user):
        theirs = Partner(user_id=other_user.id, name="Theirs")
        db.add(theirs)
        db.commit()
        with pytest.raises(PartnerNotFoundError):
            generate_deeper_play(db, theirs.id, user.id, llm=_llm(_reply()))


def test_default_draft_names_partner():
    draft = generate_default_deeper_play_draft("Acme")
    assert "Acme's recent activities" in draft
    assert draft.startswith("Hi there,")
    assert draft.endswith("Best regards")
