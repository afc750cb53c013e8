"""Tests for insight synthesis, LLM response parsing and draft formatting."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.config import Settings
from app.services.insights import (
    DEFAULT_ACTION,
    FALLBACK_RECOMMENDATION,
    InsightParseError,
    InsightResult,
    format_objective_type,
    format_outreach_draft,
    generate_default_outreach_draft,
    generate_insight,
    parse_insight_response,
    select_primary_objective,
)
from app.services.scoring import PreferenceWeights

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _settings(**overrides) -> Settings:
    s = object.__new__(Settings)
    s.llm_provider = "openai"
    s.llm_api_key = None
    s.insight_llm_adjustment_bound = 20
    for k, v in overrides.items():
        setattr(s, k, v)
    return s


def _signal(**overrides):
    fields = dict(
        type="marketplace",
        title="Acme is now on AWS Marketplace",
        summary="- Listed on AWS Marketplace",
        source_url="https://acme.com/blog/aws",
        facets=None,
        published_at=NOW,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _objective(type_: str = "marketplace", priority: int = 1, detail: str | None = "AWS"):
    return SimpleNamespace(type=type_, priority=priority, detail=detail)


def _llm_reply(score: float = 90, **overrides) -> str:
    payload = {
        "why": "Acme's AWS listing supports your Marketplace objective.",
        "score": score,
        "recommendation": "Propose a joint AWS private offer.",
        "actions": [{"label": "Email Acme alliances", "ownerHint": "Partner Manager", "dueInDays": 3}],
        "outreachDraft": "Hi Sam,\n\nCongrats on the AWS listing.\n\nBest regards",
    }
    payload.update(overrides)
    return json.dumps(payload)


def _mock_llm(reply: str) -> MagicMock:
    llm = MagicMock()
    llm.complete.return_value = reply
    return llm


class TestGenerateInsight:
    def test_no_objectives_returns_none(self):
        assert generate_insight(_signal(), [], llm=_mock_llm(_llm_reply()), settings=_settings()) is None

    def test_llm_adjustment_is_bounded_upward(self):
        result = generate_insight(
            _signal(), [_objective()], llm=_mock_llm(_llm_reply(score=100)), settings=_settings(), now=NOW
        )
        assert result.breakdown.llm_adjustment == 15
        assert result.score == 100
        assert not result.used_fallback

    def test_llm_adjustment_is_bounded_downward(self):
        result = generate_insight(
            _signal(), [_objective()], llm=_mock_llm(_llm_reply(score=10)), settings=_settings(), now=NOW
        )
        assert result.breakdown.llm_adjustment == -20
        assert result.score == 65

    def test_bound_comes_from_settings(self):
        result = generate_insight(
            _signal(),
            [_objective()],
            llm=_mock_llm(_llm_reply(score=10)),
            settings=_settings(insight_llm_adjustment_bound=5),
            now=NOW,
        )
        assert result.score == 80

    def test_uses_llm_text_and_formats_draft(self):
        result = generate_insight(
            _signal(), [_objective()], llm=_mock_llm(_llm_reply()), settings=_settings(), now=NOW
        )
        assert result.why.startswith("Acme's AWS listing")
        assert result.recommendation == "Propose a joint AWS private offer."
        assert result.actions_as_dicts() == [
            {"label": "Email Acme alliances", "ownerHint": "Partner Manager", "dueInDays": 3}
        ]
        assert result.outreach_draft == "Hi Sam,\n\nCongrats on the AWS listing.\n\nBest regards"

    def test_llm_call_shape(self):
        llm = _mock_llm(_llm_reply())
        generate_insight(
            _signal(), [_objective("co_market", 2, "Joint webinars")], llm=llm, settings=_settings(), now=NOW
        )
        args, kwargs = llm.complete.call_args
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["system_prompt"]
        prompt = args[0]
        assert '"Co-Marketing"' in prompt
        assert '"medium"' in prompt
        assert "Acme is now on AWS Marketplace" in prompt

    def test_primary_objective_drives_base_score(self):
        objectives = [_objective("co_sell", 2), _objective("marketplace", 1)]
        result = generate_insight(
            _signal(), objectives, llm=_mock_llm(_llm_reply(score=85)), settings=_settings(), now=NOW
        )
        assert result.objective is objectives[1]
        assert result.breakdown.objective_match_bonus == 30

    def test_weights_flow_into_base_score(self):
        weights = PreferenceWeights({"marketplace": 0.5}, {})
        result = generate_insight(
            _signal(), [_objective()], weights, llm=_mock_llm("nope"), settings=_settings(), now=NOW
        )
        assert result.breakdown.base_score == 20

    @pytest.mark.parametrize(
        "reply",
        [
            "",
            "not json",
            "[1, 2]",
            _llm_reply(score="high"),
            _llm_reply(why="   "),
            _llm_reply(actions=[]),
            _llm_reply(actions="call them"),
        ],
    )
    def test_bad_llm_output_falls_back(self, reply):
        result = generate_insight(
            _signal(), [_objective()], llm=_mock_llm(reply), settings=_settings(), now=NOW
        )
        assert result.used_fallback
        assert result.score == 85
        assert result.breakdown.llm_adjustment == 0

    def test_llm_exception_falls_back(self, caplog):
        llm = MagicMock()
        llm.complete.side_effect = TimeoutError("slow")
        with caplog.at_level("ERROR"):
            result = generate_insight(_signal(), [_objective()], llm=llm, settings=_settings(), now=NOW)
        assert result.used_fallback
        assert "Insight LLM call failed" in caplog.text

    def test_missing_api_key_falls_back(self):
        result = generate_insight(_signal(), [_objective()], settings=_settings(), now=NOW)
        assert result.used_fallback

    def test_fallback_content(self):
        result = generate_insight(
            _signal(type="launch"),
            [_objective("co_market", 1)],
            llm=_mock_llm("nope"),
            settings=_settings(),
            now=NOW,
        )
        assert result.why == "This launch signal aligns with your Co-Marketing objective."
        assert result.recommendation == FALLBACK_RECOMMENDATION
        assert result.actions == [DEFAULT_ACTION]
        assert result.outreach_draft == generate_default_outreach_draft("Acme is now on AWS Marketplace")


class TestParseInsightResponse:
    def test_valid(self):
        score, why, rec, actions, draft = parse_insight_response(_llm_reply(score=72.5))
        assert score == 72.5
        assert why and rec and draft
        assert actions[0].due_in_days == 3

    def test_drops_malformed_actions_and_defaults_owner(self):
        _, _, _, actions, _ = parse_insight_response(
            _llm_reply(actions=[{"label": ""}, "x", {"label": "Book a call", "dueInDays": "5"}])
        )
        assert len(actions) == 1
        assert actions[0].label == "Book a call"
        assert actions[0].owner_hint == "Partner Manager"
        assert actions[0].due_in_days == 5

    def test_boolean_score_rejected(self):
        with pytest.raises(InsightParseError):
            parse_insight_response(_llm_reply(score=True))

    def test_missing_draft_rejected(self):
        payload = json.loads(_llm_reply())
        del payload["outreachDraft"]
        with pytest.raises(InsightParseError, match="outreachDraft"):
            parse_insight_response(json.dumps(payload))


class TestHelpers:
    def test_format_objective_type(self):
        assert format_objective_type("co_sell") == "Co-Sell"
        assert format_objective_type("co_market") == "Co-Marketing"
        assert format_objective_type("something_new") == "something_new"

    def test_select_primary_objective_keeps_order_on_ties(self):
        a, b = _objective("co_sell", 2), _objective("vertical", 2)
        assert select_primary_objective([a, b]) is a

    @pytest.mark.parametrize("score, stored", [(42.5, 43), (42.49, 42), (0.0, 0), (99.5, 100)])
    def test_rounded_score_half_up(self, score, stored):
        result = InsightResult(
            why="w", score=score, recommendation="r", actions=[], outreach_draft="d", breakdown=None
        )
        assert result.rounded_score == stored


class TestFormatOutreachDraft:
    def test_rejoins_dangling_title_with_connector(self):
        draft = "Hi there,\n\nI noticed\nAcme launches v2\nand thought we should talk.\n\nBest regards"
        assert format_outreach_draft(draft) == (
            'Hi there,\n\nI noticed "Acme launches v2" and thought we should talk.\n\nBest regards'
        )

    def test_rejoins_dangling_title_without_connector(self):
        draft = "I saw\nAcme Series B\nCongrats to the team."
        assert format_outreach_draft(draft) == 'I saw "Acme Series B" Congrats to the team.'

    def test_keeps_single_blank_line_between_paragraphs(self):
        assert format_outreach_draft("Hi,\n\n\n\nBody here.\n\nBest") == "Hi,\n\nBody here.\n\nBest"

    def test_strips_leading_blank_lines_and_trailing_spaces(self):
        assert format_outreach_draft("\n\n  Hello there.  \nThanks") == "Hello there.\nThanks"

    def test_merges_broken_sentence(self):
        assert format_outreach_draft("We loved the\nAnnouncement today.") == "We loved the Announcement today."

    def test_does_not_merge_into_closing(self):
        assert format_outreach_draft("Looking forward\nBest regards") == "Looking forward\nBest regards"

    def test_default_draft_is_stable(self):
        draft = generate_default_outreach_draft("Acme 2.0")
        assert format_outreach_draft(draft) == draft

    def test_empty(self):
        assert format_outreach_draft("") == ""
