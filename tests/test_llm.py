"""
Tests for the LLM provider layer: OpenAIProvider and router.

All OpenAI API calls are mocked; no real network requests.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from openai import APITimeoutError, RateLimitError

from app.config import Settings
from app.llm.openai_provider import OpenAIProvider
from app.llm.router import ModelRole, clear_provider_cache, get_llm_provider


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clear_cache():
    """Ensure a clean provider cache for every test."""
    clear_provider_cache()
    yield
    clear_provider_cache()


def _make_mock_response(content: str | None = "Hello!", prompt_tokens: int = 10, completion_tokens: int = 5):
    """Build a fake ChatCompletion response object."""
    message = SimpleNamespace(content=content)
    choice = SimpleNamespace(message=message)
    usage = SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return SimpleNamespace(choices=[choice], usage=usage)


def _make_settings(**overrides) -> Settings:
    """Create a Settings instance with LLM defaults, without reading env."""
    s = object.__new__(Settings)  # skip __init__ (avoids env reads)
    s.llm_provider = "openai"
    s.llm_api_key = "test-key-123"
    s.llm_model_reasoning = "gpt-4o"
    s.llm_model_cheap = "gpt-4o-mini"
    s.llm_timeout = 30.0
    s.llm_max_retries = 2
    for k, v in overrides.items():
        setattr(s, k, v)
    return s


def _rate_limit_error() -> RateLimitError:
    return RateLimitError(message="rate limited", response=MagicMock(status_code=429), body=None)


# ---------------------------------------------------------------------------
# OpenAIProvider.complete()
# ---------------------------------------------------------------------------


class TestOpenAIProviderInit:
    def test_defaults(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            provider = OpenAIProvider(api_key="k")
        assert provider.model == "gpt-4o-mini"
        assert provider.timeout == 30.0
        assert provider.max_retries == 2
        assert MockOpenAI.call_args.kwargs["max_retries"] == 0

    def test_negative_max_retries_means_no_retries(self):
        with patch("app.llm.openai_provider.OpenAI"):
            provider = OpenAIProvider(api_key="k", max_retries=-1)
        assert provider.max_retries == 0


class TestOpenAIProviderComplete:
    def test_basic_complete_strips_text(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_client.chat.completions.create.return_value = _make_mock_response("  launch \n")

            provider = OpenAIProvider(api_key="k")
            result = provider.complete("hello")

        assert result == "launch"
        call_kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["messages"] == [{"role": "user", "content": "hello"}]
        assert call_kwargs["temperature"] == 0.7
        assert "max_tokens" not in call_kwargs

    def test_complete_with_system_prompt(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_client.chat.completions.create.return_value = _make_mock_response("ok")

            provider = OpenAIProvider(api_key="k")
            provider.complete("hi", system_prompt="be brief")

        messages = mock_client.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "hi"},
        ]

    def test_complete_passes_kwargs(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_client.chat.completions.create.return_value = _make_mock_response("{}")

            provider = OpenAIProvider(api_key="k")
            provider.complete(
                "json please",
                temperature=0.3,
                max_tokens=10,
                response_format={"type": "json_object"},
            )

        call_kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["temperature"] == 0.3
        assert call_kwargs["max_tokens"] == 10
        assert call_kwargs["response_format"] == {"type": "json_object"}

    def test_none_content_returns_empty_string(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_client.chat.completions.create.return_value = _make_mock_response(None)
            result = OpenAIProvider(api_key="k").complete("x")
        assert result == ""

    def test_retry_on_rate_limit(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI, \
             patch("app.llm.openai_provider.time") as mock_time:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_time.monotonic.return_value = 0.0
            mock_client.chat.completions.create.side_effect = [
                _rate_limit_error(),
                _make_mock_response("finally"),
            ]

            result = OpenAIProvider(api_key="k").complete("test")

        assert result == "finally"
        assert mock_client.chat.completions.create.call_count == 2
        mock_time.sleep.assert_called_once_with(1.0)

    def test_gives_up_after_max_retries(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI, \
             patch("app.llm.openai_provider.time") as mock_time:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_time.monotonic.return_value = 0.0
            timeout_err = APITimeoutError(request=MagicMock())
            mock_client.chat.completions.create.side_effect = [timeout_err] * 4

            provider = OpenAIProvider(api_key="k", max_retries=3)
            with pytest.raises(APITimeoutError):
                provider.complete("test")

        assert mock_client.chat.completions.create.call_count == 4
        assert [c.args[0] for c in mock_time.sleep.call_args_list] == [1.0, 2.0, 4.0]

    def test_zero_retries_makes_single_attempt(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI, \
             patch("app.llm.openai_provider.time") as mock_time:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_time.monotonic.return_value = 0.0
            mock_client.chat.completions.create.side_effect = [_rate_limit_error()]

            provider = OpenAIProvider(api_key="k", max_retries=0)
            with pytest.raises(RateLimitError):
                provider.complete("test")

        assert mock_client.chat.completions.create.call_count == 1
        mock_time.sleep.assert_not_called()


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class TestRouter:
    def test_returns_openai_provider(self):
        with patch("app.llm.openai_provider.OpenAI"):
            provider = get_llm_provider(settings=_make_settings())
        assert isinstance(provider, OpenAIProvider)

    def test_caches_provider_per_role(self):
        with patch("app.llm.openai_provider.OpenAI"):
            s = _make_settings()
            p1 = get_llm_provider(role=ModelRole.CHEAP, settings=s)
            p2 = get_llm_provider(role=ModelRole.CHEAP, settings=s)
            p3 = get_llm_provider(role=ModelRole.REASONING, settings=s)
        assert p1 is p2
        assert p1 is not p3

    def test_roles_map_to_models(self):
        with patch("app.llm.openai_provider.OpenAI"):
            s = _make_settings(llm_model_reasoning="gpt-4o", llm_model_cheap="gpt-4o-mini")
            reasoning = get_llm_provider(role=ModelRole.REASONING, settings=s)
            cheap = get_llm_provider(role=ModelRole.CHEAP, settings=s)
        assert reasoning.model == "gpt-4o"
        assert cheap.model == "gpt-4o-mini"

    def test_passes_timeout_and_retries(self):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            s = _make_settings(llm_timeout=90.0, llm_max_retries=5)
            provider = get_llm_provider(role=ModelRole.REASONING, settings=s)
        assert MockOpenAI.call_args.kwargs["timeout"] == 90.0
        assert provider.max_retries == 5

    def test_raises_for_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            get_llm_provider(settings=_make_settings(llm_provider="anthropic"))

    def test_raises_when_api_key_missing(self):
        with pytest.raises(ValueError, match="LLM_API_KEY is required"):
            get_llm_provider(settings=_make_settings(llm_api_key=None))


class TestPromptLogging:
    def test_prompt_logged_at_info_with_preview(self, caplog):
        with patch("app.llm.openai_provider.OpenAI") as MockOpenAI:
            mock_client = MagicMock()
            MockOpenAI.return_value = mock_client
            mock_client.chat.completions.create.return_value = _make_mock_response(
                "hi", prompt_tokens=50, completion_tokens=10
            )
            provider = OpenAIProvider(api_key="k")
            with caplog.at_level("INFO"):
                provider.complete("x" * 200)
        assert "prompt_preview" in caplog.text
        assert "tokens_in=50" in caplog.text
        assert "tokens_out=10" in caplog.text
        assert "x" * 200 not in caplog.text
