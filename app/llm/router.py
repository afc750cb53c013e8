"""
LLM provider factory.

Maps a model role to a configured provider. Instances are cached per
(provider, role) so the HTTP client is reused across ingest items.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from app.llm.provider import LLMProvider

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)


class ModelRole(str, Enum):
    """Model role for task-based routing."""

    REASONING = "reasoning"  # insight synthesis
    CHEAP = "cheap"  # classification and summaries


_provider_cache: dict[str, LLMProvider] = {}


def get_llm_provider(
    role: ModelRole = ModelRole.REASONING,
    settings: Settings | None = None,
) -> LLMProvider:
    """Return a cached LLMProvider for the configured provider and role.

    Raises:
        ValueError: If the provider is not supported or the API key is missing.
    """
    if settings is None:
        from app.config import get_settings

        settings = get_settings()

    provider_name = settings.llm_provider.lower()
    cache_key = f"{provider_name}:{role.value}"
    if cache_key in _provider_cache:
        return _provider_cache[cache_key]

    if provider_name != "openai":
        raise ValueError(
            f"Unknown LLM provider: '{provider_name}'. Supported providers: openai"
        )
    if not settings.llm_api_key:
        raise ValueError(
            "LLM_API_KEY is required for the OpenAI provider. "
            "Set it in your environment or .env file."
        )

    from app.llm.openai_provider import OpenAIProvider

    model = (
        settings.llm_model_reasoning if role is ModelRole.REASONING else settings.llm_model_cheap
    )
    provider = OpenAIProvider(
        api_key=settings.llm_api_key,
        model=model,
        timeout=settings.llm_timeout,
        max_retries=settings.llm_max_retries,
    )
    _provider_cache[cache_key] = provider
    logger.info("Created LLM provider: %s role=%s model=%s", provider_name, role.value, model)
    return provider


def clear_provider_cache() -> None:
    """Clear the provider cache. Used by tests."""
    _provider_cache.clear()
