"""
OpenAI LLM provider.

Synchronous client from the openai SDK (>=1.0.0). Rate-limit, timeout and
connection errors are retried with exponential backoff up to ``max_retries``
times after the first attempt; anything else is raised to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI, RateLimitError

from app.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

INITIAL_BACKOFF = 1.0  # seconds
BACKOFF_MULTIPLIER = 2.0
PROMPT_PREVIEW_CHARS = 100

_RETRYABLE_ERRORS = (RateLimitError, APITimeoutError, APIConnectionError)


class OpenAIProvider(LLMProvider):
    """LLMProvider backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        max_retries: int = 2,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        # SDK-level retries are disabled; _call_with_retry owns the retry budget
        self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Send prompt to OpenAI and return the completion text.

        Supported kwargs:
            temperature (float): Sampling temperature (default 0.7).
            max_tokens (int): Maximum tokens in the response.
            response_format (dict): E.g. {"type": "json_object"} for JSON mode.
        """
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        create_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.get("temperature", 0.7),
        }
        if "max_tokens" in kwargs:
            create_kwargs["max_tokens"] = kwargs["max_tokens"]
        if "response_format" in kwargs:
            create_kwargs["response_format"] = kwargs["response_format"]

        return self._call_with_retry(create_kwargs, prompt)

    def _call_with_retry(self, create_kwargs: dict[str, Any], prompt: str) -> str:
        backoff = INITIAL_BACKOFF
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                start = time.monotonic()
                response = self._client.chat.completions.create(**create_kwargs)
                elapsed = time.monotonic() - start

                text = response.choices[0].message.content if response.choices else None
                usage = response.usage
                preview = (
                    prompt[:PROMPT_PREVIEW_CHARS] + "..."
                    if len(prompt) > PROMPT_PREVIEW_CHARS
                    else prompt
                )
                logger.info(
                    "LLM call: model=%s prompt_preview=%r tokens_in=%d tokens_out=%d latency=%.2fs",
                    self.model,
                    preview,
                    usage.prompt_tokens if usage else 0,
                    usage.completion_tokens if usage else 0,
                    elapsed,
                )
                return (text or "").strip()

            except _RETRYABLE_ERRORS as exc:
                if attempt == attempts:
                    logger.error(
                        "OpenAI retryable error: giving up after %d attempts: %s",
                        attempts,
                        exc,
                    )
                    raise
                logger.warning(
                    "OpenAI %s: retry %d/%d in %.1fs",
                    type(exc).__name__,
                    attempt,
                    self.max_retries,
                    backoff,
                )
                time.sleep(backoff)
                backoff *= BACKOFF_MULTIPLIER

            except APIError as exc:
                logger.error("OpenAI API error: %s", exc)
                raise

        return ""
