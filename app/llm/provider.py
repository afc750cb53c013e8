"""
LLM provider abstraction.

The LLM is a text component only. It classifies items, summarizes them and
writes insight explanations and outreach drafts. It never touches the database
and never decides whether an insight is stored; callers own every fallback.
"""

from abc import ABC, abstractmethod
from typing import Any


class LLMProvider(ABC):
    """Abstract base for LLM providers."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> str:
        """Send prompt and return completion text.

        Implementations raise on transport failure; an empty string means the
        model returned no content.
        """
        ...
