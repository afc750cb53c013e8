"""LLM provider abstraction. The LLM writes text; services decide what to store."""

from app.llm.openai_provider import OpenAIProvider
from app.llm.provider import LLMProvider
from app.llm.router import ModelRole, get_llm_provider

__all__ = ["LLMProvider", "ModelRole", "OpenAIProvider", "get_llm_provider"]
