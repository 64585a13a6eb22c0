"""LLM access for the advice endpoint."""

from __future__ import annotations

from .local_llm import generate_local_advice
from .openai_client import OpenAIClient

__all__ = [
    "OpenAIClient",
    "generate_local_advice",
]
