"""LLM provider abstraction layer."""

from rustydocs.llm.base import LLMProvider, LLMResponse, Message
from rustydocs.llm.factory import create_provider
from rustydocs.llm.tokens import TokenCounter, ensure_completion_budget, ensure_embeddable

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "Message",
    "TokenCounter",
    "create_provider",
    "ensure_completion_budget",
    "ensure_embeddable",
]
