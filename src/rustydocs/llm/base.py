"""Base LLM provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from rustydocs.llm.tokens import Counter, TokenCounter


class Message(BaseModel):
    """A message in the conversation."""

    role: str  # "system", "user", "assistant"
    content: str = ""


class LLMResponse(BaseModel):
    """Response from the LLM."""

    content: str = ""
    finish_reason: str = ""
    usage: dict[str, int] = Field(default_factory=dict)
    system_fingerprint: str = ""  # OpenAI cluster fingerprint for reproducibility auditing


class LLMProvider(ABC):
    """Abstract base for LLM providers.

    A provider answers chat completions and embeds text. `counter` and
    `embedding_counter` measure prompts for the chat and embedding models
    and are what the token budget guard runs against.
    """

    def __init__(
        self,
        model: str,
        embedding_model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        seed: int | None = 42,
        top_p: float | None = 0.05,
    ) -> None:
        self.model = model
        self.embedding_model = embedding_model
        self.api_key = api_key
        self.base_url = base_url
        self.seed = seed
        self.top_p = top_p
        self.counter: Counter = TokenCounter(model)
        self.embedding_counter: Counter = TokenCounter(embedding_model)

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        seed: int | None = None,
        top_p: float | None = None,
        json_mode: bool = True,
    ) -> LLMResponse:
        """Send a completion request to the LLM."""
        ...

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed `text` into a single vector."""
        ...
