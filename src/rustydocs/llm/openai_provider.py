"""OpenAI LLM provider."""

from __future__ import annotations

import logging
from typing import Any

from rustydocs.exceptions import LLMError
from rustydocs.llm.base import LLMProvider, LLMResponse, Message
from rustydocs.llm.tokens import ensure_embeddable

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Provider for OpenAI and OpenAI-compatible APIs (Ollama, vLLM, etc.)."""

    def __init__(
        self,
        model: str = "gpt-4o",
        embedding_model: str = "text-embedding-3-small",
        api_key: str | None = None,
        base_url: str | None = None,
        seed: int | None = 42,
        top_p: float | None = 0.05,
    ) -> None:
        super().__init__(model, embedding_model, api_key, base_url, seed, top_p)
        self._async_client = None

    def _get_client(self):
        if self._async_client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError:
                from rustydocs.exceptions import ProviderNotAvailableError
                raise ProviderNotAvailableError("openai", "openai")

            # Failed requests surface immediately, no retry policy
            kwargs: dict[str, Any] = {"max_retries": 0}
            if self.api_key:
                kwargs["api_key"] = self.api_key
            if self.base_url:
                kwargs["base_url"] = self.base_url
            self._async_client = AsyncOpenAI(**kwargs)
        return self._async_client

    def _format_messages(self, messages: list[Message]) -> list[dict]:
        """Convert our Message format to OpenAI's format."""
        return [{"role": msg.role, "content": msg.content} for msg in messages]

    def _error(self, model: str, error: Exception) -> LLMError:
        import openai

        if isinstance(error, openai.APIStatusError):
            body = error.response.text if error.response is not None else error.message
        else:
            body = str(error)
        return LLMError(f"Problems with response from OpenAI {model}: {body}")

    async def complete(
        self,
        messages: list[Message],
        seed: int | None = None,
        top_p: float | None = None,
        json_mode: bool = True,
    ) -> LLMResponse:
        client = self._get_client()
        import openai

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": self._format_messages(messages),
        }
        seed = self.seed if seed is None else seed
        top_p = self.top_p if top_p is None else top_p
        if seed is not None:
            kwargs["seed"] = seed
        if top_p is not None:
            kwargs["top_p"] = top_p
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise self._error(self.model, e) from e

        if not response.choices:
            raise LLMError(f"Problems with response from OpenAI {self.model}: no choices")
        choice = response.choices[0]
        logger.debug("Completion from %s finished with %s", self.model, choice.finish_reason)

        return LLMResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "",
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
            },
            system_fingerprint=response.system_fingerprint or "",
        )

    async def embed(self, text: str) -> list[float]:
        ensure_embeddable(self.embedding_counter, text)
        client = self._get_client()
        import openai

        try:
            response = await client.embeddings.create(model=self.embedding_model, input=text)
        except openai.OpenAIError as e:
            raise self._error(self.embedding_model, e) from e

        if not response.data:
            raise LLMError(
                f"Problems with response from OpenAI {self.embedding_model}: no embedding"
            )
        return list(response.data[0].embedding)
