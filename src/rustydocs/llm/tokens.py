"""Token counting and the pre-flight token budget guard."""

from __future__ import annotations

import logging
from typing import Protocol

from rustydocs.exceptions import BudgetError

logger = logging.getLogger(__name__)

# Tokens a completion must be able to use for the request to be worth sending
COMPLETION_BUDGET_FLOOR = 2000
# Input ceiling of the OpenAI embedding models
EMBEDDING_MAX_TOKENS = 8191
# Encoding used for models tiktoken does not know
FALLBACK_ENCODING = "cl100k_base"

BUDGET_ERROR_MESSAGE = "The code snippet provided is too long: no room for model response"

# Context window by model name prefix, most specific first
_CONTEXT_SIZES: list[tuple[str, int]] = [
    ("o1", 200_000),
    ("o3", 200_000),
    ("o4", 200_000),
    ("gpt-4.1", 1_047_576),
    ("gpt-4o", 128_000),
    ("gpt-4-turbo", 128_000),
    ("gpt-4-32k", 32_768),
    ("gpt-4", 8_192),
    ("gpt-3.5-turbo-16k", 16_384),
    ("gpt-3.5-turbo", 16_385),
    ("text-embedding-ada-002", 8_192),
    ("text-embedding", 8_191),
]
DEFAULT_CONTEXT_SIZE = 4_096


def context_size(model: str) -> int:
    """Context window of a model, 4096 for unknown models."""
    for prefix, size in _CONTEXT_SIZES:
        if model.startswith(prefix):
            return size
    return DEFAULT_CONTEXT_SIZE


class Counter(Protocol):
    context_size: int

    def count(self, text: str) -> int: ...


class TokenCounter:
    """Counts tokens with the tiktoken encoding of a model."""

    def __init__(self, model: str) -> None:
        self.model = model
        self.context_size = context_size(model)
        self._encoding = None

    @property
    def encoding(self):
        if self._encoding is None:
            import tiktoken

            try:
                self._encoding = tiktoken.encoding_for_model(self.model)
            except KeyError:
                # Local and other non-OpenAI models
                logger.debug("No tokenizer known for %s, using %s", self.model, FALLBACK_ENCODING)
                self._encoding = tiktoken.get_encoding(FALLBACK_ENCODING)
        return self._encoding

    def count(self, text: str) -> int:
        return len(self.encoding.encode(text, disallowed_special=()))


def completion_budget(counter: Counter, prompt: str) -> int:
    """Tokens left for the completion once `prompt` is in the context."""
    return counter.context_size - counter.count(prompt)


def ensure_completion_budget(
    counter: Counter, prompt: str, floor: int = COMPLETION_BUDGET_FLOOR
) -> int:
    """Fail fast when a prompt leaves less than `floor` tokens to answer.

    Returns the remaining budget.

    Raises:
        BudgetError: If the remaining budget is below `floor`.
    """
    budget = completion_budget(counter, prompt)
    if budget < floor:
        raise BudgetError(BUDGET_ERROR_MESSAGE)
    return budget


def ensure_embeddable(
    counter: Counter, text: str, ceiling: int = EMBEDDING_MAX_TOKENS
) -> int:
    """Reject embedding input longer than the model accepts.

    Raises:
        BudgetError: If `text` has more than `ceiling` tokens.
    """
    tokens = counter.count(text)
    if tokens > ceiling:
        raise BudgetError(
            f"Input of {tokens} tokens exceeds the embedding limit of {ceiling} tokens"
        )
    return tokens
