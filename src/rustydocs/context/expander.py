"""Retrieval context expansion and question answering.

The elements returned by a similarity search are expanded one level along
their `dependencies` and `children` edges. The related code is fetched back
from the vector store by element hash, not from memory.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from rustydocs.exceptions import LLMError, RustyDocsError
from rustydocs.llm.base import LLMProvider, Message
from rustydocs.llm.prompts import USER_QUESTION_SYSTEM_PROMPT
from rustydocs.llm.tokens import ensure_completion_budget
from rustydocs.parser.models import CodeElement, UserQuestionResponse
from rustydocs.store.base import VectorStore

logger = logging.getLogger(__name__)


def code_element_from_payload(payload: dict[str, Any]) -> CodeElement:
    """Rebuild a code element from a stored payload."""
    return CodeElement.model_validate(
        {
            "code_element_id": payload["code_element_id"],
            "code": payload.get("code", ""),
            "imports": payload.get("imports", []),
            "children": payload.get("children", []),
            "dependencies": payload.get("dependencies", []),
            "implementors": payload.get("implementors", []),
        }
    )


async def expand_context(seed: CodeElement, store: VectorStore) -> str:
    """The seed's code followed by the code of its direct neighbours.

    Neighbours are the seed's dependencies then its children, looked up by
    hash. Neighbours missing from the store, or whose lookup fails, are left
    out.
    """
    context = f"\n{seed.code}\n"
    for element_id in [*seed.dependencies, *seed.children]:
        try:
            payloads = await store.retrieve([element_id.get_hash()])
        except RustyDocsError as e:
            logger.debug("Skipping %s in context: %s", element_id, e)
            continue
        if not payloads:
            logger.debug("Skipping %s in context: not stored", element_id)
            continue
        context += f"\n{payloads[0].get('code', '')}\n"
    return context


async def ask_the_model(
    question: str,
    llm: LLMProvider,
    store: VectorStore,
    search_limit: int = 3,
) -> UserQuestionResponse:
    """Answer a question about the repository with retrieval augmentation.

    Raises:
        BudgetError: If the assembled prompt leaves no room for the answer.
        LLMError: If the model fails or answers with invalid JSON.
        VectorStoreError: If the similarity search fails.
    """
    vector = await llm.embed(question)
    payloads = await store.search(vector, search_limit)
    logger.debug("Retrieved %d elements for the question", len(payloads))

    system_prompt = USER_QUESTION_SYSTEM_PROMPT
    for payload in payloads:
        system_prompt += await expand_context(code_element_from_payload(payload), store)

    ensure_completion_budget(llm.counter, f"{system_prompt}{question}")

    response = await llm.complete(
        [
            Message(role="system", content=system_prompt),
            Message(role="user", content=question),
        ]
    )
    try:
        return UserQuestionResponse.model_validate_json(response.content)
    except ValidationError as e:
        raise LLMError(f"Problems with response from OpenAI {llm.model}: {e}") from e
