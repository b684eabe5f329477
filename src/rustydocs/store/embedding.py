"""Embedding of code elements into the vector store."""

from __future__ import annotations

import asyncio
import logging

from rustydocs.llm.base import LLMProvider
from rustydocs.parser.models import CodeElement, CodeFile, ItemKind
from rustydocs.store.base import VectorStore, element_payload

logger = logging.getLogger(__name__)


def extract_documentation(source: str) -> str:
    """The `//!` lines of a source, one per line."""
    return "".join(f"{line}\n" for line in source.splitlines() if line.startswith("//!"))


def _module_summary(element: CodeElement) -> str:
    children = ", ".join(f"{child.kind.value} {child.ident}" for child in element.children)
    summary = f"Rust module {element.code_element_id.qualified_path}"
    return f"{summary} containing {children}" if children else summary


def embedding_input(element: CodeElement) -> tuple[str, str]:
    """(text to embed, code to store) for an element."""
    code = element.code
    if element.kind == ItemKind.MOD:
        documentation = extract_documentation(code)
        text = documentation if documentation.strip() else _module_summary(element)
        code = documentation.replace("//!", "")
    else:
        text = code
    return text, code.replace("///", "")


async def upsert_embedding(element: CodeElement, store: VectorStore, llm: LLMProvider) -> None:
    """Embed one element and store it under its hash."""
    text, code = embedding_input(element)
    vector = await llm.embed(text)
    await store.upsert(
        element.code_element_id.get_hash(), vector, element_payload(element, code)
    )


async def upsert_code_element_embeddings(
    elements: list[CodeElement],
    store: VectorStore,
    llm: LLMProvider,
    max_concurrent_tasks: int | None = None,
) -> None:
    """Embed and store every element.

    With `max_concurrent_tasks`, at most that many elements are in flight at
    once; every element is attempted and the first failure is re-raised once
    all of them have settled. Without it elements are processed one by one
    and the first failure aborts the run.
    """
    if max_concurrent_tasks is None:
        for element in elements:
            await upsert_embedding(element, store, llm)
        return

    if max_concurrent_tasks < 1:
        raise ValueError(f"max_concurrent_tasks must be at least 1, got {max_concurrent_tasks}")

    semaphore = asyncio.Semaphore(max_concurrent_tasks)

    async def _bounded(element: CodeElement) -> None:
        async with semaphore:
            await upsert_embedding(element, store, llm)

    results = await asyncio.gather(
        *(_bounded(element) for element in elements), return_exceptions=True
    )
    failures = [
        (element, result)
        for element, result in zip(elements, results)
        if isinstance(result, BaseException)
    ]
    for element, failure in failures:
        logger.warning("Failed to embed %s: %s", element.code_element_id, failure)
    if failures:
        raise failures[0][1]


async def embed_repository(
    code_files: list[CodeFile],
    store: VectorStore,
    llm: LLMProvider,
    max_concurrent_tasks: int | None = None,
) -> int:
    """Embed all elements of a parsed repository. Returns the element count."""
    await store.ensure_collection()
    elements = [element for code_file in code_files for element in code_file.elements]
    await upsert_code_element_embeddings(elements, store, llm, max_concurrent_tasks)
    logger.info("Embedded %d elements", len(elements))
    return len(elements)
