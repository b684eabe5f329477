"""Documentation generation with the language model."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from rustydocs.docs.reinserter import put_documentation_inside_repository
from rustydocs.exceptions import LLMError, RustyDocsError
from rustydocs.llm.base import LLMProvider, Message
from rustydocs.llm.prompts import DOC_GENERATION_SYSTEM_PROMPT, doc_generation_user_prompt
from rustydocs.llm.tokens import ensure_completion_budget
from rustydocs.parser.models import CodeElement, CodeFile, DocumentedCodeElement, ItemKind

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[DocumentedCodeElement])


async def generate_documentation(
    llm: LLMProvider, ident: str, kind: ItemKind, location: str, code: str
) -> DocumentedCodeElement:
    """Ask the model for the documentation of one element.

    Raises:
        BudgetError: If the element is too long to leave room for the answer.
        LLMError: If the model fails or answers with an invalid record.
    """
    user_prompt = doc_generation_user_prompt(ident, kind.value, location, code)
    ensure_completion_budget(llm.counter, f"{DOC_GENERATION_SYSTEM_PROMPT}{user_prompt}")

    response = await llm.complete(
        [
            Message(role="system", content=DOC_GENERATION_SYSTEM_PROMPT),
            Message(role="user", content=user_prompt),
        ]
    )
    try:
        return DocumentedCodeElement.model_validate_json(response.content)
    except ValidationError as e:
        raise LLMError(f"Problems with response from OpenAI {llm.model}: {e}") from e


def _selected(kind: ItemKind, kinds_to_document: list[ItemKind]) -> bool:
    return ItemKind.ALL in kinds_to_document or kind in kinds_to_document


async def document_file(
    llm: LLMProvider,
    elements: list[CodeElement],
    path: str | Path,
    kinds_to_document: list[ItemKind],
    write_inside_repository: bool = False,
    root: str | Path | None = None,
    test_module_pattern: str = "test",
) -> list[DocumentedCodeElement]:
    """Document the selected elements of one file.

    Elements the model fails to document are logged and left out. The
    records keep the identity of the element they were generated for.
    """
    records: list[DocumentedCodeElement] = []
    for element in elements:
        if not _selected(element.kind, kinds_to_document):
            continue
        element_id = element.code_element_id
        try:
            record = await generate_documentation(
                llm, element_id.ident, element_id.kind, element_id.location, element.code
            )
        except RustyDocsError as e:
            logger.warning("Could not document %s: %s", element_id, e)
            continue
        records.append(
            record.model_copy(
                update={
                    "ident": element_id.ident,
                    "kind": element_id.kind.value,
                    "location": element_id.location,
                }
            )
        )

    if write_inside_repository and records:
        put_documentation_inside_repository(path, records, root, test_module_pattern)
    return records


async def document_repository(
    llm: LLMProvider,
    code_files: list[CodeFile],
    kinds_to_document: list[ItemKind],
    write_inside_repository: bool = False,
    write_to_json_path: str | Path | None = None,
    root: str | Path | None = None,
    test_module_pattern: str = "test",
) -> list[DocumentedCodeElement]:
    """Document every file of a repository, one file after the other.

    With `write_to_json_path`, all generated records are written there as
    one pretty-printed JSON list.
    """
    records: list[DocumentedCodeElement] = []
    for code_file in code_files:
        records.extend(
            await document_file(
                llm,
                code_file.elements,
                code_file.path,
                kinds_to_document,
                write_inside_repository,
                root,
                test_module_pattern,
            )
        )

    if write_to_json_path is not None:
        write_documentation(records, write_to_json_path)
    logger.info("Generated documentation for %d elements", len(records))
    return records


def write_documentation(records: list[DocumentedCodeElement], path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_RECORDS.dump_json(records, indent=2))
