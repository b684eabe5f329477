"""Splicing generated documentation back into Rust source files."""

from __future__ import annotations

import logging
from pathlib import Path

from rustydocs.docs.formatter import documentation_formatter
from rustydocs.parser.models import CodeElement, DocumentedCodeElement
from rustydocs.parser.rust_parser import parse_file

logger = logging.getLogger(__name__)


def find_element(
    elements: list[CodeElement], record: DocumentedCodeElement
) -> CodeElement | None:
    """The element a record was generated for, matched by identity."""
    for element in elements:
        if record.matches(element.code_element_id):
            return element
    return None


def _indentation(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def _indent_block(block: str, indentation: str) -> list[str]:
    return [f"{indentation}{line}" if line else indentation.rstrip() for line in block.split("\n")]


def insert_documentation(
    lines: list[str], element: CodeElement, record: DocumentedCodeElement
) -> int:
    """Insert a record's doc comments into `lines`. Returns the lines added.

    Field and variant descriptions go right above each field line, from the
    last one up, then the item block goes above the item. All positions come
    from the same parse and stay valid in that order.
    """
    block, descriptions = documentation_formatter(record)
    added = 0

    if descriptions:
        for line_number, description in reversed(
            list(zip(element.line_start[1:], descriptions))
        ):
            index = line_number - 1
            indentation = _indentation(lines[index]) if index < len(lines) else ""
            field_lines = [
                f"{indentation}/// {line}".rstrip() for line in description.splitlines()
            ] or [f"{indentation}///"]
            lines[index:index] = field_lines
            added += len(field_lines)

    if block:
        index = element.line_start[0] - 1
        indentation = _indentation(lines[index]) if index < len(lines) else ""
        block_lines = _indent_block(block, indentation)
        lines[index:index] = block_lines
        added += len(block_lines)

    return added


def put_documentation_inside_repository(
    path: str | Path,
    records: list[DocumentedCodeElement],
    root: str | Path | None = None,
    test_module_pattern: str = "test",
) -> int:
    """Insert documentation records into a Rust file.

    The file is re-parsed before each record since every insertion shifts
    the lines below it. Records whose element is not found are skipped.
    Returns the number of records inserted.

    Raises:
        ParserError: If the file cannot be read or parsed.
    """
    path = Path(path)
    if path.suffix != ".rs":
        logger.debug("Not a Rust file, leaving %s untouched", path)
        return 0

    inserted = 0
    for record in records:
        elements = parse_file(path, test_module_pattern, root).elements
        element = find_element(elements, record)
        if element is None:
            logger.debug("No element %s %s :: %s in %s", record.kind, record.location, record.ident, path)
            continue

        text = path.read_bytes().decode("utf-8")
        newline = "\r\n" if "\r\n" in text else "\n"
        lines = text.split(newline)
        insert_documentation(lines, element, record)
        path.write_text(newline.join(lines), encoding="utf-8", newline="")
        inserted += 1

    logger.info("Inserted %d documentation blocks into %s", inserted, path)
    return inserted
