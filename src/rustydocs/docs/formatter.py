"""Rendering of generated documentation as Rust doc comments."""

from __future__ import annotations

from rustydocs.parser.models import DocumentedCodeElement, ItemKind


def _prefix_lines(text: str, prefix: str) -> str:
    return "\n".join(f"{prefix}{line}".rstrip() for line in text.splitlines())


def documentation_formatter(
    record: DocumentedCodeElement,
) -> tuple[str, list[str] | None]:
    """Doc comment block of a record plus its field/variant descriptions.

    Functions get `# Errors`, `# Panics` and `# Examples` sections, modules
    inner `//!` comments, everything else a plain `///` description.
    """
    if record.kind == ItemKind.FN.value:
        errors = f"\n\n# Errors\n\n{record.error_section}" if record.error_possible else ""
        panics = f"\n\n# Panics\n\n{record.panic_section}" if record.panic_possible else ""
        text = (
            f"{record.general_description}{errors}{panics}"
            f"\n\n# Examples\n\n{record.example_section}"
        )
        block = _prefix_lines(text, "/// ")
    elif record.kind == ItemKind.MOD.value:
        block = _prefix_lines(record.general_description, "//! ")
    else:
        block = _prefix_lines(record.general_description, "/// ")

    return block, record.fields_or_variants_descriptions
