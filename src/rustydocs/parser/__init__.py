"""Rust source parsing for rustydocs."""

from rustydocs.parser.core import load_code_files, load_snapshot, parse_repository, write_snapshot
from rustydocs.parser.models import (
    CodeElement,
    CodeElementID,
    CodeFile,
    DocumentedCodeElement,
    ItemKind,
    UserQuestionResponse,
)
from rustydocs.parser.rust_parser import module_location, parse_file, parse_source

__all__ = [
    "CodeElement",
    "CodeElementID",
    "CodeFile",
    "DocumentedCodeElement",
    "ItemKind",
    "UserQuestionResponse",
    "load_code_files",
    "load_snapshot",
    "module_location",
    "parse_file",
    "parse_repository",
    "parse_source",
    "write_snapshot",
]
