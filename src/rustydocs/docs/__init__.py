"""Documentation generation and reinsertion."""

from rustydocs.docs.formatter import documentation_formatter
from rustydocs.docs.generator import document_file, document_repository, generate_documentation
from rustydocs.docs.reinserter import put_documentation_inside_repository

__all__ = [
    "document_file",
    "document_repository",
    "documentation_formatter",
    "generate_documentation",
    "put_documentation_inside_repository",
]
