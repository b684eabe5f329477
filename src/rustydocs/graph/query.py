"""High-level query interface for resolved code elements."""

from __future__ import annotations

from dataclasses import dataclass, field

from rustydocs.parser.models import CodeElement, CodeElementID, CodeFile


@dataclass
class ElementInfo:
    """Rich information about a code element."""

    element_id: CodeElementID
    file_path: str
    line_start: int
    implementors: list[CodeElementID] = field(default_factory=list)
    dependencies: list[CodeElementID] = field(default_factory=list)
    children: list[CodeElementID] = field(default_factory=list)


class GraphQuery:
    """Query engine over a resolved list of code files.

    Answers who references an element (its implementors) and what an
    element references (its dependencies).
    """

    def __init__(self, code_files: list[CodeFile]) -> None:
        self.code_files = code_files
        self._elements: dict[CodeElementID, tuple[CodeElement, str]] = {}
        self._name_index: dict[str, list[CodeElementID]] = {}
        self._build_index()

    def _build_index(self) -> None:
        """Build an ident/qualified path -> element ID lookup index."""
        for code_file in self.code_files:
            for element in code_file.elements:
                element_id = element.code_element_id
                self._elements.setdefault(element_id, (element, code_file.path))
                self._name_index.setdefault(element_id.ident, []).append(element_id)
                qualified = element_id.qualified_path
                if qualified != element_id.ident:
                    self._name_index.setdefault(qualified, []).append(element_id)
                compact = "".join(qualified.split())
                if compact != qualified:
                    self._name_index.setdefault(compact, []).append(element_id)

    def find_element(self, name: str) -> list[CodeElementID]:
        """Find element IDs matching an ident or a qualified path.

        Qualified paths may be written with or without spaces around `::`.
        """
        results = list(self._name_index.get(name, []))
        if not results:
            # Try partial match
            lowered = name.lower()
            for key, ids in self._name_index.items():
                if lowered in key.lower():
                    results.extend(ids)
        return sorted(set(results), key=lambda i: i.sort_key)

    def get_element(self, element_id: CodeElementID) -> CodeElement | None:
        entry = self._elements.get(element_id)
        return entry[0] if entry else None

    def get_element_info(self, element_id: CodeElementID) -> ElementInfo | None:
        """Get detailed information about an element."""
        entry = self._elements.get(element_id)
        if entry is None:
            return None
        element, file_path = entry
        return ElementInfo(
            element_id=element_id,
            file_path=file_path,
            line_start=element.line_start[0] if element.line_start else 0,
            implementors=list(element.implementors),
            dependencies=list(element.dependencies),
            children=list(element.children),
        )

    def who_references(self, name: str) -> list[CodeElementID]:
        """Elements whose code references any element matching `name`."""
        results: set[CodeElementID] = set()
        for element_id in self.find_element(name):
            element = self.get_element(element_id)
            if element is not None:
                results.update(element.implementors)
        return sorted(results, key=lambda i: i.sort_key)

    def what_references(self, name: str) -> list[CodeElementID]:
        """Elements referenced by any element matching `name`."""
        results: set[CodeElementID] = set()
        for element_id in self.find_element(name):
            element = self.get_element(element_id)
            if element is not None:
                results.update(element.dependencies)
        return sorted(results, key=lambda i: i.sort_key)
