"""Two-pass cross-reference resolution over a whole repository.

Pass 1 records, for every element X, the elements whose text references X
(``implementors``). Pass 2 inverts that relation into ``dependencies``.
Matching is textual: a bare identifier occurrence that passes a scope
visibility check, or a fully qualified path anywhere in the text.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from rustydocs.parser.models import (
    CONTAINER_KINDS,
    LOCATION_SEPARATOR,
    ROOT_LOCATION,
    CodeElement,
    CodeElementID,
    CodeFile,
    ItemKind,
)

logger = logging.getLogger(__name__)

# Kinds whose declaration keyword is searched for before scanning
_DECLARATION_KEYWORDS: dict[ItemKind, str] = {
    ItemKind.FN: "fn",
    ItemKind.CONST: "const",
    ItemKind.TRAIT: "trait",
    ItemKind.TYPE: "type",
    ItemKind.ENUM: "enum",
    ItemKind.STRUCT: "struct",
}


@lru_cache(maxsize=4096)
def declaration_pattern(ident: str, kind: ItemKind) -> re.Pattern | None:
    """Regex locating an element's own declaration inside its text."""
    keyword = _DECLARATION_KEYWORDS.get(kind)
    if keyword is None:
        return None
    return re.compile(rf"\b{keyword}\s+{re.escape(ident)}")


@lru_cache(maxsize=4096)
def _isolated_pattern(ident: str) -> re.Pattern:
    return re.compile(rf"(?<![A-Za-z0-9_]){re.escape(ident)}(?![A-Za-z0-9_])")


def base_ident(ident: str) -> str:
    """Ident without its `#<n>` disambiguation suffix."""
    return ident.split("#", 1)[0]


def declaration_offset(element: CodeElement) -> int | None:
    """Offset where the element's declaration begins, skipping its docs.

    Kinds without a declaration keyword start at 0. None means the kind has
    a keyword but the declaration is not in the text.
    """
    pattern = declaration_pattern(base_ident(element.ident), element.kind)
    if pattern is None:
        return 0
    match = pattern.search(element.code)
    return match.start() if match else None


def contains_isolated(text: str, ident: str, start: int = 0) -> bool:
    """Whether `ident` occurs in `text[start:]` as a whole word."""
    if not ident:
        return False
    return _isolated_pattern(ident).search(text, start) is not None


def contains_fully_qualified(text: str, target: CodeElementID) -> bool:
    """Whether `<location>::<ident>` of `target` occurs anywhere in `text`."""
    if not target.location:
        return False
    location = "".join(target.location.split())
    return f"{location}::{base_ident(target.ident)}" in text


def verify_dependency(
    location: str, kind: ItemKind, user_location: str, user_imports: list[str]
) -> bool:
    """Scope visibility check for a bare identifier match.

    `location`/`kind` describe the referenced element, `user_location`
    and `user_imports` the element whose text holds the reference. An
    import only counts when it names the referenced element's module.
    """
    if location == ROOT_LOCATION or location == user_location:
        return True
    if kind not in (ItemKind.TRAIT, ItemKind.MOD) and (
        user_location == location or user_location.startswith(location + LOCATION_SEPARATOR)
    ):
        return True
    return location in user_imports


def _references(target: CodeElement, user: CodeElement, user_offset: int) -> bool:
    if contains_isolated(user.code, base_ident(target.ident), user_offset) and verify_dependency(
        target.location, target.kind, user.location, user.imports
    ):
        return True
    return contains_fully_qualified(user.code, target.code_element_id)


def add_implementors(elements: list[CodeElement]) -> None:
    """Pass 1: fill every element's `implementors`.

    Elements whose own declaration cannot be found in their text are never
    counted as referencing anything.
    """
    candidates = [e for e in elements if e.kind not in CONTAINER_KINDS]
    offsets = [declaration_offset(e) for e in candidates]

    for target in candidates:
        for user, offset in zip(candidates, offsets):
            if offset is None:
                continue
            if user is target or user.code_element_id == target.code_element_id:
                continue
            if _references(target, user, offset):
                target.implementors.append(user.code_element_id)


def add_dependencies(elements: list[CodeElement]) -> None:
    """Pass 2: `dependencies(X) = {Y : X in implementors(Y)}`."""
    by_id: dict[CodeElementID, list[CodeElement]] = {}
    for element in elements:
        by_id.setdefault(element.code_element_id, []).append(element)

    for referenced in elements:
        for user_id in referenced.implementors:
            for user in by_id.get(user_id, []):
                user.dependencies.append(referenced.code_element_id)


def _sort_dedup(ids: list[CodeElementID]) -> list[CodeElementID]:
    return sorted(set(ids), key=lambda i: i.sort_key)


def resolve_references(code_files: list[CodeFile]) -> None:
    """Resolve implementors and dependencies of every element in place."""
    elements = [element for code_file in code_files for element in code_file.elements]
    for element in elements:
        element.implementors = []
        element.dependencies = []

    add_implementors(elements)
    add_dependencies(elements)

    edges = 0
    for element in elements:
        element.implementors = _sort_dedup(element.implementors)
        element.dependencies = _sort_dedup(element.dependencies)
        edges += len(element.dependencies)

    logger.debug("Resolved %d reference edges over %d elements", edges, len(elements))
