"""Scope-aware tracking of `use` declarations.

An import is kept as a pair ``(path, local_name)`` where ``path`` is the
fully exploded path with segments joined by `` :: `` (renames keep their
``as`` clause) and ``local_name`` is the name the import binds in scope.
"""

from __future__ import annotations

from rustydocs.parser.models import join_location

Import = tuple[str, str]

_NAME_NODE_TYPES = {"identifier", "self", "crate", "super", "metavariable"}


def _text(node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _path_segments(node) -> list[str]:
    """Segments of a (possibly scoped) path node, e.g. ``a::b::C``."""
    if node.type == "scoped_identifier":
        path = node.child_by_field_name("path")
        name = node.child_by_field_name("name")
        segments = _path_segments(path) if path is not None else []
        if name is not None:
            segments.append(_text(name))
        return segments
    return [_text(node)]


def explode_use_tree(node, base: str = "") -> list[Import]:
    """Flatten one use tree into ``(path, local_name)`` pairs.

    Glob imports (``use a::*``) are not expanded and yield nothing.
    """
    node_type = node.type

    if node_type in _NAME_NODE_TYPES:
        name = _text(node)
        if name == "self" and base:
            # `use a::{self, B}` binds `a` itself
            return [(base, base.split(" :: ")[-1])]
        return [(join_location(base, name), name)]

    if node_type == "scoped_identifier":
        segments = _path_segments(node)
        return [(join_location(base, *segments), segments[-1])]

    if node_type == "use_as_clause":
        path = node.child_by_field_name("path")
        alias = node.child_by_field_name("alias")
        if path is None or alias is None:
            return []
        full_path = join_location(base, *_path_segments(path))
        rename = _text(alias)
        return [(f"{full_path} as {rename}", rename)]

    if node_type == "scoped_use_list":
        path = node.child_by_field_name("path")
        use_list = node.child_by_field_name("list")
        new_base = join_location(base, *_path_segments(path)) if path is not None else base
        if use_list is None:
            return []
        return explode_use_tree(use_list, new_base)

    if node_type == "use_list":
        imports: list[Import] = []
        for child in node.named_children:
            imports.extend(explode_use_tree(child, base))
        return imports

    # use_wildcard and anything unexpected
    return []


def imports_of_declaration(node) -> list[Import]:
    """Exploded imports of a single `use_declaration` node."""
    argument = node.child_by_field_name("argument")
    if argument is None:
        return []
    return explode_use_tree(argument)


def retrieve_imports(nodes) -> list[Import]:
    """Collect the imports declared among a list of sibling item nodes."""
    imports: list[Import] = []
    for node in nodes:
        if node.type == "use_declaration":
            imports.extend(imports_of_declaration(node))
    return imports


def block_imports(block) -> list[Import]:
    """Imports declared directly in a function body."""
    if block is None:
        return []
    return retrieve_imports(block.named_children)


def shadow_imports(surrounding: list[Import], scope: list[Import]) -> list[Import]:
    """Apply scope-local imports on top of the surrounding ones.

    A surrounding import whose local name is redeclared in ``scope`` is
    replaced in place; the remaining scope imports are appended in order.
    """
    pending = list(scope)
    result: list[Import] = []
    for path, name in surrounding:
        index = next((i for i, (_, scoped) in enumerate(pending) if scoped == name), None)
        if index is None:
            result.append((path, name))
        else:
            result.append(pending.pop(index))
    result.extend(pending)
    return result


def import_paths(imports: list[Import]) -> list[str]:
    return [path for path, _ in imports]
