"""Tree-sitter based extraction of Rust code elements.

Every item of a file becomes a ``CodeElement``. Members of impl blocks and
trait bodies are flattened into siblings located under
``<location> :: impl_<SelfType>`` and ``<location> :: <Trait>``; inline
modules recurse with their own imports; function bodies only contribute
their local ``use`` declarations to the function's imports.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path, PurePath

from rustydocs.exceptions import ParserError
from rustydocs.parser.imports import (
    Import,
    block_imports,
    import_paths,
    retrieve_imports,
    shadow_imports,
)
from rustydocs.parser.models import (
    LOCATION_SEPARATOR,
    ROOT_LOCATION,
    CodeElement,
    CodeElementID,
    CodeFile,
    ItemKind,
    join_location,
)
from rustydocs.parser.spans import node_span, slice_lines

# Item node types -> element kind
_ITEM_KINDS: dict[str, ItemKind] = {
    "const_item": ItemKind.CONST,
    "enum_item": ItemKind.ENUM,
    "extern_crate_declaration": ItemKind.EXTERN_CRATE,
    "function_item": ItemKind.FN,
    "function_signature_item": ItemKind.FN,
    "foreign_mod_item": ItemKind.FOREIGN_MOD,
    "impl_item": ItemKind.IMPL,
    "macro_definition": ItemKind.MACRO,
    "macro_invocation": ItemKind.MACRO,
    "mod_item": ItemKind.MOD,
    "static_item": ItemKind.STATIC,
    "struct_item": ItemKind.STRUCT,
    "trait_item": ItemKind.TRAIT,
    "type_item": ItemKind.TYPE,
    "associated_type": ItemKind.TYPE,
    "union_item": ItemKind.UNION,
    "use_declaration": ItemKind.USE,
}

# Node types allowed inside impl blocks and trait bodies
_MEMBER_KINDS: dict[str, ItemKind] = {
    "function_item": ItemKind.FN,
    "function_signature_item": ItemKind.FN,
    "const_item": ItemKind.CONST,
    "type_item": ItemKind.TYPE,
    "associated_type": ItemKind.TYPE,
    "macro_invocation": ItemKind.MACRO,
}

_NON_IDENT_RE = re.compile(r"\W+")


@lru_cache(maxsize=1)
def _get_parser():
    """Get a tree-sitter parser for Rust."""
    import tree_sitter_rust
    from tree_sitter import Language, Parser

    return Parser(Language(tree_sitter_rust.language()))


def _text(node) -> str:
    return node.text.decode("utf-8", errors="replace")


def module_location(file_path: str | Path, root: str | Path | None = None) -> str:
    """Module path of a Rust file, derived from its path alone.

    When `root` is given the path is first made relative to it, so that a
    parent directory named `src` above the repository is ignored.

    ``src/lib.rs`` -> ``crate``, ``src/foo/mod.rs`` -> ``crate :: foo``,
    ``src/foo/bar.rs`` -> ``crate :: foo :: bar``.
    """
    path = PurePath(file_path)
    if root is not None:
        try:
            path = path.relative_to(root)
        except ValueError:
            pass
    parts = list(path.parts)
    if "src" in parts:
        last_src = len(parts) - 1 - parts[::-1].index("src")
        parts = parts[last_src + 1:]
    else:
        parts = [path.name]

    if parts and parts[-1].endswith(".rs"):
        parts[-1] = parts[-1][: -len(".rs")]
    if parts and parts[-1] == "mod":
        parts = parts[:-1]
    if len(parts) == 1 and parts[0] in ("lib", "main"):
        parts = []
    return join_location(ROOT_LOCATION, *parts)


def _split_location(path: str) -> tuple[str, str]:
    """Split a module path into (ident, parent location)."""
    if LOCATION_SEPARATOR not in path:
        return path, ""
    parent, ident = path.rsplit(LOCATION_SEPARATOR, 1)
    return ident, parent


def _type_ident(node) -> str:
    """Last path segment of a type, looking through generics and references."""
    if node is None:
        return ""
    if node.type in ("type_identifier", "primitive_type"):
        return _text(node)
    if node.type in ("generic_type", "reference_type", "pointer_type"):
        return _type_ident(node.child_by_field_name("type"))
    if node.type == "scoped_type_identifier":
        return _type_ident(node.child_by_field_name("name"))
    return _NON_IDENT_RE.sub("", _text(node))


def _first_error_line(node) -> int:
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error or child.is_missing:
            return _first_error_line(child)
    return node.start_point[0] + 1


def _unwrap(node):
    """Item-level macro calls may come wrapped in an expression statement."""
    if node.type == "expression_statement" and node.named_child_count == 1:
        inner = node.named_children[0]
        if inner.type == "macro_invocation":
            return inner
    return node


class _FileExtractor:
    """Extracts the elements of one parsed file."""

    def __init__(self, test_module_pattern: str) -> None:
        self.test_module_pattern = test_module_pattern.lower()
        self.elements: list[CodeElement] = []
        self._seen: dict[tuple[str, ItemKind, str], int] = {}

    def _unique_id(self, ident: str, kind: ItemKind, location: str) -> CodeElementID:
        key = (ident, kind, location)
        count = self._seen.get(key, 0) + 1
        self._seen[key] = count
        if count > 1:
            ident = f"{ident}#{count}"
        return CodeElementID(ident=ident, kind=kind, location=location)

    def is_test_module(self, name: str) -> bool:
        return bool(self.test_module_pattern) and self.test_module_pattern in name.lower()

    def _ident(self, node, kind: ItemKind) -> str:
        if kind == ItemKind.IMPL:
            return f"impl_{_type_ident(node.child_by_field_name('type'))}"
        if kind == ItemKind.FOREIGN_MOD:
            for child in node.named_children:
                if child.type == "extern_modifier":
                    abi = _NON_IDENT_RE.sub("", _text(child)[len("extern"):])
                    return f"extern_{abi}" if abi else "extern"
            return "extern"
        if node.type == "macro_invocation":
            macro = node.child_by_field_name("macro")
            if macro is None:
                return ""
            return _text(macro).split("::")[-1].strip()
        name = node.child_by_field_name("name")
        return _text(name) if name is not None else ""

    def retrieve_code_element(
        self,
        node,
        code: str,
        location: str,
        imports: list[Import],
    ) -> CodeElementID | None:
        """Extract one item (and, recursively, its members).

        Dependencies and implementors are filled in later by the resolver.
        Returns the item's ID, or None for imports, test modules and
        non-item nodes.
        """
        node = _unwrap(node)
        kind = _ITEM_KINDS.get(node.type)
        if kind is None or kind == ItemKind.USE:
            return None

        ident = self._ident(node, kind)
        if kind == ItemKind.MOD and self.is_test_module(ident):
            return None

        start, end = node_span(node)
        code_element_id = self._unique_id(ident, kind, location)
        children: list[CodeElementID] = []

        if node.type == "function_item":
            imports = shadow_imports(imports, block_imports(node.child_by_field_name("body")))
        elif kind == ItemKind.IMPL or kind == ItemKind.TRAIT:
            # Members are located under the block, not under the element ID
            member_location = join_location(location, ident)
            children = self._retrieve_members(node, code, start, member_location, imports)
        elif kind == ItemKind.MOD:
            body = node.child_by_field_name("body")
            if body is not None:
                module_location_ = join_location(location, ident)
                module_imports = retrieve_imports(body.named_children)
                for nested in body.named_children:
                    nested_start, nested_end = node_span(nested)
                    nested_id = self.retrieve_code_element(
                        nested,
                        slice_lines(code, nested_start, nested_end, start),
                        module_location_,
                        module_imports,
                    )
                    if nested_id is not None:
                        children.append(nested_id)

        if kind in (ItemKind.STRUCT, ItemKind.ENUM):
            line_start = self._fields_or_variants_lines(node, start)
        else:
            line_start = [start]

        code_element = CodeElement(
            code_element_id=code_element_id,
            code=code,
            line_start=line_start,
            imports=import_paths(imports),
            children=children,
        )

        # `mod foo;` only points at another file, which is its own element
        body = node.child_by_field_name("body")
        is_declaration_only = kind == ItemKind.MOD and (
            body is None or node.start_point[0] == node.end_point[0]
        )
        if not is_declaration_only:
            if kind == ItemKind.MOD:
                # Inner docs go on the line after the opening brace
                code_element.line_start[0] = body.start_point[0] + 2
            self.elements.append(code_element)

        return code_element_id

    def _retrieve_members(
        self,
        node,
        code: str,
        parent_start: int,
        member_location: str,
        imports: list[Import],
    ) -> list[CodeElementID]:
        body = node.child_by_field_name("body")
        if body is None:
            return []

        children: list[CodeElementID] = []
        for member in body.named_children:
            kind = _MEMBER_KINDS.get(member.type)
            if kind is None:
                continue

            member_imports = imports
            if member.type == "function_item":
                member_imports = shadow_imports(
                    imports, block_imports(member.child_by_field_name("body"))
                )

            member_start, member_end = node_span(member)
            member_id = self._unique_id(self._ident(member, kind), kind, member_location)
            self.elements.append(
                CodeElement(
                    code_element_id=member_id,
                    code=slice_lines(code, member_start, member_end, parent_start),
                    line_start=[member_start],
                    imports=import_paths(member_imports),
                )
            )
            children.append(member_id)

        return children

    def _fields_or_variants_lines(self, node, start: int) -> list[int]:
        """The item's first line plus one line per named field or variant."""
        lines = [start]
        body = node.child_by_field_name("body")
        if body is None:
            return lines
        if body.type == "field_declaration_list":
            wanted = "field_declaration"
        elif body.type == "enum_variant_list":
            wanted = "enum_variant"
        else:
            return lines
        for child in body.named_children:
            if child.type == wanted:
                lines.append(node_span(child)[0])
        return lines


def parse_source(
    source: str,
    file_path: str | Path,
    test_module_pattern: str = "test",
    root: str | Path | None = None,
) -> CodeFile:
    """Extract the code elements of a Rust source.

    Raises:
        ParserError: If the source has syntax errors.
    """
    tree = _get_parser().parse(source.encode("utf-8"))
    root_node = tree.root_node
    if root_node.has_error:
        raise ParserError(
            f"Failed to parse {file_path}: syntax error near line {_first_error_line(root_node)}"
        )

    location = module_location(file_path, root)
    module_ident, module_parent = _split_location(location)
    extractor = _FileExtractor(test_module_pattern)

    segments = location.split(LOCATION_SEPARATOR)[1:]
    if root is not None:
        # Directories such as `tests/` or `benches/test_data/` outside `src`
        try:
            segments += PurePath(file_path).relative_to(root).parts[:-1]
        except ValueError:
            pass
    if any(extractor.is_test_module(segment) for segment in segments):
        return CodeFile(path=str(file_path), elements=[])

    items = root_node.named_children
    imports = retrieve_imports(items)
    children: list[CodeElementID] = []

    for item in items:
        item_start, item_end = node_span(item)
        code_element_id = extractor.retrieve_code_element(
            item, slice_lines(source, item_start, item_end), location, imports
        )
        if code_element_id is not None:
            children.append(code_element_id)

    extractor.elements.append(
        CodeElement(
            code_element_id=CodeElementID(
                ident=module_ident, kind=ItemKind.MOD, location=module_parent
            ),
            code=source,
            line_start=[1],
            imports=import_paths(imports),
            children=children,
        )
    )

    return CodeFile(path=str(file_path), elements=extractor.elements)


def parse_file(
    file_path: str | Path,
    test_module_pattern: str = "test",
    root: str | Path | None = None,
) -> CodeFile:
    """Read and parse a single Rust file.

    Raises:
        ParserError: If the file cannot be read or parsed.
    """
    try:
        source = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParserError(f"Cannot read {file_path}: {e}") from e
    return parse_source(source, file_path, test_module_pattern, root)
