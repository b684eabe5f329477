"""Tests for the Rust parser module."""

from __future__ import annotations

from pathlib import Path

import pytest

from rustydocs.config import IndexerConfig
from rustydocs.exceptions import ParserError, SnapshotError
from rustydocs.parser.core import (
    collect_files,
    load_code_files,
    load_snapshot,
    parse_repository,
    write_snapshot,
)
from rustydocs.parser.models import CodeElementID, ItemKind, detect_language
from rustydocs.parser.rust_parser import module_location, parse_file, parse_source
from rustydocs.parser.spans import is_outer_doc_comment, slice_lines


def _by_path(code_file):
    return {(e.location, e.ident): e for e in code_file.elements}


class TestLanguageDetection:
    def test_rust(self):
        assert detect_language("src/lib.rs") == "rust"

    def test_unknown(self):
        assert detect_language("main.py") is None
        assert detect_language("Cargo.toml") is None


class TestSpans:
    CODE = "line one\nline two\nline three\nline four"

    def test_absolute_lines(self):
        assert slice_lines(self.CODE, 2, 3) == "line two\nline three"

    def test_single_line(self):
        assert slice_lines(self.CODE, 4, 4) == "line four"

    def test_relative_to_parent(self):
        # Enclosing declaration starts at line 10 of the file
        assert slice_lines(self.CODE, 11, 12, parent_start_line=10) == "line two\nline three"

    def test_outer_doc_comments(self):
        assert is_outer_doc_comment("/// docs")
        assert is_outer_doc_comment("/** docs */")
        assert not is_outer_doc_comment("//// not docs")
        assert not is_outer_doc_comment("//! inner docs")
        assert not is_outer_doc_comment("// plain")


class TestModuleLocation:
    def test_crate_roots(self):
        assert module_location("src/lib.rs") == "crate"
        assert module_location("src/main.rs") == "crate"

    def test_nested_modules(self):
        assert module_location("src/geometry.rs") == "crate :: geometry"
        assert module_location("src/shapes/mod.rs") == "crate :: shapes"
        assert module_location("src/shapes/circle.rs") == "crate :: shapes :: circle"

    def test_relative_to_root(self):
        location = module_location("/work/src/proj/examples/demo.rs", root="/work/src/proj")
        assert location == "crate :: demo"

    def test_last_src_component_wins(self):
        assert module_location("/work/src/proj/src/geometry.rs") == "crate :: geometry"


class TestElementExtraction:
    def test_element_order(self, lib_source: str):
        code_file = parse_source(lib_source, "src/lib.rs")
        ids = [(e.ident, e.kind) for e in code_file.elements]
        assert ids == [
            ("Point", ItemKind.STRUCT),
            ("dist", ItemKind.FN),
            ("fmt", ItemKind.FN),
            ("impl_Point", ItemKind.IMPL),
            ("crate", ItemKind.MOD),
        ]

    def test_file_element_is_last(self, lib_source: str):
        code_file = parse_source(lib_source, "src/lib.rs")
        module = code_file.elements[-1]
        assert module.code_element_id == CodeElementID(
            ident="crate", kind=ItemKind.MOD, location=""
        )
        assert module.code == lib_source
        assert module.line_start == [1]
        assert [c.ident for c in module.children] == ["geometry", "Point", "dist", "impl_Point"]

    def test_file_element_of_submodule(self):
        code_file = parse_source("pub fn f() {}\n", "src/geometry.rs")
        module = code_file.elements[-1]
        assert module.ident == "geometry"
        assert module.location == "crate"
        assert code_file.elements[0].location == "crate :: geometry"

    def test_struct_fields_lines(self, lib_source: str):
        point = _by_path(parse_source(lib_source, "src/lib.rs"))[("crate", "Point")]
        # Item starts at its doc comment, the first field at its own doc
        assert point.line_start == [7, 10, 12]
        assert point.code.startswith("/// A point in the plane.\n#[derive(Debug, Clone, Copy)]")
        assert point.code.endswith("}")

    def test_enum_variant_lines(self):
        source = "enum Shape {\n    /// A circle.\n    Circle(f64),\n    Square { side: f64 },\n}\n"
        shape = parse_source(source, "src/lib.rs").elements[0]
        assert shape.kind == ItemKind.ENUM
        assert shape.line_start == [1, 2, 4]

    def test_function_code_is_verbatim(self, lib_source: str):
        dist = _by_path(parse_source(lib_source, "src/lib.rs"))[("crate", "dist")]
        assert dist.code == (
            "pub fn dist(p: Point) -> f64 {\n"
            "    (p.x * p.x + p.y * p.y).sqrt()\n"
            "}"
        )
        assert dist.line_start == [15]

    def test_impl_members_are_siblings(self, lib_source: str):
        elements = _by_path(parse_source(lib_source, "src/lib.rs"))
        impl = elements[("crate", "impl_Point")]
        fmt = elements[("crate :: impl_Point", "fmt")]
        assert impl.children == [fmt.code_element_id]
        assert fmt.line_start == [20]
        assert fmt.code.startswith("    fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result {")

    def test_trait_members_are_siblings(self):
        source = "pub trait Area {\n    fn area(&self) -> f64;\n    const SIDES: u8;\n}\n"
        elements = _by_path(parse_source(source, "src/geometry.rs"))
        trait = elements[("crate :: geometry", "Area")]
        assert trait.kind == ItemKind.TRAIT
        assert [c.ident for c in trait.children] == ["area", "SIDES"]
        assert elements[("crate :: geometry :: Area", "area")].kind == ItemKind.FN
        assert elements[("crate :: geometry :: Area", "SIDES")].kind == ItemKind.CONST

    def test_generic_impl_ident(self):
        source = "struct Wrapper<T>(T);\n\nimpl<T> Wrapper<T> {\n    fn get(&self) -> &T {\n        &self.0\n    }\n}\n"
        elements = _by_path(parse_source(source, "src/lib.rs"))
        assert ("crate", "impl_Wrapper") in elements
        assert ("crate :: impl_Wrapper", "get") in elements

    def test_repeated_identities_get_suffix(self):
        source = (
            "struct A;\n"
            "impl A {\n    fn new() -> A { A }\n}\n"
            "impl A {\n    fn new() -> A { A }\n}\n"
        )
        code_file = parse_source(source, "src/lib.rs")
        idents = [(e.location, e.ident) for e in code_file.elements]
        assert ("crate", "impl_A") in idents
        assert ("crate", "impl_A#2") in idents
        assert ("crate :: impl_A", "new") in idents
        assert ("crate :: impl_A", "new#2") in idents
        assert len(set(e.code_element_id for e in code_file.elements)) == len(code_file.elements)

    def test_inline_module(self):
        source = "mod outer {\n    pub fn inner_fn() {}\n}\n"
        elements = _by_path(parse_source(source, "src/lib.rs"))
        outer = elements[("crate", "outer")]
        # Module docs go on the first line of the body
        assert outer.line_start == [2]
        assert outer.children == [elements[("crate :: outer", "inner_fn")].code_element_id]

    def test_inline_module_with_docs_and_attributes(self):
        source = (
            "/// Helpers.\n"
            "#[cfg(feature = \"x\")]\n"
            "pub mod util {\n"
            "    pub fn f() {}\n"
            "}\n"
        )
        util = _by_path(parse_source(source, "src/lib.rs"))[("crate", "util")]
        assert util.code.startswith("/// Helpers.")
        assert util.line_start == [4]

    def test_module_declaration_not_emitted(self, lib_source: str):
        code_file = parse_source(lib_source, "src/lib.rs")
        assert ("crate", "geometry") not in _by_path(code_file)
        geometry = CodeElementID(ident="geometry", kind=ItemKind.MOD, location="crate")
        assert geometry in code_file.elements[-1].children

    def test_tests_module_is_skipped(self, lib_source: str):
        code_file = parse_source(lib_source, "src/lib.rs")
        for element in code_file.elements:
            assert "tests" not in element.location
            assert element.ident not in ("tests", "origin_is_at_zero")

    def test_test_file_is_skipped(self):
        code_file = parse_source("pub fn helper() {}\n", "src/test_utils.rs")
        assert code_file.elements == []

    def test_custom_test_pattern(self):
        source = "mod checks {\n    fn a() {}\n}\nmod tests {\n    fn b() {}\n}\n"
        code_file = parse_source(source, "src/lib.rs", test_module_pattern="check")
        idents = {e.ident for e in code_file.elements}
        assert "checks" not in idents
        assert {"tests", "b"} <= idents

    def test_no_use_elements(self, lib_source: str):
        code_file = parse_source(lib_source, "src/lib.rs")
        assert all(e.kind != ItemKind.USE for e in code_file.elements)

    def test_other_item_kinds(self):
        source = (
            "extern crate alloc;\n"
            "static COUNTER: u32 = 0;\n"
            "type Meters = f64;\n"
            "union Bits { i: u32, f: f32 }\n"
            "macro_rules! square { ($x:expr) => { $x * $x }; }\n"
            'extern "C" {\n    fn abs(input: i32) -> i32;\n}\n'
        )
        kinds = {e.ident: e.kind for e in parse_source(source, "src/lib.rs").elements}
        assert kinds["alloc"] == ItemKind.EXTERN_CRATE
        assert kinds["COUNTER"] == ItemKind.STATIC
        assert kinds["Meters"] == ItemKind.TYPE
        assert kinds["Bits"] == ItemKind.UNION
        assert kinds["square"] == ItemKind.MACRO
        assert kinds["extern_C"] == ItemKind.FOREIGN_MOD

    def test_syntax_error(self):
        with pytest.raises(ParserError):
            parse_source("fn broken( {\n", "src/lib.rs")

    def test_unreadable_file(self, tmp_path: Path):
        with pytest.raises(ParserError):
            parse_file(tmp_path / "missing.rs")

    def test_identity_stability(self, lib_source: str):
        first = parse_source(lib_source, "src/lib.rs")
        second = parse_source(lib_source, "src/lib.rs")
        assert [e.code_element_id for e in first.elements] == [
            e.code_element_id for e in second.elements
        ]
        assert [e.code_element_id.get_hash() for e in first.elements] == [
            e.code_element_id.get_hash() for e in second.elements
        ]

    def test_location_monotonicity(self, lib_source: str):
        source = lib_source + "\nmod outer {\n    mod inner {\n        fn deep() {}\n    }\n}\n"
        code_file = parse_source(source, "src/lib.rs")
        for element in code_file.elements:
            for child in element.children:
                assert child.location != element.location
                assert child.location.startswith(element.location)


class TestImports:
    def test_top_level_imports(self):
        source = "use std::{fmt, io::{self, Read}};\nuse crate::geometry::Circle as Round;\n\nfn f() {}\n"
        element = parse_source(source, "src/lib.rs").elements[0]
        assert element.imports == [
            "std :: fmt",
            "std :: io",
            "std :: io :: Read",
            "crate :: geometry :: Circle as Round",
        ]

    def test_glob_imports_are_not_expanded(self):
        source = "use std::collections::*;\n\nfn f() {}\n"
        element = parse_source(source, "src/lib.rs").elements[0]
        assert element.imports == []

    def test_function_local_use_shadows(self):
        source = (
            "use std::collections::HashMap as Map;\n"
            "use crate::store::Store;\n"
            "\n"
            "fn build() {\n"
            "    use crate::fast::Store;\n"
            "    let _m: Map<u8, u8> = Map::new();\n"
            "}\n"
            "\n"
            "fn other() {}\n"
        )
        elements = _by_path(parse_source(source, "src/lib.rs"))
        assert elements[("crate", "build")].imports == [
            "std :: collections :: HashMap as Map",
            "crate :: fast :: Store",
        ]
        assert elements[("crate", "other")].imports == [
            "std :: collections :: HashMap as Map",
            "crate :: store :: Store",
        ]

    def test_inline_module_has_own_imports(self):
        source = "use std::fmt;\n\nmod inner {\n    use std::io;\n    fn f() {}\n}\n"
        elements = _by_path(parse_source(source, "src/lib.rs"))
        assert elements[("crate :: inner", "f")].imports == ["std :: io"]
        assert elements[("crate", "inner")].imports == ["std :: fmt"]


class TestRepositoryWalker:
    def test_collect_files_skips_target(self, tmp_crate: Path):
        files = collect_files(tmp_crate)
        names = [f.relative_to(tmp_crate).as_posix() for f in files]
        assert names == ["src/geometry.rs", "src/lib.rs"]

    def test_gitignore(self, tmp_crate: Path):
        (tmp_crate / ".gitignore").write_text("# build\ngeometry.rs\n")
        names = [f.name for f in collect_files(tmp_crate)]
        assert names == ["lib.rs"]

    def test_parse_repository(self, tmp_crate: Path):
        code_files = parse_repository(tmp_crate)
        assert len(code_files) == 2
        modules = [f.elements[-1].code_element_id.qualified_path for f in code_files]
        assert modules == ["crate :: geometry", "crate"]

    def test_integration_tests_are_skipped(self, tmp_crate: Path):
        (tmp_crate / "tests").mkdir()
        (tmp_crate / "tests" / "integration.rs").write_text("pub fn it_works() {}\n")
        code_files = parse_repository(tmp_crate)
        idents = {e.ident for f in code_files for e in f.elements}
        assert "it_works" not in idents
        assert "integration" not in idents
        assert "dist" in idents

    def test_not_a_directory(self, tmp_path: Path):
        with pytest.raises(ParserError):
            parse_repository(tmp_path / "nope")

    def test_parse_failure_aborts(self, tmp_crate: Path):
        (tmp_crate / "src" / "broken.rs").write_text("fn broken( {\n")
        with pytest.raises(ParserError):
            parse_repository(tmp_crate)

    def test_custom_exclusions(self, tmp_crate: Path):
        config = IndexerConfig(exclude_patterns=["target", "geometry.rs"])
        code_files = parse_repository(tmp_crate, config=config)
        assert [Path(f.path).name for f in code_files] == ["lib.rs"]


class TestSnapshot:
    def test_round_trip(self, tmp_crate: Path, tmp_path: Path):
        snapshot = tmp_path / "out" / "snapshot.json"
        code_files = parse_repository(tmp_crate, write_to_json_path=snapshot)
        loaded = load_snapshot(snapshot)
        assert [f.path for f in loaded] == [f.path for f in code_files]
        for original, restored in zip(code_files, loaded):
            assert original.elements == restored.elements

    def test_load_code_files_by_extension(self, tmp_crate: Path, tmp_path: Path):
        snapshot = tmp_path / "snapshot.json"
        parsed = load_code_files(tmp_crate)
        write_snapshot(parsed, snapshot)
        loaded = load_code_files(snapshot)
        assert [len(f.elements) for f in loaded] == [len(f.elements) for f in parsed]

    def test_snapshot_needs_json_extension(self, tmp_crate: Path, tmp_path: Path):
        with pytest.raises(SnapshotError):
            parse_repository(tmp_crate, write_to_json_path=tmp_path / "snapshot.txt")

    def test_malformed_snapshot(self, tmp_path: Path):
        snapshot = tmp_path / "snapshot.json"
        snapshot.write_text("{not json")
        with pytest.raises(SnapshotError):
            load_snapshot(snapshot)

    def test_missing_snapshot(self, tmp_path: Path):
        with pytest.raises(ParserError):
            load_snapshot(tmp_path / "missing.json")
