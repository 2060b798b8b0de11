"""Tests for the per-kind declaration scanner."""

import pytest

from memscope.scanning.declarations import (
    INFERRED,
    DeclarationScanner,
    count_params,
    function_label,
    use_display_name,
)
from memscope.scanning.models import DeclarationKind


@pytest.fixture
def scanner():
    return DeclarationScanner()


def _names(scanner, text, kind):
    return [m.name for m in scanner.scan_kind(text, kind)]


class TestBindings:
    """let / const / static bindings."""

    def test_annotated_binding(self, scanner):
        (m,) = scanner.scan_kind("let x: i32 = 5;", DeclarationKind.BINDING)
        assert m.name == "x"
        assert m.type_label == "i32"
        assert m.type_text == "i32"
        assert m.initializer == "5"
        assert m.qualifier == "let"

    def test_inferred_binding(self, scanner):
        (m,) = scanner.scan_kind("let mut v = Vec::new();", DeclarationKind.BINDING)
        assert m.name == "v"
        assert m.type_label == INFERRED
        assert m.type_text == ""
        assert m.initializer == "Vec::new()"
        assert m.qualifier == "let mut"

    def test_const_and_static(self, scanner):
        text = 'const MAX: usize = 10;\nstatic NAME: &str = "memscope";\nstatic mut COUNT: u32 = 0;\n'
        matches = scanner.scan_kind(text, DeclarationKind.BINDING)
        assert [m.name for m in matches] == ["MAX", "NAME", "COUNT"]
        assert [m.qualifier for m in matches] == ["const", "static", "static mut"]
        assert matches[1].type_label == "&str"

    def test_array_annotation_with_semicolon(self, scanner):
        (m,) = scanner.scan_kind("static TABLE: [u8; 256] = [0; 256];", DeclarationKind.BINDING)
        assert m.type_label == "[u8; 256]"
        assert m.initializer == "[0; 256]"

    def test_string_initializer_keeps_semicolon_inside_literal(self, scanner):
        (m,) = scanner.scan_kind('let s = String::from("a;b");', DeclarationKind.BINDING)
        assert m.initializer == 'String::from("a;b")'

    def test_declaration_without_initializer(self, scanner):
        (m,) = scanner.scan_kind("let total: u64;", DeclarationKind.BINDING)
        assert m.type_label == "u64"
        assert m.initializer is None

    def test_const_fn_is_not_a_binding(self, scanner):
        assert _names(scanner, "const fn compute() -> u32 { 0 }", DeclarationKind.BINDING) == []
        assert _names(scanner, "pub const unsafe fn raw() {}", DeclarationKind.BINDING) == []

    def test_static_lifetime_is_not_a_binding(self, scanner):
        text = "static GREETING: &'static str = \"hi\";"
        assert _names(scanner, text, DeclarationKind.BINDING) == ["GREETING"]

    def test_raw_const_pointer_is_not_a_binding(self, scanner):
        assert _names(scanner, "fn f(p: *const u8) {}", DeclarationKind.BINDING) == []

    def test_pattern_bindings_are_ignored(self, scanner):
        assert _names(scanner, "let (a, b) = pair;", DeclarationKind.BINDING) == []

    def test_indented_binding(self, scanner):
        text = "fn main() {\n    let count = 3;\n}\n"
        (m,) = scanner.scan_kind(text, DeclarationKind.BINDING)
        assert m.name == "count"
        assert m.line == 2


class TestFunctions:
    def test_parameter_count_excludes_self(self, scanner):
        text = "fn greet(&self, name: &str, times: u32) -> String {"
        (m,) = scanner.scan_kind(text, DeclarationKind.FUNCTION)
        assert m.name == "greet"
        assert m.type_label == "fn(2) -> String"
        assert m.type_text == "String"

    def test_no_return_type(self, scanner):
        (m,) = scanner.scan_kind("fn main() {", DeclarationKind.FUNCTION)
        assert m.type_label == "fn(0)"
        assert m.type_text == ""
        assert m.qualifier == "fn"

    def test_modifiers_become_qualifier(self, scanner):
        text = 'pub(crate) async fn run() {}\nconst fn zero() -> u32 { 0 }\npub unsafe extern "C" fn cb(x: i32) {}\n'
        matches = scanner.scan_kind(text, DeclarationKind.FUNCTION)
        assert [m.name for m in matches] == ["run", "zero", "cb"]
        assert matches[0].qualifier == "pub(crate) async fn"
        assert matches[1].qualifier == "const fn"
        assert matches[2].qualifier == 'pub unsafe extern "C" fn'
        assert matches[2].type_label == "fn(1)"

    def test_generics_and_where_clause(self, scanner):
        text = "fn first<T: Clone>(items: &[T]) -> Option<T>\nwhere\n    T: Default,\n{"
        (m,) = scanner.scan_kind(text, DeclarationKind.FUNCTION)
        assert m.name == "first"
        assert m.type_label == "fn(1) -> Option<T>"

    def test_nested_parentheses_in_params(self, scanner):
        text = "fn apply(f: fn(u8) -> u8, pair: (u8, u8)) -> u8 {"
        (m,) = scanner.scan_kind(text, DeclarationKind.FUNCTION)
        assert m.type_label == "fn(2) -> u8"

    def test_commented_function_skipped(self, scanner):
        assert _names(scanner, "    // fn old() {}", DeclarationKind.FUNCTION) == []

    def test_deeply_nested_parameter_types(self, scanner):
        text = "pub fn apply(f: impl Fn(&mut Vec<(u8, u8)>)) -> u32 {"
        (m,) = scanner.scan_kind(text, DeclarationKind.FUNCTION)
        assert m.name == "apply"
        assert m.type_label == "fn(1) -> u32"
        assert m.type_text == "u32"

    def test_multiline_parameters(self, scanner):
        text = (
            "fn build(\n"
            "    name: &str,\n"
            "    cb: Box<dyn Fn((u8, u8)) -> bool>,\n"
            ") -> Option<u8> {\n"
        )
        (m,) = scanner.scan_kind(text, DeclarationKind.FUNCTION)
        assert m.type_label == "fn(2) -> Option<u8>"
        assert m.line == 1

    def test_unclosed_parameter_list_is_skipped(self, scanner):
        assert _names(scanner, "fn broken(a: u8", DeclarationKind.FUNCTION) == []

    def test_trait_method_declaration(self, scanner):
        (m,) = scanner.scan_kind("    fn area(&self) -> f64;", DeclarationKind.FUNCTION)
        assert m.type_label == "fn(0) -> f64"


class TestAttributes:
    """Outer attributes written on the same line as the item."""

    def test_derive_before_struct(self, scanner):
        text = "#[derive(Debug, Clone)] pub struct X { a: u8 }"
        (m,) = scanner.scan_kind(text, DeclarationKind.STRUCT)
        assert m.name == "X"
        assert m.qualifier == "pub struct"

    def test_inline_function(self, scanner):
        (m,) = scanner.scan_kind("#[inline] fn f() -> u8 { 1 }", DeclarationKind.FUNCTION)
        assert m.name == "f"
        assert m.qualifier == "fn"
        assert m.type_label == "fn(0) -> u8"

    def test_cfg_module(self, scanner):
        assert _names(scanner, "#[cfg(test)] mod tests {", DeclarationKind.MODULE) == ["tests"]

    def test_several_attributes(self, scanner):
        text = "#[derive(Debug)]\n    #[repr(C)] #[allow(dead_code)] enum Mode { A }\n"
        (m,) = scanner.scan_kind(text, DeclarationKind.ENUM)
        assert m.name == "Mode"
        assert m.line == 2

    def test_attributed_impl_and_trait(self, scanner):
        text = "#[automatically_derived] impl Clone for X {\n#[async_trait] pub trait Store {\n"
        assert _names(scanner, text, DeclarationKind.IMPL) == ["X"]
        assert _names(scanner, text, DeclarationKind.TRAIT) == ["Store"]

    def test_commented_attributed_item_skipped(self, scanner):
        assert _names(scanner, "// #[inline] fn gone() {}", DeclarationKind.FUNCTION) == []


class TestAggregatesAndItems:
    def test_struct_enum_union(self, scanner):
        text = "pub struct Config {}\nenum Mode { A }\nunion Bits { i: u32 }\n"
        assert _names(scanner, text, DeclarationKind.STRUCT) == ["Config"]
        assert _names(scanner, text, DeclarationKind.ENUM) == ["Mode"]
        assert _names(scanner, text, DeclarationKind.UNION) == ["Bits"]
        (config,) = scanner.scan_kind(text, DeclarationKind.STRUCT)
        assert config.type_label == "struct"
        assert config.qualifier == "pub struct"

    def test_keyword_inside_string_is_not_an_item(self, scanner):
        assert _names(scanner, 'let s = "struct Foo";', DeclarationKind.STRUCT) == []

    def test_trait(self, scanner):
        text = "pub trait Shape {}\npub unsafe trait Marker {}\n"
        assert _names(scanner, text, DeclarationKind.TRAIT) == ["Shape", "Marker"]

    def test_impl_with_trait(self, scanner):
        text = "impl<T: Display> fmt::Display for Wrapper<T> {"
        (m,) = scanner.scan_kind(text, DeclarationKind.IMPL)
        assert m.name == "Wrapper"
        assert m.type_label == "impl fmt::Display"

    def test_inherent_impl(self, scanner):
        (m,) = scanner.scan_kind("impl Point {", DeclarationKind.IMPL)
        assert m.name == "Point"
        assert m.type_label == "impl"

    def test_return_position_impl_is_not_an_item(self, scanner):
        text = "fn make() -> impl Iterator<Item = u8> {"
        assert scanner.scan_kind(text, DeclarationKind.IMPL) == []

    def test_type_alias(self, scanner):
        (m,) = scanner.scan_kind("pub type Grid = [[u8; 3]; 3];", DeclarationKind.TYPE_ALIAS)
        assert m.name == "Grid"
        assert m.type_label == "[[u8; 3]; 3]"

    def test_module(self, scanner):
        text = "pub mod shapes;\nmod tests {\n}\n"
        assert _names(scanner, text, DeclarationKind.MODULE) == ["shapes", "tests"]

    def test_macro(self, scanner):
        (m,) = scanner.scan_kind("macro_rules! square {", DeclarationKind.MACRO)
        assert m.name == "square"
        assert m.type_label == "macro_rules!"

    def test_use(self, scanner):
        text = "use std::fmt;\nuse std::collections::{HashMap, HashSet};\npub use crate::a::b as c;\n"
        assert _names(scanner, text, DeclarationKind.USE) == ["fmt", "HashMap, HashSet", "b as c"]

    def test_extern_crate(self, scanner):
        text = "extern crate serde;\nextern crate alloc as core_alloc;\n"
        assert _names(scanner, text, DeclarationKind.EXTERN_CRATE) == ["serde", "alloc"]

    def test_extern_block(self, scanner):
        text = 'extern "C" {\n}\nextern {\n}\n'
        matches = scanner.scan_kind(text, DeclarationKind.EXTERN_BLOCK)
        assert [m.name for m in matches] == ["C", "C"]
        assert matches[0].qualifier == 'extern "C"'

    def test_extern_fn_is_not_a_block(self, scanner):
        assert scanner.scan_kind('extern "C" fn cb() {}', DeclarationKind.EXTERN_BLOCK) == []


class TestScanAllKinds:
    def test_kinds_are_independent(self, scanner):
        """A line may match several kinds; overlaps are kept."""
        text = "use structs::Thing;\nstruct Thing;\n"
        kinds = [m.kind for m in scanner.scan(text)]
        assert DeclarationKind.USE in kinds
        assert DeclarationKind.STRUCT in kinds

    def test_results_ordered_by_kind_then_position(self, scanner):
        text = "struct B;\nlet a = 1;\nstruct C;\n"
        matches = scanner.scan(text)
        assert [(m.kind, m.name) for m in matches] == [
            (DeclarationKind.BINDING, "a"),
            (DeclarationKind.STRUCT, "B"),
            (DeclarationKind.STRUCT, "C"),
        ]

    def test_line_numbers(self, scanner):
        (m,) = scanner.scan("\n\nlet a = 1;")
        assert m.line == 3

    def test_commented_lines_skipped(self, scanner):
        text = "// let hidden = 5;\n  // struct Gone {}\nlet shown = 1;\n"
        assert [m.name for m in scanner.scan(text)] == ["shown"]

    def test_empty_text(self, scanner):
        assert scanner.scan("") == []


class TestHelpers:
    @pytest.mark.parametrize(
        "params, expected",
        [
            ("", 0),
            ("&self", 0),
            ("&mut self, x: u8", 1),
            ("self, a: u8, b: u8", 2),
            ("&'a self, s: &str", 1),
            ("a: u8, b: u8,", 2),
            ("selfish: u8", 1),
        ],
    )
    def test_count_params(self, params, expected):
        assert count_params(params) == expected

    def test_function_label(self):
        assert function_label(2, "u8") == "fn(2) -> u8"
        assert function_label(0, "") == "fn(0)"

    def test_use_display_name(self):
        assert use_display_name("std::io::{self, Write}") == "self, Write"
        assert use_display_name("serde") == "serde"
