import re

import pytest

from demolsp.analysis.symbols import (
    BINDING_SHAPE,
    FUNCTION_SHAPE,
    DeclarationMatch,
    DeclarationShape,
    SymbolIndex,
    DeclarationKind,
    scan_symbols,
)

from .conftest import SAMPLE_TEXT


class TestDeclarationShapes:
    def test_let_binding(self):
        assert BINDING_SHAPE.match("let myVar = 10;") == DeclarationMatch("myVar", 4, 9)

    def test_const_binding(self):
        assert BINDING_SHAPE.match("  const $el=document.body;") == DeclarationMatch("$el", 8, 11)

    def test_var_is_not_a_binding(self):
        assert BINDING_SHAPE.match("var x = 1;") is None

    def test_binding_needs_equals(self):
        assert BINDING_SHAPE.match("let x;") is None

    def test_keyword_needs_word_boundary(self):
        assert BINDING_SHAPE.match("outlet x = 1;") is None

    def test_function(self):
        assert FUNCTION_SHAPE.match("function myFunc() {") == DeclarationMatch("myFunc", 9, 15)

    def test_function_with_space_before_paren(self):
        assert FUNCTION_SHAPE.match("export function run (a, b) {") == DeclarationMatch("run", 16, 19)

    def test_anonymous_function_is_not_a_declaration(self):
        assert FUNCTION_SHAPE.match("const f = function() {};") is None

    def test_span_is_first_occurrence_of_name(self):
        # The name also appears earlier in the comment, and the span points there.
        line = "/* x */ let x = 1;"
        assert BINDING_SHAPE.match(line) == DeclarationMatch("x", 3, 4)

    def test_non_ascii_identifier_is_not_matched(self):
        assert BINDING_SHAPE.match("let café = 1;") is None


class TestScanSymbols:
    def test_single_variable(self):
        symbols = scan_symbols("file:///a.js", "let myVar = 10;")
        assert len(symbols) == 1
        sym = symbols[0]
        assert sym.name == "myVar"
        assert sym.kind == DeclarationKind.Variable
        assert sym.uri == "file:///a.js"
        assert (sym.range.start.line, sym.range.start.character) == (0, 4)
        assert (sym.range.end.line, sym.range.end.character) == (0, 9)

    def test_variable_and_function(self):
        symbols = scan_symbols("file:///a.js", SAMPLE_TEXT)
        assert [(s.name, s.kind) for s in symbols] == [
            ("myVar", DeclarationKind.Variable),
            ("myFunc", DeclarationKind.Function),
        ]
        assert symbols[1].range.start.line == 1

    def test_one_symbol_per_shape_per_line(self):
        symbols = scan_symbols("file:///a.js", "let a = 1; let b = 2;")
        assert [s.name for s in symbols] == ["a"]

    def test_both_shapes_on_one_line(self):
        symbols = scan_symbols("file:///a.js", "const f = 1; function g() {}")
        assert [(s.name, s.kind) for s in symbols] == [
            ("f", DeclarationKind.Variable),
            ("g", DeclarationKind.Function),
        ]

    def test_crlf_line_endings(self):
        symbols = scan_symbols("file:///a.js", "let a = 1;\r\nfunction b() {}\r\n")
        assert [(s.name, s.range.start.line) for s in symbols] == [("a", 0), ("b", 1)]
        assert symbols[1].range.start.character == 9

    def test_empty_document(self):
        assert scan_symbols("file:///a.js", "") == []

    def test_names_occur_on_declaration_line(self):
        text = "let alpha = 1;\n// let beta = alpha\nfunction gamma(x) { return alpha; }\nconst delta= gamma(2);"
        lines = text.split("\n")
        symbols = scan_symbols("file:///a.js", text)
        assert len(symbols) == 4
        for sym in symbols:
            line = lines[sym.range.start.line]
            assert line[sym.range.start.character:sym.range.end.character] == sym.name

    def test_custom_shapes(self):
        class_shape = DeclarationShape(DeclarationKind.Function, re.compile(r"\bclass\s+(\w+)"))
        symbols = scan_symbols("file:///a.js", "class Foo {}\nlet x = 1;", shapes=[class_shape])
        assert [s.name for s in symbols] == ["Foo"]


class TestSymbolIndex:
    def test_index_replaces_previous_symbols(self):
        index = SymbolIndex()
        index.index("file:///a.js", SAMPLE_TEXT)
        assert len(index.symbols("file:///a.js")) == 2

        index.index("file:///a.js", "let other = 1;")
        assert [s.name for s in index.symbols("file:///a.js")] == ["other"]

    def test_documents_are_independent(self):
        index = SymbolIndex()
        index.index("file:///a.js", "let a = 1;")
        index.index("file:///b.js", "let b = 1;")
        assert [s.name for s in index.symbols("file:///a.js")] == ["a"]
        assert [s.name for s in index.symbols("file:///b.js")] == ["b"]
        assert sorted(index.uris()) == ["file:///a.js", "file:///b.js"]
        assert len(index) == 2

    def test_unknown_uri(self):
        index = SymbolIndex()
        assert index.symbols("file:///missing.js") == []
        assert "file:///missing.js" not in index
        assert index.find("file:///missing.js", "x") is None

    def test_reindex_to_empty_keeps_entry(self):
        index = SymbolIndex()
        index.index("file:///a.js", "let a = 1;")
        index.index("file:///a.js", "")
        assert "file:///a.js" in index
        assert index.symbols("file:///a.js") == []

    def test_find_returns_first_declaration(self):
        index = SymbolIndex()
        index.index("file:///a.js", "let x = 1;\nfunction x() {}")
        sym = index.find("file:///a.js", "x")
        assert sym is not None
        assert sym.kind == DeclarationKind.Variable
        assert sym.range.start.line == 0

    def test_symbols_returns_a_copy(self):
        index = SymbolIndex()
        index.index("file:///a.js", "let a = 1;")
        index.symbols("file:///a.js").clear()
        assert len(index.symbols("file:///a.js")) == 1

    @pytest.mark.parametrize("text", ["\n\n\n", "}", "let = 5;", "function () {}"])
    def test_unmatched_text(self, text):
        index = SymbolIndex()
        assert index.index("file:///a.js", text) == []
