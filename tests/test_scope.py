"""Tests for scope resolution."""

from textwrap import dedent

from shaderdbg.debugger.lexer import scan_lines, split_lines
from shaderdbg.debugger.models import Parameter
from shaderdbg.debugger.scope import (
    find_block_end,
    find_enclosing_function,
    find_entry_function,
    function_parameters,
    header_text,
    parse_parameters,
    return_type,
)

SHADER = dedent(
    """\
    float circle(vec2 st) {
      return length(st);
    }

    void mainImage(out vec4 fragColor, in vec2 fragCoord) {
      vec2 uv = fragCoord / iResolution.xy;
      float d = circle(uv);
      fragColor = vec4(vec3(d), 1.0);
    }"""
)


def lex(source: str):
    return scan_lines(split_lines(source))


class TestFindEnclosingFunction:
    """Test the backward brace-depth walk."""

    def setup_method(self):
        self.lines = lex(SHADER)

    def test_helper_function(self):
        scope = find_enclosing_function(self.lines, 1)
        assert scope.name == "circle"
        assert scope.start == 0
        assert scope.end == 2

    def test_entry_function(self):
        scope = find_enclosing_function(self.lines, 6)
        assert scope.name == "mainImage"
        assert scope.start == 4
        assert scope.end == 8

    def test_header_line_is_inside_function(self):
        scope = find_enclosing_function(self.lines, 4)
        assert scope.name == "mainImage"

    def test_line_between_functions_is_global(self):
        scope = find_enclosing_function(self.lines, 3)
        assert not scope.found
        assert scope.name is None

    def test_brace_on_next_line(self):
        lines = lex("float f(float x)\n{\n  return x * 2.0;\n}")
        scope = find_enclosing_function(lines, 2)
        assert scope.name == "f"
        assert scope.start == 0
        assert scope.end == 3

    def test_function_closed_above_target(self):
        lines = lex("float f() { return 1.0; }\nfloat g = 2.0;")
        assert not find_enclosing_function(lines, 1).found

    def test_unterminated_function(self):
        lines = lex(
            "void mainImage(out vec4 fragColor, in vec2 fragCoord) {\n"
            "  vec2 uv = fragCoord;"
        )
        scope = find_enclosing_function(lines, 1)
        assert scope.name == "mainImage"
        assert scope.end == -1

    def test_nested_blocks(self):
        lines = lex(
            dedent(
                """\
                vec3 shade(vec2 p) {
                  vec3 col = vec3(0.0);
                  for (int i = 0; i < 4; i++) {
                    if (p.x > 0.5) {
                      col += vec3(0.1);
                    }
                  }
                  return col;
                }"""
            )
        )
        scope = find_enclosing_function(lines, 4)
        assert scope.name == "shade"
        assert scope.end == 8
        assert find_enclosing_function(lines, 7).name == "shade"

    def test_commented_brace_ignored(self):
        lines = lex("float f() {\n  // }\n  return 1.0;\n}")
        assert find_enclosing_function(lines, 2).name == "f"


class TestEntryAndHeaders:
    """Test entry function lookup and header parsing."""

    def setup_method(self):
        self.lines = lex(SHADER)

    def test_find_entry_function(self):
        entry = find_entry_function(self.lines)
        assert entry.name == "mainImage"
        assert (entry.start, entry.end) == (4, 8)

    def test_missing_entry_function(self):
        assert not find_entry_function(lex("float f() { return 1.0; }")).found

    def test_find_block_end(self):
        assert find_block_end(self.lines, 4) == 8
        assert find_block_end(lex("void f() {"), 0) == -1

    def test_return_type(self):
        helper = find_enclosing_function(self.lines, 1)
        entry = find_enclosing_function(self.lines, 6)
        outside = find_enclosing_function(self.lines, 3)
        assert return_type(self.lines, helper) == "float"
        assert return_type(self.lines, entry) == "void"
        assert return_type(self.lines, outside) is None

    def test_parse_parameters_with_qualifiers(self):
        params = parse_parameters(
            "void f(out vec4 a, in vec2 b, inout float c, sampler2D tex) {"
        )
        assert params == [
            Parameter(name="a", type="vec4", qualifier="out"),
            Parameter(name="b", type="vec2", qualifier="in"),
            Parameter(name="c", type="float", qualifier="inout"),
            Parameter(name="tex", type="sampler2D"),
        ]

    def test_parse_empty_parameter_list(self):
        assert parse_parameters("float getValue() {") == []

    def test_multiline_header(self):
        lines = lex("float sdBox(vec2 p,\n            vec2 b) {\n  return 0.0;\n}")
        assert header_text(lines, 0) == "float sdBox(vec2 p, vec2 b) {"
        scope = find_enclosing_function(lines, 2)
        assert [p.name for p in function_parameters(lines, scope)] == ["p", "b"]
