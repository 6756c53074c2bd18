"""Tests for multi-line statement joining."""

from textwrap import dedent

from shaderdbg.debugger.lexer import scan_lines, split_lines
from shaderdbg.debugger.statement import is_incomplete, join_statement

SHADER = dedent(
    """\
    void mainImage(out vec4 fragColor, in vec2 fragCoord) {
      vec3 col = vec3(0.1) +
                 vec3(0.2) * // comment
                 vec3(0.3);
      fragColor = vec4(col, 1.0);
    }"""
)


class TestJoinStatement:
    """Test joining of statements across lines."""

    def setup_method(self):
        self.lines = scan_lines(split_lines(SHADER))

    def test_single_line_statement(self):
        statement = join_statement(self.lines, 4)
        assert statement.text == "  fragColor = vec4(col, 1.0);"
        assert (statement.start, statement.end) == (4, 4)

    def test_middle_line_joins_whole_statement(self):
        statement = join_statement(self.lines, 2)
        assert statement.text == "vec3 col = vec3(0.1) + vec3(0.2) * vec3(0.3);"
        assert (statement.start, statement.end) == (1, 3)

    def test_first_line_joins_forward(self):
        statement = join_statement(self.lines, 1)
        assert (statement.start, statement.end) == (1, 3)

    def test_last_line_joins_backward(self):
        statement = join_statement(self.lines, 3)
        assert (statement.start, statement.end) == (1, 3)

    def test_missing_terminator_uses_target_line(self):
        lines = scan_lines(["a +"] * 6 + ["b + // target"] + ["c +"] * 12)
        statement = join_statement(lines, 6)
        assert statement.text == "b +"
        assert (statement.start, statement.end) == (6, 6)

    def test_preprocessor_line_is_complete(self):
        lines = scan_lines(["#define R 1.0", "float x = R;"])
        statement = join_statement(lines, 1)
        assert statement.text == "float x = R;"
        assert statement.start == 1


class TestIsIncomplete:
    """Test line completeness."""

    def test_terminators(self):
        for text in ("x = 1.0;", "void f() {", "}", "", "// note", "#version 300 es"):
            assert not is_incomplete(scan_lines([text])[0]), text

    def test_continuation(self):
        assert is_incomplete(scan_lines(["x = a + // more"])[0])
