"""Tests for type environment construction."""

from textwrap import dedent

from shaderdbg.debugger.lexer import scan_lines, split_lines
from shaderdbg.debugger.models import FunctionScope
from shaderdbg.debugger.scope import find_enclosing_function
from shaderdbg.debugger.type_env import build_type_environment

SHADER = dedent(
    """\
    vec3 palette(float t) {
      vec3 a = vec3(0.5);
      return a;
    }
    void mainImage(out vec4 fragColor, in vec2 fragCoord) {
      vec2 uv = fragCoord / iResolution.xy;
      float a = 1.0;
      vec4 col;
      int n = 3;
    }"""
)


class TestBuildTypeEnvironment:
    """Test the flat name-to-type map."""

    def setup_method(self):
        self.lines = scan_lines(split_lines(SHADER))

    def test_parameters_seed_environment(self):
        scope = find_enclosing_function(self.lines, 1)
        env = build_type_environment(self.lines, 1, scope)
        assert env["t"] == "float"
        assert env["a"] == "vec3"

    def test_last_declaration_wins(self):
        scope = find_enclosing_function(self.lines, 7)
        env = build_type_environment(self.lines, 7, scope)
        assert env["a"] == "float"
        assert env["uv"] == "vec2"
        assert env["fragColor"] == "vec4"
        assert env["fragCoord"] == "vec2"

    def test_declaration_without_initializer(self):
        scope = find_enclosing_function(self.lines, 7)
        assert build_type_environment(self.lines, 7, scope)["col"] == "vec4"

    def test_bound_limits_declarations(self):
        scope = find_enclosing_function(self.lines, 5)
        env = build_type_environment(self.lines, 5, scope)
        assert env["a"] == "vec3"
        assert "col" not in env

    def test_unsupported_types_not_tracked(self):
        scope = find_enclosing_function(self.lines, 8)
        assert "n" not in build_type_environment(self.lines, 8, scope)

    def test_global_scope_has_no_parameters(self):
        lines = scan_lines(["const float scale = 2.0;"])
        assert build_type_environment(lines, 0, FunctionScope()) == {"scale": "float"}

    def test_integer_vector_not_read_as_float_vector(self):
        lines = scan_lines(["ivec2 cell = ivec2(0);", "uvec3 hash = uvec3(1u);"])
        assert build_type_environment(lines, 1, FunctionScope()) == {}
