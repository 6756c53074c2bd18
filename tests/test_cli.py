"""Tests for the shaderdbg command-line interface."""

import os
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner
from watchdog.events import FileModifiedEvent

from shaderdbg.debugger import DebugOptions
from shaderdbg.main import ShaderChangeHandler, app

runner = CliRunner()

SHADER = """\
float circle(vec2 st, float r) {
  float d = length(st) - r;
  for (int i = 0; i < 4; i++) {
    d *= 0.9;
  }
  return d;
}

void mainImage(out vec4 fragColor, in vec2 fragCoord) {
  vec2 uv = fragCoord / iResolution.xy;
  // no value here
  fragColor = vec4(vec3(circle(uv, 0.25)), 1.0);
}
"""


@pytest.fixture
def shader_file(tmp_path):
    """Create a temporary shader file for testing."""
    path = tmp_path / "shader.glsl"
    path.write_text(SHADER)
    return str(path)


def test_help():
    """Test that the CLI help command works."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Debug GLSL shaders" in result.stdout


def test_debug_help():
    """Test that the debug command help works."""
    result = runner.invoke(app, ["debug", "--help"])
    assert result.exit_code == 0
    assert "--cap" in result.stdout


def test_debug_to_stdout(shader_file):
    """Test debugging a line of the entry function."""
    result = runner.invoke(app, ["debug", shader_file, "9"])
    assert result.exit_code == 0
    assert "fragColor = vec4(uv, 0.0, 1.0); // Debug" in result.output


def test_debug_to_file(shader_file, tmp_path):
    """Test writing the rewritten shader to a file."""
    output = tmp_path / "debug.glsl"
    result = runner.invoke(app, ["debug", shader_file, "1", "-o", str(output)])
    assert result.exit_code == 0
    code = output.read_text()
    assert "float result = circle(uv, 0.25);" in code
    assert code.endswith("}\n")


def test_debug_with_options(shader_file, tmp_path):
    """Test loop caps, parameters and normalization from the command line."""
    output = tmp_path / "debug.glsl"
    result = runner.invoke(
        app,
        [
            "debug",
            shader_file,
            "0",
            "--cap",
            "0=3",
            "--param",
            "1=0.1",
            "--normalize",
            "abs",
            "-o",
            str(output),
        ],
    )
    assert result.exit_code == 0
    code = output.read_text()
    assert "if (++_dbgIter0 > 3) break;" in code
    assert "circle(uv, 0.1)" in code
    assert "// Debug: abs normalized float" in code


def test_debug_with_header(shader_file):
    """Test the generation header."""
    result = runner.invoke(app, ["debug", shader_file, "9", "--header"])
    assert result.exit_code == 0
    assert "// Generated by shaderdbg v0.1.0" in result.output
    assert "// Source file: shader.glsl" in result.output
    assert "// Debugged line: 9" in result.output


def test_debug_nothing_to_show(shader_file):
    """Test a line without a value."""
    result = runner.invoke(app, ["debug", shader_file, "10"])
    assert result.exit_code == 2


@pytest.mark.parametrize(
    "args",
    [
        ["99"],
        ["9", "--cap", "x"],
        ["9", "--cap", "0=many"],
        ["9", "--param", "=1.0"],
        ["9", "--normalize", "log"],
        ["0", "--cap", "0=0"],
    ],
    ids=[
        "out-of-range",
        "bad-cap",
        "non-integer-cap",
        "bad-param",
        "bad-mode",
        "zero-cap",
    ],
)
def test_debug_invalid_request(shader_file, args):
    """Test that invalid requests exit with an error."""
    result = runner.invoke(app, ["debug", shader_file, *args])
    assert result.exit_code == 1


def test_debug_missing_file(tmp_path):
    """Test a shader file that does not exist."""
    result = runner.invoke(app, ["debug", str(tmp_path / "missing.glsl"), "0"])
    assert result.exit_code == 1


def test_context_text(shader_file):
    """Test the text rendering of a function context."""
    result = runner.invoke(app, ["context", shader_file, "3"])
    assert result.exit_code == 0
    assert "function: float circle (helper)" in result.output
    assert "0: vec2 st [uv]" in result.output
    assert "0: lines 2-4 for (int i = 0; i < 4; i++)" in result.output


def test_context_yaml(shader_file):
    """Test the YAML rendering of a function context."""
    result = runner.invoke(app, ["context", shader_file, "3", "--format", "yaml"])
    assert result.exit_code == 0
    data = yaml.safe_load(result.stdout)
    assert data["function_name"] == "circle"
    assert data["is_function"] is True
    assert [p["mode"] for p in data["parameters"]] == ["uv", "custom"]
    assert data["loops"][0]["loop_index"] == 0


def test_context_with_caps_and_params(shader_file):
    """Test that loop caps and custom values show up in the context."""
    result = runner.invoke(
        app, ["context", shader_file, "3", "--cap", "0=16", "--param", "1=0.3"]
    )
    assert result.exit_code == 0
    assert "1: float r [custom] value=0.3" in result.output
    assert "0: lines 2-4 for (int i = 0; i < 4; i++) cap=16" in result.output

    result = runner.invoke(
        app, ["context", shader_file, "3", "--param", "0=vec2(0.2)", "-f", "yaml"]
    )
    data = yaml.safe_load(result.stdout)
    assert data["parameters"][0]["value"] == "vec2(0.2)"
    assert data["loops"][0]["max_iter"] is None


def test_context_outside_function(shader_file):
    """Test a line at global scope."""
    result = runner.invoke(app, ["context", shader_file, "7"])
    assert result.exit_code == 2


def test_context_unknown_format(shader_file):
    """Test an unsupported output format."""
    result = runner.invoke(app, ["context", shader_file, "3", "-f", "json"])
    assert result.exit_code == 1


def test_cap_loops(shader_file, tmp_path):
    """Test inserting loop guards into a file."""
    output = tmp_path / "capped.glsl"
    result = runner.invoke(
        app, ["cap-loops", shader_file, "--cap", "0=5", "-o", str(output)]
    )
    assert result.exit_code == 0
    code = output.read_text()
    assert "  int _dbgIter0 = 0;" in code
    assert "    if (++_dbgIter0 > 5) break;" in code


def test_close_braces(tmp_path):
    """Test closing a truncated shader."""
    source = tmp_path / "truncated.glsl"
    source.write_text(
        "void mainImage(out vec4 fragColor, in vec2 fragCoord) {\n  if (true) {"
    )
    output = tmp_path / "closed.glsl"
    result = runner.invoke(app, ["close-braces", str(source), "-o", str(output)])
    assert result.exit_code == 0
    assert output.read_text().endswith("  if (true) {\n}\n}\n")


def test_close_braces_negative_start(shader_file):
    """Test that a negative start line is rejected."""
    result = runner.invoke(app, ["close-braces", shader_file, "--start=-1"])
    assert result.exit_code == 1


def test_post_process(shader_file):
    """Test remapping the output of an unmodified shader."""
    result = runner.invoke(app, ["post-process", shader_file, "--step", "0.5"])
    assert result.exit_code == 0
    assert "fragColor = vec4(step(vec3(0.5000), fragColor.rgb), 1.0);" in result.output


def test_post_process_nothing_to_do(shader_file):
    """Test post-processing without a mode or threshold."""
    result = runner.invoke(app, ["post-process", shader_file])
    assert result.exit_code == 2


def test_verbose_logging(shader_file):
    """Test that verbose mode logs analysis decisions."""
    result = runner.invoke(app, ["--verbose", "debug", shader_file, "9"])
    assert result.exit_code == 0


class TestShaderChangeHandler:
    """Test regeneration in watch mode."""

    def test_regenerate_writes_output(self, shader_file, tmp_path):
        output = tmp_path / "debug.glsl"
        handler = ShaderChangeHandler(shader_file, 9, DebugOptions(), output)
        handler.regenerate()
        code = output.read_text()
        assert code.startswith("// Generated by shaderdbg")
        assert "fragColor = vec4(uv, 0.0, 1.0);" in code

    def test_modified_event_regenerates(self, shader_file, tmp_path):
        output = tmp_path / "debug.glsl"
        handler = ShaderChangeHandler(shader_file, 9, DebugOptions(), output)
        Path(shader_file).write_text(SHADER.replace("iResolution.xy", "iResolution.yy"))
        handler.on_modified(FileModifiedEvent(os.path.abspath(shader_file)))
        assert "fragCoord / iResolution.yy;" in output.read_text()

    def test_other_file_ignored(self, shader_file, tmp_path):
        output = tmp_path / "debug.glsl"
        handler = ShaderChangeHandler(shader_file, 9, DebugOptions(), output)
        handler.on_modified(FileModifiedEvent(str(tmp_path / "other.glsl")))
        assert not output.exists()

    def test_undebuggable_line_keeps_previous_output(self, shader_file, tmp_path):
        output = tmp_path / "debug.glsl"
        ShaderChangeHandler(shader_file, 9, DebugOptions(), output).regenerate()
        previous = output.read_text()
        ShaderChangeHandler(shader_file, 10, DebugOptions(), output).regenerate()
        assert output.read_text() == previous
