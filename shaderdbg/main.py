"""Command line interface for shaderdbg.

This module provides a command-line interface for rewriting GLSL shaders so
that a chosen line's value is shown as the output color, and for the related
snippet repairs (loop caps, brace closing, output remapping).
"""

import os
import sys
import time
from collections.abc import Callable
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional, TypeVar, cast

import arrow
import typer
import watchdog.events
import watchdog.observers
import yaml
from loguru import logger
from watchdog.events import FileSystemEventHandler

from shaderdbg.debugger import (
    DebugOptions,
    FunctionContext,
    ShaderDebugError,
    apply_output_post_processing,
    cap_loop_iterations,
    close_open_braces,
    extract_function_context,
    transform,
)
from shaderdbg.debugger.lexer import split_lines
from shaderdbg.debugger.visualize import normalize_mode

# Environment variable holding the default log level
LOG_LEVEL_ENV = "SHADERDBG_LOG_LEVEL"

# Exit code when the line has nothing to show
EXIT_NOTHING_TO_DEBUG = 2

# Define type variables for TypedCallable
F = TypeVar("F", bound=Callable[..., Any])


# TypedCommand decorator helper
def typed_command(app_command: Any) -> Callable[[F], F]:
    """Wrap typer command with proper typing for mypy."""

    def decorator(func: F) -> F:
        return cast(F, app_command(func))

    return decorator


app = typer.Typer(
    name="shaderdbg",
    help=(
        "Debug GLSL shaders line by line by rewriting them to show a value. "
        "Commands: debug, context, cap-loops, close-braces, post-process, watch."
    ),
    add_completion=False,
)


@app.callback()
def configure(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log analysis decisions"
    ),
) -> None:
    """Configure logging for every command."""
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logger.remove()
    logger.add(sys.stderr, level=level)


def _read_source(shader_file: str) -> str:
    """Read a shader file, exiting with an error if it cannot be read."""
    try:
        return Path(shader_file).read_text()
    except OSError as e:
        logger.error(f"Failed to read shader file: {e}")
        raise typer.Exit(1) from e


def _parse_assignments(values: list[str], option: str) -> dict[int, str]:
    """Parse repeated `N=VALUE` options.

    Args:
        values: Raw option values
        option: Option name, for error messages

    Returns:
        Dictionary mapping each index to its value

    Raises:
        ShaderDebugError: If a value is not of the form `N=VALUE`
    """
    parsed: dict[int, str] = {}
    for value in values:
        index, sep, rest = value.partition("=")
        if not sep or not index.strip().isdigit() or not rest.strip():
            raise ShaderDebugError(f"Expected {option} N=VALUE, got '{value}'")
        parsed[int(index)] = rest.strip()
    return parsed


def _parse_caps(values: list[str]) -> dict[int, int]:
    caps: dict[int, int] = {}
    for index, value in _parse_assignments(values, "--cap").items():
        try:
            caps[index] = int(value)
        except ValueError as e:
            raise ShaderDebugError(
                f"Iteration ceiling for loop {index} must be an integer, got '{value}'"
            ) from e
    return caps


def _build_options(
    cap: list[str], param: list[str], normalize: str, step: Optional[float]
) -> DebugOptions:
    return DebugOptions(
        loop_caps=_parse_caps(cap),
        custom_parameters=_parse_assignments(param, "--param"),
        normalize=normalize_mode(normalize),
        step_edge=step,
    )


def _add_header(code: str, source_file: str, line: int) -> str:
    """Prefix generated code with a comment header.

    Args:
        code: Generated shader code
        source_file: Path of the debugged shader
        line: Debugged line

    Returns:
        Code with header comments
    """
    timestamp = arrow.utcnow().format("YYYY-MM-DD HH:mm:ss UTC")
    header = f"// Generated by shaderdbg v{__import__('shaderdbg').__version__}\n"
    header += f"// Generation time: {timestamp}\n"
    header += f"// Source file: {os.path.basename(source_file)}\n"
    header += f"// Debugged line: {line}\n"
    header += "\n"
    return header + code


def _emit(code: str, output: Optional[Path]) -> None:
    """Write code to a file, or to stdout when no file is given."""
    if output is None:
        typer.echo(code)
        return
    output.write_text(code + "\n")
    logger.info(f"Shader written to {output}")


def _debug_source(
    shader_file: str, line: int, options: DebugOptions, header: bool
) -> str | None:
    source = _read_source(shader_file)
    code = transform(source, line, options=options)
    if code is None:
        return None
    return _add_header(code, shader_file, line) if header else code


CAP_OPTION = typer.Option(
    None, "--cap", help="Iteration ceiling for a loop, as INDEX=MAX (repeatable)"
)
PARAM_OPTION = typer.Option(
    None, "--param", help="Argument for a helper parameter, as INDEX=EXPR (repeatable)"
)
NORMALIZE_OPTION = typer.Option(
    "off", "--normalize", "-n", help="Value remapping (off, soft, abs)"
)
STEP_OPTION = typer.Option(None, "--step", help="Binary threshold for the output")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", help="Output file path")


@typed_command(app.command("debug"))
def debug_shader(
    shader_file: str = typer.Argument(..., help="GLSL shader file"),
    line: int = typer.Argument(..., help="0-based line to debug"),
    cap: Optional[list[str]] = CAP_OPTION,
    param: Optional[list[str]] = PARAM_OPTION,
    normalize: str = NORMALIZE_OPTION,
    step: Optional[float] = STEP_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    header: bool = typer.Option(
        False, "--header", help="Add a generation header comment"
    ),
) -> None:
    """Rewrite a shader to show the value computed at a line.

    Example: shaderdbg debug shader.glsl 12 --cap 0=64
    """
    try:
        options = _build_options(cap or [], param or [], normalize, step)
        code = _debug_source(shader_file, line, options, header)
    except ShaderDebugError as e:
        logger.error(f"Invalid debug request: {e}")
        raise typer.Exit(1) from e

    if code is None:
        logger.error(f"Cannot debug this line: {line}")
        raise typer.Exit(EXIT_NOTHING_TO_DEBUG)

    logger.info(f"Debugging line {line} of {shader_file}")
    _emit(code, output)


def _context_text(context: FunctionContext) -> str:
    """Human-readable rendering of a function context."""
    kind = "helper" if context.is_function else "entry point"
    lines = [f"function: {context.return_type} {context.function_name} ({kind})"]
    if context.parameters:
        lines.append("parameters:")
        for index, param in enumerate(context.parameters):
            lines.append(
                f"  {index}: {param.type} {param.name} "
                f"[{param.mode.value}] value={param.value} "
                f"uv={param.uv_value} custom={param.custom_value}"
            )
    if context.loops:
        lines.append("loops:")
        for loop in context.loops:
            cap = "" if loop.max_iter is None else f" cap={loop.max_iter}"
            lines.append(
                f"  {loop.loop_index}: lines {loop.line}-{loop.end_line} "
                f"{loop.header}{cap}"
            )
    return "\n".join(lines)


def _context_yaml(context: FunctionContext) -> str:
    data = asdict(context)
    for param, info in zip(data["parameters"], context.parameters):
        param["mode"] = param["mode"].value
        param["value"] = info.value
    return yaml.safe_dump(data, sort_keys=False)


@typed_command(app.command("context"))
def show_context(
    shader_file: str = typer.Argument(..., help="GLSL shader file"),
    line: int = typer.Argument(..., help="0-based line"),
    cap: Optional[list[str]] = CAP_OPTION,
    param: Optional[list[str]] = PARAM_OPTION,
    format: str = typer.Option(
        "text", "--format", "-f", help="Output format (text, yaml)"
    ),
) -> None:
    """Describe the function around a line: parameters and enclosing loops.

    Example: shaderdbg context shader.glsl 12 --cap 0=64 --param 1=0.3
    """
    if format not in ("text", "yaml"):
        logger.error(f"Unknown format: {format}")
        raise typer.Exit(1)

    source = _read_source(shader_file)
    try:
        context = extract_function_context(
            source,
            line,
            loop_caps=_parse_caps(cap or []),
            custom_parameters=_parse_assignments(param or [], "--param"),
        )
    except ShaderDebugError as e:
        logger.error(f"Invalid context request: {e}")
        raise typer.Exit(1) from e

    if context is None:
        logger.error(f"Line {line} is not inside a function")
        raise typer.Exit(EXIT_NOTHING_TO_DEBUG)

    typer.echo(_context_yaml(context) if format == "yaml" else _context_text(context))


@typed_command(app.command("cap-loops"))
def cap_loops(
    shader_file: str = typer.Argument(..., help="GLSL shader file"),
    cap: Optional[list[str]] = CAP_OPTION,
    start: int = typer.Option(0, "--start", help="Count loops after this line"),
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Insert iteration guards into selected loops."""
    lines = split_lines(_read_source(shader_file))
    try:
        capped = cap_loop_iterations(lines, start, _parse_caps(cap or []))
    except ShaderDebugError as e:
        logger.error(f"Invalid loop caps: {e}")
        raise typer.Exit(1) from e

    logger.info(f"Inserted {len(capped) - len(lines)} guard line(s)")
    _emit("\n".join(capped), output)


@typed_command(app.command("close-braces"))
def close_braces(
    shader_file: str = typer.Argument(..., help="GLSL shader file"),
    start: int = typer.Option(0, "--start", help="Count braces from this line"),
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Append the closing braces a truncated shader is missing."""
    lines = split_lines(_read_source(shader_file))
    try:
        closed = close_open_braces(lines, start)
    except ShaderDebugError as e:
        logger.error(f"Invalid start line: {e}")
        raise typer.Exit(1) from e

    logger.info(f"Appended {len(closed) - len(lines)} closing brace(s)")
    _emit("\n".join(closed), output)


@typed_command(app.command("post-process"))
def post_process(
    shader_file: str = typer.Argument(..., help="GLSL shader file"),
    normalize: str = NORMALIZE_OPTION,
    step: Optional[float] = STEP_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Remap the output color of an unmodified shader."""
    source = _read_source(shader_file)
    try:
        code = apply_output_post_processing(source, normalize, step)
    except ShaderDebugError as e:
        logger.error(f"Invalid post-processing request: {e}")
        raise typer.Exit(1) from e

    if code is None:
        logger.error("Nothing to post-process")
        raise typer.Exit(EXIT_NOTHING_TO_DEBUG)
    _emit(code, output)


class ShaderChangeHandler(FileSystemEventHandler):  # type: ignore
    """Event handler for shader file changes."""

    def __init__(
        self,
        shader_file: str,
        line: int,
        options: DebugOptions,
        output: Optional[Path],
    ):
        """Initialize shader change handler.

        Args:
            shader_file: Path to shader file
            line: Debugged line
            options: Debug options applied on every rewrite
            output: Output file path, stdout when None
        """
        self.shader_file = shader_file
        self.line = line
        self.options = options
        self.output = output

    def on_modified(self, event: watchdog.events.FileSystemEvent) -> None:
        """Handle file modified event.

        Args:
            event: File system event
        """
        if event.src_path == os.path.abspath(self.shader_file):
            logger.info(f"Detected changes in {self.shader_file}")
            self.regenerate()

    def regenerate(self) -> None:
        """Rewrite the shader, logging instead of exiting on failure."""
        try:
            code = transform(
                Path(self.shader_file).read_text(), self.line, options=self.options
            )
        except (OSError, ShaderDebugError) as e:
            logger.error(f"Error debugging shader: {e}")
            return

        if code is None:
            logger.warning(f"Cannot debug this line: {self.line}")
            return
        _emit(_add_header(code, self.shader_file, self.line), self.output)


@typed_command(app.command("watch"))
def watch_shader(
    shader_file: str = typer.Argument(..., help="GLSL shader file"),
    line: int = typer.Argument(..., help="0-based line to debug"),
    cap: Optional[list[str]] = CAP_OPTION,
    param: Optional[list[str]] = PARAM_OPTION,
    normalize: str = NORMALIZE_OPTION,
    step: Optional[float] = STEP_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
) -> None:
    """Watch a shader file and regenerate the debug shader on changes.

    Example: shaderdbg watch shader.glsl 12 -o debug.glsl
    """
    try:
        options = _build_options(cap or [], param or [], normalize, step)
    except ShaderDebugError as e:
        logger.error(f"Invalid debug request: {e}")
        raise typer.Exit(1) from e

    abs_shader_file = os.path.abspath(shader_file)
    handler = ShaderChangeHandler(abs_shader_file, line, options, output)
    handler.regenerate()

    # Watch the file's directory, not the file itself
    observer = watchdog.observers.Observer()
    observer.schedule(handler, path=os.path.dirname(abs_shader_file), recursive=False)
    observer.start()
    logger.info(f"Watching {shader_file} (press Ctrl+C to stop)...")

    try:
        while observer.is_alive():
            time.sleep(0.5)
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, stopping...")
    finally:
        observer.stop()
        observer.join()


if __name__ == "__main__":
    app()
