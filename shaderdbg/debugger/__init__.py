"""
Line-level debugging of GLSL shaders.

This module provides the top-level interface for rewriting a shader so that
it stops at a chosen line and writes the value computed there to the output
color.
"""

from loguru import logger

from shaderdbg.debugger.braces import close_open_braces
from shaderdbg.debugger.code_generator import (
    FullFunctionPlan,
    GenerationPlan,
    OneLinerPlan,
    TruncatePlan,
    WrapPlan,
    generate,
)
from shaderdbg.debugger.constants import ENTRY_FUNCTION, SUPPORTED_TYPES
from shaderdbg.debugger.context import extract_function_context
from shaderdbg.debugger.detector import detect_target
from shaderdbg.debugger.errors import ShaderDebugError
from shaderdbg.debugger.lexer import scan_lines, split_lines
from shaderdbg.debugger.loop_guard import cap_loop_iterations
from shaderdbg.debugger.models import (
    DebugOptions,
    DebugTarget,
    FunctionContext,
    FunctionScope,
    LogicalStatement,
    NormalizeMode,
    SourceLine,
)
from shaderdbg.debugger.scope import find_enclosing_function, return_type
from shaderdbg.debugger.statement import join_statement
from shaderdbg.debugger.type_env import build_type_environment
from shaderdbg.debugger.visualize import apply_output_post_processing, visualize


def _plan(
    lines: list[SourceLine],
    scope: FunctionScope,
    statement: LogicalStatement,
    target: DebugTarget | None,
    function_type: str | None,
    line_content: str | None,
) -> GenerationPlan | None:
    """Choose how to rewrite the program from where the line sits."""
    if not scope.found:
        if target is None:
            return None
        content = line_content if line_content is not None else statement.text
        return OneLinerPlan(content=content, target=target)

    if scope.name == ENTRY_FUNCTION:
        if target is None:
            return None
        return TruncatePlan(
            lines=lines, scope=scope, statement=statement, target=target
        )

    if target is not None:
        return WrapPlan(lines=lines, scope=scope, statement=statement, target=target)
    if function_type is not None and function_type in SUPPORTED_TYPES:
        return FullFunctionPlan(lines=lines, scope=scope, return_type=function_type)
    return None


def transform(
    source: str,
    line: int,
    line_content: str | None = None,
    options: DebugOptions | None = None,
) -> str | None:
    """Rewrite a shader to show the value computed at a line.

    Args:
        source: Shader source
        line: 0-based line to debug
        line_content: Text of the line as seen by the caller, used when the
            line is outside any function
        options: Loop caps, parameter overrides and visualization settings

    Returns:
        The rewritten shader, or None when the line has no value to show

    Raises:
        ShaderDebugError: If the line is outside the source or an option is
            invalid
    """
    lines = scan_lines(split_lines(source))
    if not 0 <= line < len(lines):
        raise ShaderDebugError("Target line out of range", line=line)
    options = options or DebugOptions()

    scope = find_enclosing_function(lines, line)
    logger.debug(f"Line {line} is in function: {scope.name or 'none'}")
    function_type = return_type(lines, scope)

    env = build_type_environment(lines, line, scope)
    statement = join_statement(lines, line)
    target = detect_target(statement.text, env, function_type)
    if target is not None:
        logger.debug(f"Debug target: {target.name} ({target.type})")

    plan = _plan(lines, scope, statement, target, function_type, line_content)
    if plan is None:
        logger.debug(f"Nothing to debug at line {line}")
        return None
    return generate(plan, options)


__all__ = [
    "DebugOptions",
    "FunctionContext",
    "NormalizeMode",
    "ShaderDebugError",
    "apply_output_post_processing",
    "cap_loop_iterations",
    "close_open_braces",
    "extract_function_context",
    "transform",
    "visualize",
]
