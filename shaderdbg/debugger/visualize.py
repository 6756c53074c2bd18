"""
Visualization of debugged values.

Every rewritten shader ends by writing the debugged value into the output
color. This module builds that assignment per type, with optional remapping
of out-of-range values and an optional binary threshold, and applies the
same remapping to the output of an unmodified shader.
"""

from loguru import logger

from shaderdbg.debugger.constants import (
    ABS_NORMALIZATIONS,
    ABS_POST_PROCESS,
    OUTPUT_VARIABLE,
    SOFT_NORMALIZATIONS,
    SOFT_POST_PROCESS,
    STEP_POST_PROCESS,
    UNKNOWN_VISUALIZATION,
    VISUALIZATIONS,
)
from shaderdbg.debugger.errors import ShaderDebugError
from shaderdbg.debugger.lexer import scan_lines, split_lines
from shaderdbg.debugger.models import NormalizeMode
from shaderdbg.debugger.scope import find_entry_function


def normalize_mode(value: NormalizeMode | str) -> NormalizeMode:
    """Convert a mode name to a NormalizeMode.

    Raises:
        ShaderDebugError: If the name is not a known mode
    """
    try:
        return NormalizeMode(value)
    except ValueError as e:
        choices = ", ".join(mode.value for mode in NormalizeMode)
        raise ShaderDebugError(
            f"Unknown normalize mode '{value}', expected one of: {choices}"
        ) from e


def _step_line(step_edge: float) -> str:
    return STEP_POST_PROCESS.format(edge=f"{step_edge:.4f}")


def visualize(
    var_type: str,
    var_name: str,
    normalize: NormalizeMode | str = NormalizeMode.OFF,
    step_edge: float | None = None,
) -> str:
    """Build the statement(s) that write a value into the output color.

    Normalization only exists for float and vector types; matrices are always
    shown as-is. An unknown type writes a magenta sentinel.

    Args:
        var_type: GLSL type of the value
        var_name: Expression to visualize
        normalize: Remapping applied to the value
        step_edge: Threshold applied to the resulting color, if any

    Returns:
        One line, or two lines joined with a newline when a step is applied
    """
    mode = normalize_mode(normalize)
    table = VISUALIZATIONS
    if mode == NormalizeMode.SOFT and var_type in SOFT_NORMALIZATIONS:
        table = SOFT_NORMALIZATIONS
    elif mode == NormalizeMode.ABS and var_type in ABS_NORMALIZATIONS:
        table = ABS_NORMALIZATIONS

    if var_type in table:
        template, comment = table[var_type]
        expression = template.format(v=var_name)
    else:
        expression, comment = UNKNOWN_VISUALIZATION

    line = f"  {OUTPUT_VARIABLE} = {expression}; // Debug: {comment}"
    if step_edge is not None:
        line += f"\n{_step_line(step_edge)} // Debug: step threshold"
    return line


def apply_output_post_processing(
    source: str,
    normalize: NormalizeMode | str,
    step_edge: float | None,
) -> str | None:
    """Remap the final color of an unmodified shader.

    The remapping lines are inserted right before the closing brace of the
    entry function.

    Args:
        source: Shader source
        normalize: Remapping applied to the output color
        step_edge: Threshold applied after remapping, if any

    Returns:
        The modified source, or None when there is nothing to apply or the
        source has no complete entry function
    """
    mode = normalize_mode(normalize)
    if mode == NormalizeMode.OFF and step_edge is None:
        return None

    lines = split_lines(source)
    entry = find_entry_function(scan_lines(lines))
    if not entry.found or entry.end < 0:
        logger.debug("No complete entry function to post-process")
        return None

    post_lines: list[str] = []
    if mode == NormalizeMode.SOFT:
        post_lines.append(SOFT_POST_PROCESS)
    elif mode == NormalizeMode.ABS:
        post_lines.append(ABS_POST_PROCESS)
    if step_edge is not None:
        post_lines.append(_step_line(step_edge))

    logger.debug(f"Inserting {len(post_lines)} post-processing line(s)")
    return "\n".join([*lines[: entry.end], *post_lines, *lines[entry.end :]])
