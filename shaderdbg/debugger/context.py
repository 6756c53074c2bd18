"""
Description of the function around a debugged line.

Hosts use this to offer argument choices for a helper's parameters and
iteration ceilings for the loops that contain the line.
"""

from loguru import logger

from shaderdbg.debugger.constants import (
    CENTERED_UV,
    DEFAULT_CUSTOM_VALUES,
    ENTRY_FUNCTION,
    FALLBACK_ARGUMENT,
    UV_ARGUMENTS,
)
from shaderdbg.debugger.errors import ShaderDebugError
from shaderdbg.debugger.lexer import scan_lines, split_lines
from shaderdbg.debugger.loop_guard import find_loops
from shaderdbg.debugger.models import (
    FunctionContext,
    Parameter,
    ParameterInfo,
    ParameterMode,
)
from shaderdbg.debugger.scope import (
    find_enclosing_function,
    function_parameters,
    return_type,
)


def parameter_info(param: Parameter) -> ParameterInfo:
    """Argument choices for one parameter.

    vec2 parameters default to the pixel coordinate, every other type to a
    constant custom value.
    """
    custom = DEFAULT_CUSTOM_VALUES.get(param.type, FALLBACK_ARGUMENT)
    template = UV_ARGUMENTS.get(param.type)
    return ParameterInfo(
        name=param.name,
        type=param.type,
        uv_value=template.format(uv="uv") if template else custom,
        centered_uv_value=template.format(uv=CENTERED_UV) if template else custom,
        default_custom_value=custom,
        mode=ParameterMode.UV if param.type == "vec2" else ParameterMode.CUSTOM,
        custom_value=custom,
    )


def extract_function_context(
    source: str,
    line: int,
    loop_caps: dict[int, int] | None = None,
    custom_parameters: dict[int, str] | None = None,
) -> FunctionContext | None:
    """Describe the function enclosing a line.

    Args:
        source: Shader source
        line: 0-based target line
        loop_caps: Loop index to iteration ceiling, reported per loop
        custom_parameters: Parameter index to argument expression; a
            parameter given here switches to the custom mode

    Returns:
        The function context, or None when the line is outside any function

    Raises:
        ShaderDebugError: If the line is outside the source
    """
    lines = scan_lines(split_lines(source))
    if not 0 <= line < len(lines):
        raise ShaderDebugError("Target line out of range", line=line)

    scope = find_enclosing_function(lines, line)
    if not scope.found or scope.name is None:
        return None

    # Custom values are indexed by position in the full signature
    custom = custom_parameters or {}
    parameters: list[ParameterInfo] = []
    for index, param in enumerate(function_parameters(lines, scope)):
        if param.qualifier == "out":
            continue
        info = parameter_info(param)
        if index in custom:
            info.mode = ParameterMode.CUSTOM
            info.custom_value = custom[index]
        parameters.append(info)

    loops = [
        loop
        for loop in find_loops(lines, scope)
        if loop.line < line and (loop.end_line < 0 or line < loop.end_line)
    ]
    for loop in loops:
        loop.max_iter = (loop_caps or {}).get(loop.loop_index)
    logger.debug(
        f"Context for line {line}: '{scope.name}' with {len(parameters)} "
        f"parameter(s) inside {len(loops)} loop(s)"
    )
    return FunctionContext(
        function_name=scope.name,
        return_type=return_type(lines, scope) or "void",
        parameters=parameters,
        is_function=scope.name != ENTRY_FUNCTION,
        loops=loops,
    )
