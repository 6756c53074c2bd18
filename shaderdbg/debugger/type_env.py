"""
Type environment construction.

The environment is a flat name-to-type map. Parameters of the enclosing
function are bound first, then every declaration from the top of the source
down to a bound line overwrites earlier bindings of the same name. This is
an approximation of block scoping: the last declaration seen in document
order wins.
"""

import re

from loguru import logger

from shaderdbg.debugger.constants import SUPPORTED_TYPES
from shaderdbg.debugger.models import FunctionScope, SourceLine
from shaderdbg.debugger.scope import function_parameters

_DECLARATIONS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b({type_name})\s+(\w+)\s*[=;]"), type_name)
    for type_name in SUPPORTED_TYPES
]


def build_type_environment(
    lines: list[SourceLine], bound: int, scope: FunctionScope
) -> dict[str, str]:
    """Build the name-to-type map visible at a line.

    Args:
        lines: Lexed source lines
        bound: Last line scanned for declarations (inclusive)
        scope: Function whose parameters seed the map

    Returns:
        Dictionary mapping variable names to GLSL types
    """
    env: dict[str, str] = {
        param.name: param.type for param in function_parameters(lines, scope)
    }

    for i in range(0, min(bound, len(lines) - 1) + 1):
        code = lines[i].code
        for pattern, type_name in _DECLARATIONS:
            match = pattern.search(code)
            if match:
                env[match.group(2)] = type_name

    logger.debug(f"Type environment at line {bound}: {env}")
    return env
