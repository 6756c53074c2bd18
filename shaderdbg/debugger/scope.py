"""
Scope resolution for shader source.

This module finds the function enclosing a line by walking backward over
brace depth, locates the entry function, and reads return types and
parameter lists from function headers.
"""

import re

from loguru import logger

from shaderdbg.debugger.constants import (
    ENTRY_FUNCTION,
    FUNCTION_HEADER,
    PARAMETER,
    PARAMETER_LIST,
    RETURN_TYPE_HEADER,
    STATEMENT_SCAN_LIMIT,
)
from shaderdbg.debugger.models import FunctionScope, Parameter, SourceLine

_ENTRY_HEADER = re.compile(rf"\bvoid\s+{ENTRY_FUNCTION}\s*\(")


def find_block_end(lines: list[SourceLine], start: int) -> int:
    """Find the line holding the brace that closes the block opened from `start`.

    Args:
        lines: Lexed source lines
        start: Function header line

    Returns:
        Line index of the closing brace, or -1 if the block never closes
    """
    depth = 0
    opened = False
    for i in range(start, len(lines)):
        for char in lines[i].code:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
                if opened and depth == 0:
                    return i
    return -1


def find_enclosing_function(lines: list[SourceLine], target: int) -> FunctionScope:
    """Find the function that contains the target line.

    Walking backward, a `}` increases the depth and a `{` decreases it, so
    the depth goes negative once an unmatched opening brace is crossed. A
    header is accepted when the depth is already negative, or when it is
    zero and the header opens its body on the same or the next line. A
    positive depth only means a closed block above the target is being
    crossed. A header at depth zero whose function closes above the target
    means the target is at global scope.

    Args:
        lines: Lexed source lines
        target: Target line index

    Returns:
        The enclosing FunctionScope, or an empty one at global scope
    """
    depth = 0
    for i in range(target, -1, -1):
        line = lines[i]
        depth += line.closes - line.opens

        match = FUNCTION_HEADER.search(line.code)
        if match:
            next_opens = i + 1 < len(lines) and lines[i + 1].stripped == "{"
            if depth < 0 or (depth == 0 and ("{" in line.code or next_opens)):
                end = find_block_end(lines, i)
                if 0 <= end < target:
                    # A function closed entirely above the target
                    break
                if end == -1:
                    logger.warning(
                        f"Function '{match.group(1)}' at line {i} never closes"
                    )
                return FunctionScope(name=match.group(1), start=i, end=end)

    return FunctionScope()


def find_entry_function(lines: list[SourceLine]) -> FunctionScope:
    """Locate the entry function.

    Args:
        lines: Lexed source lines

    Returns:
        FunctionScope of the entry function, or an empty one if absent
    """
    for i, line in enumerate(lines):
        if _ENTRY_HEADER.search(line.code):
            return FunctionScope(
                name=ENTRY_FUNCTION, start=i, end=find_block_end(lines, i)
            )
    return FunctionScope()


def header_text(lines: list[SourceLine], start: int) -> str:
    """Join a function header that may spread its parameters over lines."""
    parts: list[str] = []
    for i in range(start, min(start + STATEMENT_SCAN_LIMIT, len(lines))):
        parts.append(lines[i].code.strip())
        if ")" in lines[i].code:
            break
    return " ".join(parts)


def return_type(lines: list[SourceLine], scope: FunctionScope) -> str | None:
    """Read the declared return type of a function.

    Args:
        lines: Lexed source lines
        scope: The function scope

    Returns:
        Return type, or None if the header does not start with a known type
    """
    if not scope.found:
        return None
    match = RETURN_TYPE_HEADER.match(lines[scope.start].code)
    return match.group(1) if match else None


def parse_parameters(header: str) -> list[Parameter]:
    """Parse the parameter list of a function header.

    Parameters whose type is not recognized are skipped.

    Args:
        header: Function header text

    Returns:
        Parsed parameters in declaration order
    """
    match = PARAMETER_LIST.search(header)
    if not match or not match.group(1).strip():
        return []

    params: list[Parameter] = []
    for pair in match.group(1).split(","):
        param = PARAMETER.search(pair.strip())
        if param:
            params.append(
                Parameter(
                    name=param.group(3),
                    type=param.group(2),
                    qualifier=param.group(1),
                )
            )
    return params


def function_parameters(
    lines: list[SourceLine], scope: FunctionScope
) -> list[Parameter]:
    """Parameters of the function described by `scope`."""
    if not scope.found:
        return []
    return parse_parameters(header_text(lines, scope.start))
