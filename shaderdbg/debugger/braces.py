"""Closing of blocks left open by truncation."""

from loguru import logger

from shaderdbg.debugger.errors import ShaderDebugError
from shaderdbg.debugger.lexer import count_braces, scan_lines


def close_open_braces(lines: list[str], start: int) -> list[str]:
    """Append one `}` line for every block left open from `start` onward.

    Braces inside comments and string literals are not counted. Running the
    function on its own output adds nothing.

    Args:
        lines: Source lines
        start: First line included in the count

    Returns:
        A copy of `lines` with the missing closing braces appended

    Raises:
        ShaderDebugError: If `start` is negative
    """
    if start < 0:
        raise ShaderDebugError("Start line must not be negative", line=start)

    missing = count_braces(scan_lines(lines), start)
    if missing > 0:
        logger.debug(f"Closing {missing} open block(s) from line {start}")
    return [*lines, *["}"] * max(missing, 0)]
