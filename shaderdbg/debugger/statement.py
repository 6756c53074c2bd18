"""
Joining of statements that span several source lines.

A line is incomplete when its comment-free text is non-empty and does not end
in `;`, `{` or `}`. When the target line or the line above it is incomplete
the statement is widened in both directions, at most STATEMENT_SCAN_LIMIT
lines each way, and joined with single spaces.
"""

from loguru import logger

from shaderdbg.debugger.constants import STATEMENT_SCAN_LIMIT
from shaderdbg.debugger.models import LogicalStatement, SourceLine


def is_incomplete(line: SourceLine) -> bool:
    """Whether a line continues on the next one."""
    text = line.stripped
    # Preprocessor directives end at the line break
    if text.startswith("#"):
        return False
    return bool(text) and not text.endswith((";", "{", "}"))


def join_statement(lines: list[SourceLine], target: int) -> LogicalStatement:
    """Join the statement that covers the target line.

    If no terminating `;` is found within the scan limit, the target line
    alone is the statement.

    Args:
        lines: Lexed source lines
        target: Target line index

    Returns:
        The joined statement with its line range
    """
    current = lines[target]
    previous_incomplete = target > 0 and is_incomplete(lines[target - 1])
    if not is_incomplete(current) and not previous_incomplete:
        return LogicalStatement(text=current.code, start=target, end=target)

    start = target
    for i in range(target - 1, max(target - STATEMENT_SCAN_LIMIT, 0) - 1, -1):
        if not is_incomplete(lines[i]):
            start = i + 1
            break
        if i == 0:
            start = 0

    end = -1
    for i in range(target, min(target + STATEMENT_SCAN_LIMIT, len(lines))):
        if lines[i].stripped.endswith(";"):
            end = i
            break
    if end < 0:
        logger.debug(f"No statement terminator near line {target}, using it alone")
        return LogicalStatement(text=current.code, start=target, end=target)

    text = " ".join(line.code.strip() for line in lines[start : end + 1])
    logger.debug(f"Joined lines {start}-{end} into statement: {text}")
    return LogicalStatement(text=text, start=start, end=end)
