"""
Iteration ceilings for loops in rewritten shaders.

Loops are numbered in document order after a start line, one flat sequence
for `for` and `while` alike. A capped loop gets a counter declared right
before its header and a break as the first statement of its body:

    int _dbgIter1 = 0;
    for (int i = 0; i < n; i++) {
      if (++_dbgIter1 > 64) break;
      ...

Because the counter sits at the header's own indentation, an inner loop's
counter is declared inside the outer body and restarts on every outer
iteration.
"""

import re

from loguru import logger

from shaderdbg.debugger.constants import LOOP_COUNTER_PREFIX, LOOP_HEADER
from shaderdbg.debugger.errors import ShaderDebugError
from shaderdbg.debugger.lexer import scan_lines
from shaderdbg.debugger.models import FunctionScope, LoopInfo, SourceLine
from shaderdbg.debugger.scope import find_block_end

_INDENT = re.compile(r"^\s*")


def is_loop_header(line: SourceLine) -> bool:
    """Whether a line starts a loop with a block body.

    Brace-less headers ending in `;` are the tail of a do-while or a loop
    with an inline statement body, and are not counted.
    """
    if not LOOP_HEADER.match(line.code):
        return False
    return "{" in line.code or not line.stripped.endswith(";")


def _validate(start: int, ceilings: dict[int, int]) -> None:
    if start < 0:
        raise ShaderDebugError("Start line must not be negative", line=start)
    for index, ceiling in ceilings.items():
        if ceiling <= 0:
            raise ShaderDebugError(
                f"Iteration ceiling for loop {index} must be positive, got {ceiling}"
            )


def cap_loop_iterations(
    lines: list[str], start: int, ceilings: dict[int, int]
) -> list[str]:
    """Insert iteration guards into selected loops.

    Loops absent from `ceilings` are copied unchanged.

    Args:
        lines: Source lines
        start: Loops on lines strictly after this one are numbered
        ceilings: Loop index to maximum number of iterations

    Returns:
        A new list of lines with guards inserted

    Raises:
        ShaderDebugError: If `start` is negative or a ceiling is not positive
    """
    _validate(start, ceilings)
    if not ceilings:
        return list(lines)

    scanned = scan_lines(lines)
    result: list[str] = []
    loop_index = 0
    i = 0
    while i < len(lines):
        text = lines[i]
        if i <= start or not is_loop_header(scanned[i]):
            result.append(text)
            i += 1
            continue

        index = loop_index
        loop_index += 1
        ceiling = ceilings.get(index)
        if ceiling is None:
            result.append(text)
            i += 1
            continue

        next_opens = i + 1 < len(lines) and scanned[i + 1].stripped == "{"
        if "{" not in scanned[i].code and not next_opens:
            logger.warning(f"Loop {index} at line {i} has no block body, not capped")
            result.append(text)
            i += 1
            continue

        match = _INDENT.match(text)
        indent = match.group() if match else ""
        counter = f"{LOOP_COUNTER_PREFIX}{index}"
        guard = f"if (++{counter} > {ceiling}) break;"
        result.append(f"{indent}int {counter} = 0;")
        code = scanned[i].code
        brace = code.find("{")
        if brace >= 0 and code[brace + 1 :].strip():
            # Body starts on the header line
            result.append(f"{code[: brace + 1]} {guard}{code[brace + 1 :]}")
        else:
            result.append(text)
            if brace < 0:
                i += 1
                result.append(lines[i])
            result.append(f"{indent}  {guard}")
        logger.debug(f"Capped loop {index} at line {i} to {ceiling} iterations")
        i += 1

    return result


def find_loops(lines: list[SourceLine], scope: FunctionScope) -> list[LoopInfo]:
    """Enumerate the loops of a function in loop-guard order.

    Indices count from the first loop after the function header, matching
    `cap_loop_iterations` applied to the function's own lines with start 0.

    Args:
        lines: Lexed source lines
        scope: The function to scan

    Returns:
        One LoopInfo per loop, in document order
    """
    if not scope.found:
        return []

    last = scope.end if scope.end >= 0 else len(lines) - 1
    loops: list[LoopInfo] = []
    for i in range(scope.start + 1, last + 1):
        if not is_loop_header(lines[i]):
            continue
        header = lines[i].stripped.split("{", 1)[0].rstrip()
        loops.append(
            LoopInfo(
                loop_index=len(loops),
                line=i,
                end_line=find_block_end(lines, i),
                header=header,
            )
        )
    return loops
