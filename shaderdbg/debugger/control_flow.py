"""
Control-flow stripping for truncated function bodies.

A truncated body runs every statement before the debugged line exactly once,
as if each branch were taken and each loop ran its first iteration. To get
there, `if`/`else`/`while`/`do` headers are removed together with the braces
that delimit their blocks, and a `for` header is replaced by its initializer.
Blocks that are not control flow (bare scope blocks) keep their braces.
"""

import re

from loguru import logger

from shaderdbg.debugger.constants import (
    BARE_KEYWORD,
    CONDITION_START,
    CONTROL_FLOW_HEADER,
    JUMP_STATEMENT,
    LOOP_INIT_COMMENT,
)
from shaderdbg.debugger.models import SourceLine

_FOR_KEYWORD = re.compile(r"^\s*for\b")
_INDENT = re.compile(r"^\s*")


def _indent(text: str) -> str:
    match = _INDENT.match(text)
    return match.group() if match else ""


def split_header(code: str) -> tuple[str, str]:
    """Split a control-flow line into its header and the text after it.

    Args:
        code: Comment-free, stripped line text starting with a keyword

    Returns:
        Tuple of (header, trailing text)

    Examples:
        >>> split_header("if (a > (b + 1.0)) x = 1.0;")
        ('if (a > (b + 1.0))', 'x = 1.0;')
        >>> split_header("else {")
        ('else', '{')
    """
    match = CONDITION_START.match(code)
    if not match:
        keyword = BARE_KEYWORD.match(code)
        if not keyword:
            return code, ""
        return code[: keyword.end()], code[keyword.end() :].strip()

    depth = 0
    for i in range(match.end() - 1, len(code)):
        if code[i] == "(":
            depth += 1
        elif code[i] == ")":
            depth -= 1
            if depth == 0:
                return code[: i + 1], code[i + 1 :].strip()
    # Clause continues on the next line
    return code, ""


def loop_initializer(header: str) -> str:
    """Initializer clause of a `for` header, empty when there is none."""
    clause = header[header.find("(") + 1 : header.rfind(")")]
    return clause.split(";", 1)[0].strip()


class _Stripper:
    """Rewrites lines one by one while tracking which blocks are kept.

    Each open block on the stack is True when its braces stay in the output
    and False when it belongs to a removed control-flow header.
    """

    def __init__(self) -> None:
        self.output: list[str] = []
        self.blocks: list[bool] = []
        # A header was removed and its body starts on the next line
        self.pending = False
        # Header whose parenthesized clause continues on later lines
        self.clause: str | None = None
        self.clause_indent = ""

    def _close(self) -> bool:
        return self.blocks.pop() if self.blocks else True

    def _emit_body(self, indent: str, body: str) -> None:
        """Emit the statement of a guarded single-line body."""
        body = body.strip()
        if not body or body == ";":
            return
        if JUMP_STATEMENT.match(body):
            logger.debug(f"Dropping guarded jump: {body}")
            return
        self.output.append(f"{indent}{body}")

    def _header(self, indent: str, code: str) -> None:
        header, rest = split_header(code)
        if header.count("(") > header.count(")"):
            self.clause = code
            self.clause_indent = indent
            return
        self._finish_header(indent, header, rest)

    def _continue_clause(self, code: str) -> None:
        clause = f"{self.clause} {code}"
        header, rest = split_header(clause)
        if header.count("(") > header.count(")"):
            self.clause = clause
            return
        self.clause = None
        self._finish_header(self.clause_indent, header, rest)

    def _finish_header(self, indent: str, header: str, rest: str) -> None:
        if _FOR_KEYWORD.match(header):
            init = loop_initializer(header)
            if init:
                self.output.append(f"{indent}{init};{LOOP_INIT_COMMENT}")

        if not rest:
            self.pending = True
        elif rest == "{":
            self.blocks.append(False)
        elif rest.startswith("{"):
            inner = rest[1:]
            net = inner.count("{") - inner.count("}")
            if net < 0:
                # Block opens and closes on this line
                inner = inner[: inner.rfind("}")]
            else:
                self.blocks.append(False)
            self._emit_body(indent, inner)
        else:
            self._emit_body(indent, rest)

    def feed(self, line: SourceLine) -> None:
        code = line.stripped
        indent = _indent(line.text)
        if not code:
            self.output.append(line.text)
            return
        if self.clause is not None:
            self._continue_clause(code)
            return

        if code == "{" and self.pending:
            self.pending = False
            self.blocks.append(False)
            return
        guarded = self.pending
        self.pending = False

        # Leading closers end blocks opened on earlier lines
        closes = line.closes
        kept_closers = 0
        while code.startswith("}"):
            closes -= 1
            if self._close():
                kept_closers += 1
            code = code[1:].lstrip()
        if not code:
            if kept_closers == line.closes:
                self.output.append(line.text)
            elif kept_closers:
                self.output.append(f"{indent}{'}' * kept_closers}")
            return
        if kept_closers:
            self.output.append(f"{indent}{'}' * kept_closers}")

        if CONTROL_FLOW_HEADER.match(code):
            self._header(indent, code)
            return

        # No jump survives inside a removed block
        if (guarded or not all(self.blocks)) and JUMP_STATEMENT.match(code):
            logger.debug(f"Dropping jump in removed block: {code}")
            return

        rewritten = code != line.stripped
        net = line.opens - closes
        for _ in range(max(net, 0)):
            self.blocks.append(True)
        for _ in range(max(-net, 0)):
            if not self._close() and code.endswith("}"):
                code = code[:-1].rstrip()
                rewritten = True

        self.output.append(f"{indent}{code}" if rewritten else line.text)


def strip_control_flow(lines: list[SourceLine]) -> list[str]:
    """Remove control flow from a run of function body lines.

    Args:
        lines: Lexed body lines, from the first line after the function
            header up to the end of the debugged statement

    Returns:
        Rewritten lines; blocks still open at the end are left open
    """
    stripper = _Stripper()
    for line in lines:
        stripper.feed(line)
    logger.debug(
        f"Stripped control flow: {len(lines)} lines in, "
        f"{len(stripper.output)} lines out"
    )
    return stripper.output
