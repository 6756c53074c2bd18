"""
Generation of rewritten shader programs.

The shape of the rewritten program depends on where the debugged line sits,
and is described by one of four plans:

- TruncatePlan: the line is in the entry function, which is cut after it
- WrapPlan: the line is in a helper, which is cut after it and called from a
  synthesized entry function
- OneLinerPlan: the line is outside any function and is wrapped on its own
- FullFunctionPlan: the line is in a helper but has no value of its own, so
  the helper runs in full and its return value is shown
"""

from dataclasses import dataclass

from loguru import logger

from shaderdbg.debugger.arguments import CallArguments, resolve_arguments
from shaderdbg.debugger.braces import close_open_braces
from shaderdbg.debugger.constants import (
    CALL_RESULT,
    ENTRY_SIGNATURE,
    RETURN_STATEMENT,
    RETURN_TARGET,
    RETURN_TYPE_HEADER,
)
from shaderdbg.debugger.control_flow import strip_control_flow
from shaderdbg.debugger.lexer import scan_lines
from shaderdbg.debugger.loop_guard import cap_loop_iterations
from shaderdbg.debugger.models import (
    DebugOptions,
    DebugTarget,
    FunctionScope,
    LogicalStatement,
    SourceLine,
)
from shaderdbg.debugger.scope import find_entry_function
from shaderdbg.debugger.visualize import visualize


@dataclass(frozen=True)
class TruncatePlan:
    """Cut the entry function after the debugged statement."""

    lines: list[SourceLine]
    scope: FunctionScope
    statement: LogicalStatement
    target: DebugTarget


@dataclass(frozen=True)
class WrapPlan:
    """Cut a helper after the debugged statement and call it."""

    lines: list[SourceLine]
    scope: FunctionScope
    statement: LogicalStatement
    target: DebugTarget


@dataclass(frozen=True)
class OneLinerPlan:
    """Wrap a statement found outside any function."""

    content: str
    target: DebugTarget


@dataclass(frozen=True)
class FullFunctionPlan:
    """Call an unmodified helper and show its return value."""

    lines: list[SourceLine]
    scope: FunctionScope
    return_type: str


GenerationPlan = TruncatePlan | WrapPlan | OneLinerPlan | FullFunctionPlan


def _indent(text: str) -> str:
    return text[: len(text) - len(text.lstrip())]


def _visualization(var_type: str, var_name: str, options: DebugOptions) -> list[str]:
    return visualize(
        var_type, var_name, options.normalize, options.step_edge
    ).split("\n")


def _preceding_lines(lines: list[SourceLine], scope: FunctionScope) -> list[str]:
    """Source above a helper, without an entry function defined there."""
    entry = find_entry_function(lines)
    skipped = range(0)
    if entry.found and 0 <= entry.end < scope.start:
        skipped = range(entry.start, entry.end + 1)
    return [
        line.text for i, line in enumerate(lines[: scope.start]) if i not in skipped
    ]


def _entry_point(
    function_name: str, result_type: str, call: CallArguments, options: DebugOptions
) -> list[str]:
    """Synthesized entry function that calls a helper and shows the result."""
    return [
        "",
        ENTRY_SIGNATURE,
        *call.setup,
        f"  {result_type} {CALL_RESULT} = {function_name}({', '.join(call.args)});",
        *_visualization(result_type, CALL_RESULT, options),
        "}",
    ]


def _generate_truncated(plan: TruncatePlan, options: DebugOptions) -> list[str]:
    start = plan.scope.start
    head = [line.text for line in plan.lines[: start + 1]]
    body = strip_control_flow(plan.lines[start + 1 : plan.statement.end + 1])
    shown = _visualization(plan.target.type, plan.target.name, options)
    return close_open_braces([*head, *body, *shown], start)


def _debug_body(plan: WrapPlan) -> list[SourceLine]:
    """Helper body up to the debugged statement, with a return made a variable."""
    start = plan.scope.start
    if plan.target.name != RETURN_TARGET:
        return plan.lines[start + 1 : plan.statement.end + 1]

    match = RETURN_STATEMENT.match(plan.statement.text)
    if not match:
        return plan.lines[start + 1 : plan.statement.end + 1]
    indent = _indent(plan.lines[plan.statement.start].text)
    rewritten = f"{indent}{plan.target.type} {RETURN_TARGET} = {match.group(1)};"
    return [*plan.lines[start + 1 : plan.statement.start], *scan_lines([rewritten])]


def _generate_wrapped(plan: WrapPlan, options: DebugOptions) -> list[str]:
    header = RETURN_TYPE_HEADER.sub(
        lambda m: f"{plan.target.type}{m.group(2)}",
        plan.lines[plan.scope.start].text,
        count=1,
    )
    function = [header, *strip_control_flow(_debug_body(plan))]
    function.append(f"  return {plan.target.name};")
    function = close_open_braces(function, 0)

    call = resolve_arguments(plan.lines, plan.scope, options.custom_parameters)
    return [
        *_preceding_lines(plan.lines, plan.scope),
        *function,
        *_entry_point(plan.scope.name or "", plan.target.type, call, options),
    ]


def _generate_full_function(plan: FullFunctionPlan, options: DebugOptions) -> list[str]:
    last = plan.scope.end if plan.scope.end >= 0 else len(plan.lines) - 1
    function = [line.text for line in plan.lines[plan.scope.start : last + 1]]
    function = cap_loop_iterations(function, 0, options.loop_caps)
    function = close_open_braces(function, 0)

    call = resolve_arguments(plan.lines, plan.scope, options.custom_parameters)
    return [
        *_preceding_lines(plan.lines, plan.scope),
        *function,
        *_entry_point(plan.scope.name or "", plan.return_type, call, options),
    ]


def _generate_one_liner(plan: OneLinerPlan, options: DebugOptions) -> list[str]:
    return [
        ENTRY_SIGNATURE,
        f"  {plan.content.strip()}",
        *_visualization(plan.target.type, plan.target.name, options),
        "}",
    ]


def generate(plan: GenerationPlan, options: DebugOptions | None = None) -> str:
    """Generate the rewritten program for a plan.

    Args:
        plan: The chosen rewrite
        options: Loop caps, parameter overrides and visualization settings

    Returns:
        The rewritten shader source
    """
    options = options or DebugOptions()
    match plan:
        case TruncatePlan():
            logger.debug(f"Truncating entry function after line {plan.statement.end}")
            output = _generate_truncated(plan, options)
        case WrapPlan():
            logger.debug(f"Wrapping helper '{plan.scope.name}' for debugging")
            output = _generate_wrapped(plan, options)
        case FullFunctionPlan():
            logger.debug(f"Calling full helper '{plan.scope.name}' for debugging")
            output = _generate_full_function(plan, options)
        case OneLinerPlan():
            logger.debug("Wrapping statement outside any function")
            output = _generate_one_liner(plan, options)
        case _:
            raise TypeError(f"Unknown generation plan: {plan!r}")
    return "\n".join(output)
