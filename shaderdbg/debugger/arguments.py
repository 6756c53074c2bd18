"""
Call-argument synthesis for a debugged helper function.

The synthesized entry point calls the helper either with the arguments of an
existing call in the entry function, when every one of them can be evaluated
there, or with a per-type default value for each parameter.
"""

import re
from dataclasses import dataclass, field

from loguru import logger

from shaderdbg.debugger.constants import (
    BUILTIN_UNIFORMS,
    DEFAULT_ARGUMENTS,
    FALLBACK_ARGUMENT,
    NUMERIC_LITERAL,
    RESOLVABLE_IDENTIFIER,
    RETURN_TYPES,
    UV_SETUP,
)
from shaderdbg.debugger.control_flow import strip_control_flow
from shaderdbg.debugger.models import FunctionScope, SourceLine
from shaderdbg.debugger.scope import find_entry_function, function_parameters
from shaderdbg.debugger.type_env import build_type_environment

_UV_REFERENCE = re.compile(r"\buv\b")


@dataclass
class CallArguments:
    """Arguments for the helper call and the lines that prepare them.

    Attributes:
        args: Argument expressions in parameter order
        setup: Lines emitted before the call
    """

    args: list[str] = field(default_factory=list)
    setup: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CallSite:
    """A call of the helper found in the entry function."""

    line: int
    args: list[str]


def default_arguments(
    lines: list[SourceLine], scope: FunctionScope
) -> CallArguments:
    """One default value per parameter of the function.

    Args:
        lines: Lexed source lines
        scope: The helper function

    Returns:
        Default arguments, with the `uv` setup line when a vec2 is passed
    """
    call = CallArguments()
    for param in function_parameters(lines, scope):
        if param.type == "vec2" and UV_SETUP not in call.setup:
            call.setup.append(UV_SETUP)
        call.args.append(DEFAULT_ARGUMENTS.get(param.type, FALLBACK_ARGUMENT))
    return call


def _split_arguments(text: str) -> list[str]:
    """Split an argument list on top-level commas."""
    if not text.strip():
        return []
    args: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        if char == "," and depth == 0:
            args.append(current.strip())
            current = ""
        else:
            current += char
    args.append(current.strip())
    return args


def _call_arguments(code: str, match: re.Match[str]) -> str | None:
    """Text between the parentheses of a call, None when it is not closed."""
    depth = 0
    for i in range(match.end() - 1, len(code)):
        if code[i] == "(":
            depth += 1
        elif code[i] == ")":
            depth -= 1
            if depth == 0:
                return code[match.end() : i]
    return None


def find_function_call(
    lines: list[SourceLine], entry: FunctionScope, name: str
) -> CallSite | None:
    """Find the first call of a function inside the entry function.

    Args:
        lines: Lexed source lines
        entry: The entry function
        name: Name of the called function

    Returns:
        The call site, or None when the entry function never calls it
    """
    if not entry.found:
        return None

    call = re.compile(rf"\b{re.escape(name)}\s*\(")
    types = "|".join(RETURN_TYPES)
    declaration = re.compile(rf"^\s*(?:{types})\s+{re.escape(name)}\s*\(")
    last = entry.end if entry.end >= 0 else len(lines) - 1
    for i in range(entry.start, last + 1):
        code = lines[i].code
        if declaration.match(code):
            continue
        match = call.search(code)
        if not match:
            continue
        args = _call_arguments(code, match)
        if args is not None:
            return CallSite(line=i, args=_split_arguments(args))
    return None


def _is_resolvable(arg: str, env: dict[str, str]) -> bool:
    if NUMERIC_LITERAL.match(arg):
        return True
    match = RESOLVABLE_IDENTIFIER.match(arg)
    if not match:
        return False
    base = match.group(1)
    return base in env or base in BUILTIN_UNIFORMS


def _setup_lines(
    lines: list[SourceLine], entry: FunctionScope, call_line: int
) -> list[str]:
    """Entry function statements before the call, without control flow."""
    stripped = strip_control_flow(lines[entry.start + 1 : call_line])
    return [text for text in stripped if text.strip() not in ("", "{", "}")]


def reuse_call_site(
    lines: list[SourceLine], scope: FunctionScope
) -> CallArguments | None:
    """Arguments of an existing call of the helper, if they can be reused.

    Every argument must be a numeric literal or a variable, optionally
    swizzled, declared in the entry function before the call or provided as a
    built-in uniform. The entry function's statements preceding the call are
    copied so those variables exist in the synthesized entry point.

    Args:
        lines: Lexed source lines
        scope: The helper function

    Returns:
        The reused arguments, or None when defaults must be used
    """
    if scope.name is None:
        return None
    entry = find_entry_function(lines)
    site = find_function_call(lines, entry, scope.name)
    if site is None:
        logger.debug(f"No call of '{scope.name}' in the entry function")
        return None

    env = build_type_environment(lines, site.line, entry)
    unresolved = [arg for arg in site.args if not _is_resolvable(arg, env)]
    if unresolved:
        logger.debug(f"Unresolved arguments at line {site.line}: {unresolved}")
        return None

    logger.debug(f"Reusing call of '{scope.name}' at line {site.line}")
    return CallArguments(args=site.args, setup=_setup_lines(lines, entry, site.line))


def resolve_arguments(
    lines: list[SourceLine],
    scope: FunctionScope,
    custom_parameters: dict[int, str] | None = None,
) -> CallArguments:
    """Choose the arguments for calling the debugged helper.

    Custom values replace the default for their parameter index. When custom
    values are given, an existing call site is not reused.

    Args:
        lines: Lexed source lines
        scope: The helper function
        custom_parameters: Parameter index to argument expression

    Returns:
        The arguments and their setup lines
    """
    if not custom_parameters:
        reused = reuse_call_site(lines, scope)
        if reused is not None:
            return reused

    call = default_arguments(lines, scope)
    for index, value in (custom_parameters or {}).items():
        if 0 <= index < len(call.args):
            call.args[index] = value
        else:
            logger.warning(f"Ignoring custom value for unknown parameter {index}")

    if not any(_UV_REFERENCE.search(arg) for arg in call.args):
        call.setup = [line for line in call.setup if line != UV_SETUP]
    return call
