"""
Detection of the value to visualize for a statement.

Patterns are tried in a fixed priority order and the first one that yields
a name with a known, supported type wins:

1. `return <expr>;` inside a function with a known return type
2. typed declarations `TYPE IDENT =`
3. compound and plain reassignments of a variable in the environment
4. the same writes through a member access or swizzle of such a variable

Within groups 3 and 4 each pattern only considers its first regex match.
"""

import re

from loguru import logger

from shaderdbg.debugger.constants import (
    RETURN_STATEMENT,
    RETURN_TARGET,
    SUPPORTED_TYPES,
)
from shaderdbg.debugger.models import DebugTarget

_DECLARATION_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b({type_name})\s+(\w+)\s*="), type_name)
    for type_name in SUPPORTED_TYPES
]

_ASSIGNMENT_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(\w+)\s*\*="), "compound *="),
    (re.compile(r"(\w+)\s*\+="), "compound +="),
    (re.compile(r"(\w+)\s*-="), "compound -="),
    (re.compile(r"(\w+)\s*/="), "compound /="),
    (re.compile(r"^\s*(\w+)\s*=(?!\s*=)"), "reassignment"),
]

_MEMBER_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(\w+)\.[xyzw]\s*\*="), "member access *="),
    (re.compile(r"(\w+)\.[xyzw]\s*\+="), "member access +="),
    (re.compile(r"(\w+)\.[xyzw]\s*-="), "member access -="),
    (re.compile(r"(\w+)\.[xyzw]\s*/="), "member access /="),
    (re.compile(r"(\w+)\.[xyzw]\s*="), "member access ="),
    (re.compile(r"(\w+)\.[rgba]\s*\*="), "color member *="),
    (re.compile(r"(\w+)\.[rgba]\s*\+="), "color member +="),
    (re.compile(r"(\w+)\.[rgba]\s*-="), "color member -="),
    (re.compile(r"(\w+)\.[rgba]\s*/="), "color member /="),
    (re.compile(r"(\w+)\.[rgba]\s*="), "color member ="),
    (re.compile(r"(\w+)\.[xy]+\s*\*="), "swizzle *="),
    (re.compile(r"(\w+)\.[xy]+\s*\+="), "swizzle +="),
    (re.compile(r"(\w+)\.[xy]+\s*="), "swizzle ="),
]


def _lookup(
    statement: str,
    patterns: list[tuple[re.Pattern[str], str]],
    env: dict[str, str],
) -> DebugTarget | None:
    for pattern, label in patterns:
        match = pattern.search(statement)
        if not match:
            continue
        name = match.group(1)
        var_type = env.get(name)
        logger.debug(f"Trying {label}: '{name}' ({var_type or 'not in scope'})")
        if var_type is None:
            continue
        return DebugTarget(name=name, type=var_type)
    return None


def detect_target(
    statement: str,
    env: dict[str, str],
    return_type: str | None = None,
) -> DebugTarget | None:
    """Classify a statement into the value it produces.

    Args:
        statement: Joined statement text
        env: Name-to-type map visible at the statement
        return_type: Return type of the enclosing function, if any

    Returns:
        The DebugTarget, or None when nothing visualizable is found
    """
    if RETURN_STATEMENT.match(statement) and return_type:
        if return_type not in SUPPORTED_TYPES:
            logger.debug(f"Return type {return_type} cannot be visualized")
            return None
        return DebugTarget(name=RETURN_TARGET, type=return_type)

    for pattern, type_name in _DECLARATION_PATTERNS:
        match = pattern.search(statement)
        if match:
            return DebugTarget(name=match.group(2), type=type_name)

    target = _lookup(statement, _ASSIGNMENT_PATTERNS, env)
    if target is None:
        target = _lookup(statement, _MEMBER_PATTERNS, env)

    if target is None:
        logger.debug(f"No debug target in statement: {statement.strip()}")
        return None
    if target.type not in SUPPORTED_TYPES:
        logger.debug(f"Type {target.type} of '{target.name}' cannot be visualized")
        return None
    return target
