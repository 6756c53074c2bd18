"""
Constants and predefined values for the shader debugger.

This module contains the type tables, regular expressions and default values
used throughout the debugger, including the per-type default call arguments
and the visualization templates.
"""

import re

# Name of the per-pixel entry point
ENTRY_FUNCTION = "mainImage"

# Signature of the synthesized entry point
ENTRY_SIGNATURE = "void mainImage(out vec4 fragColor, in vec2 fragCoord) {"

# Output variable every visualization writes to
OUTPUT_VARIABLE = "fragColor"

# Types a debug target may have, in declaration-matching priority order
SUPPORTED_TYPES: tuple[str, ...] = (
    "vec4",
    "vec3",
    "vec2",
    "float",
    "mat2",
    "mat3",
    "mat4",
)

# Return types recognized on a function header
RETURN_TYPES: tuple[str, ...] = (
    "void",
    "float",
    "vec2",
    "vec3",
    "vec4",
    "mat2",
    "mat3",
    "mat4",
)

# Types recognized in a parameter list
PARAMETER_TYPES: tuple[str, ...] = (
    "vec2",
    "vec3",
    "vec4",
    "float",
    "int",
    "bool",
    "mat2",
    "mat3",
    "mat4",
    "sampler2D",
)

# Name given to a rewritten return expression
RETURN_TARGET = "_dbgReturn"

# Name of the helper result inside the synthesized entry point
CALL_RESULT = "result"

# Prefix of loop guard counters
LOOP_COUNTER_PREFIX = "_dbgIter"

# Maximum number of lines scanned in each direction when joining statements
STATEMENT_SCAN_LIMIT = 10

# Setup line declaring the default vec2 argument
UV_SETUP = "  vec2 uv = fragCoord / iResolution.xy;"

# Aspect-corrected, centered coordinates in the -1..1 range
CENTERED_UV = "((fragCoord * 2.0 - iResolution.xy) / iResolution.y)"

# Default call argument per parameter type
DEFAULT_ARGUMENTS: dict[str, str] = {
    "vec2": "uv",
    "vec3": "vec3(0.5)",
    "vec4": "vec4(0.5)",
    "float": "0.5",
    "int": "1",
    "bool": "true",
    "mat2": "mat2(1.0)",
    "mat3": "mat3(1.0)",
    "mat4": "mat4(1.0)",
    "sampler2D": "iChannel0",
}

# Fallback argument for a parameter type without a default
FALLBACK_ARGUMENT = "0.0"

# UV-derived argument per parameter type, formatted with the coordinate expr
UV_ARGUMENTS: dict[str, str] = {
    "vec2": "{uv}",
    "float": "{uv}.x",
    "vec3": "vec3({uv}, 0.0)",
    "vec4": "vec4({uv}, 0.0, 1.0)",
    "int": "int({uv}.x * 10.0)",
    "bool": "{uv}.x > 0.5",
    "mat2": "mat2({uv}.x)",
    "mat3": "mat3({uv}.x)",
    "mat4": "mat4({uv}.x)",
}

# Initial custom argument per parameter type
DEFAULT_CUSTOM_VALUES: dict[str, str] = {**DEFAULT_ARGUMENTS, "vec2": "vec2(0.5)"}

# Shadertoy built-in uniforms a call argument may reference without a declaration
BUILTIN_UNIFORMS: frozenset[str] = frozenset(
    {
        "iResolution",
        "iTime",
        "iTimeDelta",
        "iFrame",
        "iMouse",
        "iDate",
        "iChannel0",
        "iChannel1",
        "iChannel2",
        "iChannel3",
        "fragCoord",
    }
)

# Plain visualization per type; {v} is the visualized variable
VISUALIZATIONS: dict[str, tuple[str, str]] = {
    "float": ("vec4(vec3({v}), 1.0)", "visualize float as grayscale"),
    "vec2": ("vec4({v}, 0.0, 1.0)", "visualize vec2 (RG channels)"),
    "vec3": ("vec4({v}, 1.0)", "visualize vec3 as RGB"),
    "vec4": ("{v}", "visualize vec4 directly"),
    "mat2": ("vec4({v}[0], {v}[1])", "visualize mat2 as vec4"),
    "mat3": ("vec4({v}[0], 1.0)", "visualize mat3 first row"),
    "mat4": ("{v}[0]", "visualize mat4 first row"),
}

# Soft normalization: any range to 0..1, zero maps to grey
SOFT_NORMALIZATIONS: dict[str, tuple[str, str]] = {
    "float": (
        "vec4(vec3(({v} / (abs({v}) + 1.0) * 0.5 + 0.5)), 1.0)",
        "soft normalized float",
    ),
    "vec2": (
        "vec4(({v} / (abs({v}) + vec2(1.0)) * 0.5 + 0.5), 0.0, 1.0)",
        "soft normalized vec2",
    ),
    "vec3": (
        "vec4(({v} / (abs({v}) + vec3(1.0)) * 0.5 + 0.5), 1.0)",
        "soft normalized vec3",
    ),
    "vec4": (
        "vec4(({v}.rgb / (abs({v}.rgb) + vec3(1.0)) * 0.5 + 0.5), 1.0)",
        "soft normalized vec4",
    ),
}

# Abs normalization: magnitude to 0..1, zero maps to black
ABS_NORMALIZATIONS: dict[str, tuple[str, str]] = {
    "float": (
        "vec4(vec3((abs({v}) / (abs({v}) + 1.0))), 1.0)",
        "abs normalized float",
    ),
    "vec2": (
        "vec4((abs({v}) / (abs({v}) + vec2(1.0))), 0.0, 1.0)",
        "abs normalized vec2",
    ),
    "vec3": (
        "vec4((abs({v}) / (abs({v}) + vec3(1.0))), 1.0)",
        "abs normalized vec3",
    ),
    "vec4": (
        "vec4((abs({v}.rgb) / (abs({v}.rgb) + vec3(1.0))), 1.0)",
        "abs normalized vec4",
    ),
}

# Sentinel written when the type has no visualization
UNKNOWN_VISUALIZATION = ("vec4(1.0, 0.0, 1.0, 1.0)", "unknown type")

# Whole-output post-processing lines
SOFT_POST_PROCESS = (
    "  fragColor.rgb = fragColor.rgb / (abs(fragColor.rgb) + vec3(1.0)) * 0.5 + 0.5;"
)
ABS_POST_PROCESS = (
    "  fragColor.rgb = abs(fragColor.rgb) / (abs(fragColor.rgb) + vec3(1.0));"
)
STEP_POST_PROCESS = "  fragColor = vec4(step(vec3({edge}), fragColor.rgb), 1.0);"

_TYPES = "|".join(RETURN_TYPES)

# Function header: TYPE IDENT (
FUNCTION_HEADER = re.compile(rf"(?:{_TYPES})\s+(\w+)\s*\(")

# Function header anchored at line start, capturing the return type
RETURN_TYPE_HEADER = re.compile(rf"^\s*({_TYPES})(\s+\w+\s*\()")

# Parameter list of a header
PARAMETER_LIST = re.compile(r"\(([^)]*)\)")

# One parameter: optional qualifier, type, name
PARAMETER = re.compile(
    rf"(?:(in|out|inout)\s+)?({'|'.join(PARAMETER_TYPES)})\s+(\w+)"
)

# Return statement with an expression
RETURN_STATEMENT = re.compile(r"^\s*return\s+(.+);")

# Control-flow headers removed by stripping
CONTROL_FLOW_HEADER = re.compile(r"^\s*(?:if|else|while|do|for)\b")

# Start of a header whose keyword is followed by a parenthesized clause
CONDITION_START = re.compile(r"^\s*(?:else\s+)?(?:if|while|for)\s*\(")

# Keywords that open a block without a clause
BARE_KEYWORD = re.compile(r"^\s*(?:else|do)\b")

# Comment appended to a for-loop initializer kept in place of the loop
LOOP_INIT_COMMENT = "  // Loop init (first iteration only)"

# Loop headers enumerated by the loop guard
LOOP_HEADER = re.compile(r"^\s*(?:for|while)\s*\(")

# Jump statements dropped from single-line guarded statements
JUMP_STATEMENT = re.compile(r"^(?:break|continue|return|discard)\b")

# Identifier with an optional swizzle, as accepted in a reused call site
RESOLVABLE_IDENTIFIER = re.compile(r"^([A-Za-z_]\w*)(?:\.[xyzwrgba]+)?$")

# Numeric literal, as accepted in a reused call site
NUMERIC_LITERAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[fF]?$")
