"""
Data models and structures for the shader debugger.

This module contains the dataclass definitions used throughout the debugger
to represent scanned source lines, function scopes, joined statements, debug
targets, loop and parameter descriptions, and per-request options.
"""

from dataclasses import dataclass, field
from enum import Enum


class NormalizeMode(str, Enum):
    """How the visualized value is remapped before it is written out."""

    OFF = "off"
    SOFT = "soft"
    ABS = "abs"


class ParameterMode(str, Enum):
    """Where the argument for a helper parameter comes from."""

    UV = "uv"
    CENTERED_UV = "centered-uv"
    CUSTOM = "custom"


@dataclass(frozen=True)
class SourceLine:
    """One line of shader source after lexing.

    Attributes:
        text: Original line text
        code: Line text with comments removed
        opens: Number of `{` outside comments and strings
        closes: Number of `}` outside comments and strings
    """

    text: str
    code: str
    opens: int = 0
    closes: int = 0

    @property
    def stripped(self) -> str:
        return self.code.strip()

    @property
    def net_braces(self) -> int:
        return self.opens - self.closes


@dataclass(frozen=True)
class FunctionScope:
    """The function enclosing a line.

    Attributes:
        name: Function name, or None when the line is at global scope
        start: Header line index, -1 when there is no function
        end: Closing brace line index, -1 when the function never closes
    """

    name: str | None = None
    start: int = -1
    end: int = -1

    @property
    def found(self) -> bool:
        return self.name is not None and self.start >= 0


@dataclass(frozen=True)
class LogicalStatement:
    """A statement joined from one or more source lines.

    Attributes:
        text: Joined statement text
        start: First source line of the statement
        end: Last source line of the statement
    """

    text: str
    start: int
    end: int


@dataclass(frozen=True)
class DebugTarget:
    """The value to visualize.

    Attributes:
        name: Variable name read after the target statement
        type: GLSL type of the variable
    """

    name: str
    type: str


@dataclass(frozen=True)
class Parameter:
    """A parameter parsed from a function header.

    Attributes:
        name: Parameter name
        type: GLSL type
        qualifier: `in`, `out`, `inout`, or None
    """

    name: str
    type: str
    qualifier: str | None = None


@dataclass
class ParameterInfo:
    """An input parameter of the debugged function with its argument choices.

    Attributes:
        name: Parameter name from the function signature
        type: GLSL type
        uv_value: UV-derived expression
        centered_uv_value: Aspect-corrected, centered UV expression
        default_custom_value: Initial custom value
        mode: Argument source selected by default
        custom_value: Current custom value
    """

    name: str
    type: str
    uv_value: str
    centered_uv_value: str
    default_custom_value: str
    mode: ParameterMode
    custom_value: str

    @property
    def value(self) -> str:
        """Argument expression for the selected mode."""
        if self.mode == ParameterMode.UV:
            return self.uv_value
        if self.mode == ParameterMode.CENTERED_UV:
            return self.centered_uv_value
        return self.custom_value


@dataclass
class LoopInfo:
    """A loop that contains the debugged line.

    Attributes:
        loop_index: Index in the loop guard's document-order numbering
        line: Line of the loop header
        end_line: Line of the loop's closing brace, -1 when unterminated
        header: Header text without the opening brace
        max_iter: Iteration ceiling, None for unlimited
    """

    loop_index: int
    line: int
    end_line: int
    header: str
    max_iter: int | None = None


@dataclass
class FunctionContext:
    """Description of the function enclosing a debugged line.

    Attributes:
        function_name: Function name
        return_type: Declared return type
        parameters: Input parameters (`out` parameters excluded)
        is_function: False for the entry function
        loops: Loops whose body contains the line, outermost first
    """

    function_name: str
    return_type: str
    parameters: list[ParameterInfo] = field(default_factory=list)
    is_function: bool = True
    loops: list[LoopInfo] = field(default_factory=list)


@dataclass
class DebugOptions:
    """Per-request options for a debug rewrite.

    Attributes:
        loop_caps: Loop index to iteration ceiling
        custom_parameters: Parameter index to argument expression
        normalize: Remapping applied to the visualized value
        step_edge: Binary threshold applied after visualization, or None
    """

    loop_caps: dict[int, int] = field(default_factory=dict)
    custom_parameters: dict[int, str] = field(default_factory=dict)
    normalize: NormalizeMode = NormalizeMode.OFF
    step_edge: float | None = None
