"""
Exceptions and error handling for the shader debugger.

Analysis never raises for source it cannot debug; it returns None instead.
The exception defined here reports misuse by the caller, such as a target
line outside the source or a malformed loop ceiling.
"""

from typing import Optional


class ShaderDebugError(ValueError):
    """Exception raised when the debugger is called with invalid input.

    The class optionally records the 0-based source line the error refers to
    and appends it to the message.

    Examples:
        >>> raise ShaderDebugError("Target line out of range", line=42)
        ShaderDebugError: Target line out of range at line 42
    """

    def __init__(self, message: str, line: Optional[int] = None):
        """Initialize the exception with a message and optional line.

        Args:
            message: The error message
            line: Optional 0-based source line where the error occurred
        """
        self.message = message
        self.line = line

        location_info = ""
        if line is not None:
            location_info = f" at line {line}"

        super().__init__(f"{message}{location_info}")
