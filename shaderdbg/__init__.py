from shaderdbg.debugger import (
    DebugOptions,
    FunctionContext,
    NormalizeMode,
    ShaderDebugError,
    apply_output_post_processing,
    cap_loop_iterations,
    close_open_braces,
    extract_function_context,
    transform,
    visualize,
)

__version__ = "0.1.0"


__all__ = [
    "DebugOptions",
    "FunctionContext",
    "NormalizeMode",
    "ShaderDebugError",
    "apply_output_post_processing",
    "cap_loop_iterations",
    "close_open_braces",
    "extract_function_context",
    "transform",
    "visualize",
]
