"""Tool registry for agent tool calling."""

from gala.tools.registry import (
    ToolDefinition,
    ToolError,
    ToolNotFoundError,
    ToolRegistry,
    ToolValidationError,
)

__all__ = [
    "ToolDefinition",
    "ToolError",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolValidationError",
]
