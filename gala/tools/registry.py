"""Schema-validated catalog of tools agents may invoke."""

import inspect
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, ValidationError


class ToolError(Exception):
    """Base error for tool lookup and execution."""

    pass


class ToolNotFoundError(ToolError):
    """Requested tool is not registered."""

    pass


class ToolValidationError(ToolError):
    """Tool parameters do not match the tool's schema."""

    pass


class ToolDefinition(BaseModel):
    """A named callable with a pydantic parameter schema.

    ``execute`` receives the validated parameter model and may be a plain
    function or a coroutine function.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    parameters: type[BaseModel]
    execute: Callable[[Any], Any]

    def to_function_schema(self) -> dict[str, Any]:
        """Render an OpenAI-compatible function schema."""
        schema = self.parameters.model_json_schema()
        schema.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": schema,
            },
        }


class ToolRegistry:
    """Registry of tools, built once at startup and passed explicitly.

    Safe for concurrent reads once populated.
    """

    def __init__(self, tools: Optional[list[ToolDefinition]] = None):
        self._tools: dict[str, ToolDefinition] = {}
        if tools:
            self.register_many(tools)

    def register(self, tool: ToolDefinition) -> None:
        self._tools[tool.name] = tool

    def register_many(self, tools: list[ToolDefinition]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def get_all(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def get_by_names(self, names: list[str]) -> list[ToolDefinition]:
        """Return tools for the given names, skipping unknown ones."""
        return [self._tools[name] for name in names if name in self._tools]

    def has(self, name: str) -> bool:
        return name in self._tools

    def remove(self, name: str) -> bool:
        return self._tools.pop(name, None) is not None

    def clear(self) -> None:
        self._tools.clear()

    def list(self) -> list[str]:
        return list(self._tools.keys())

    async def execute(self, name: str, params: Any) -> Any:
        """Validate params against the tool schema and run the tool.

        Args:
            name: Registered tool name
            params: Raw parameters (usually a dict decoded from the model)

        Returns:
            Whatever the tool returns

        Raises:
            ToolNotFoundError: If no tool is registered under name
            ToolValidationError: If params fail schema validation
        """
        tool = self.get(name)
        if tool is None:
            raise ToolNotFoundError(f"Tool not found: {name}")

        try:
            validated = tool.parameters.model_validate(params or {})
        except ValidationError as e:
            raise ToolValidationError(f"Invalid parameters for tool {name}: {e}") from e

        result = tool.execute(validated)
        if inspect.isawaitable(result):
            result = await result
        return result
