"""Agent: a provider client plus a bounded tool-calling loop."""

import asyncio
import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from gala.config import AIProvider, ProviderClient
from gala.schemas import ChatOptions, Message, ToolCall
from gala.tools.registry import ToolDefinition, ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5
FINISH_REASONS = ("stop", "end_turn")


class AgentConfig(BaseModel):
    """Configuration for a tool-using agent."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    name: str
    description: str = ""
    system_prompt: str = ""
    provider: AIProvider = AIProvider.ANTHROPIC
    model: str = "claude-3-5-sonnet-20241022"
    tools: list[ToolDefinition] = Field(default_factory=list)
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    max_history: int = Field(default=50, ge=2, description="Non-system turns kept in history")


class ToolResult(BaseModel):
    """Outcome of a single tool call within a turn."""

    name: str
    result: Any = None
    error: Optional[str] = None


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


class Agent:
    """A role-bound wrapper around one provider client.

    Owns its conversation history exclusively; a single Agent must not
    run two chat() calls concurrently.
    """

    def __init__(
        self,
        config: AgentConfig,
        client: ProviderClient,
        tool_registry: Optional[ToolRegistry] = None,
    ):
        self.config = config
        self._client = client
        self.tool_registry = tool_registry if tool_registry is not None else ToolRegistry()
        self.tool_registry.register_many(config.tools)
        self._history: list[Message] = []

        if config.system_prompt:
            self._history.append(Message(role="system", content=config.system_prompt))

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def history(self) -> list[Message]:
        return list(self._history)

    def _options(self, with_tools: bool) -> ChatOptions:
        return ChatOptions(
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            tools=list(self.config.tools) if with_tools else [],
        )

    def _append(self, role: str, content: str) -> None:
        self._history.append(Message(role=role, content=content))
        system = [m for m in self._history if m.role == "system"]
        turns = [m for m in self._history if m.role != "system"]
        if len(turns) > self.config.max_history:
            self._history = system + turns[-self.config.max_history :]

    async def chat(self, user_message: str, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> str:
        """Send a message and run tools until the model produces an answer.

        Makes at most max_iterations + 1 provider calls: the loop may end
        with pending tool results, so a final call without tools forces a
        textual answer.

        Args:
            user_message: The user's turn
            max_iterations: Upper bound on tool-enabled provider calls

        Returns:
            The assistant's final text

        Raises:
            Exception: Whatever the provider client raised; history is left
                as it was before the call
        """
        max_iterations = max(1, max_iterations)
        saved_history = list(self._history)
        self._append("user", user_message)

        try:
            return await self._run_turn(max_iterations)
        except Exception:
            # A failed turn leaves no unanswered user message behind
            self._history = saved_history
            raise

    async def _run_turn(self, max_iterations: int) -> str:
        for iteration in range(1, max_iterations + 1):
            response = await self._client.chat(self._history, self._options(with_tools=True))

            if not response.tool_calls:
                self._append("assistant", response.content)
                return response.content

            logger.debug(
                f"[{self.config.id}] iteration {iteration}: "
                f"{len(response.tool_calls)} tool call(s)"
            )
            results = await self._execute_tool_calls(response.tool_calls)

            self._append("assistant", response.content or "Using tools...")
            self._append("user", self._format_tool_results(results))

            if response.finish_reason in FINISH_REASONS:
                break

        final = await self._client.chat(self._history, self._options(with_tools=False))
        self._append("assistant", final.content)
        return final.content

    async def _execute_tool_calls(self, tool_calls: list[ToolCall]) -> list[ToolResult]:
        """Run every requested tool concurrently; failures stay per call."""

        async def run(call: ToolCall) -> ToolResult:
            try:
                result = await self.tool_registry.execute(call.name, call.parameters)
                return ToolResult(name=call.name, result=_jsonable(result))
            except Exception as e:
                logger.warning(f"[{self.config.id}] tool {call.name} failed: {e}")
                return ToolResult(name=call.name, error=str(e))

        return list(await asyncio.gather(*(run(call) for call in tool_calls)))

    @staticmethod
    def _format_tool_results(results: list[ToolResult]) -> str:
        payload = json.dumps(
            [r.model_dump() for r in results],
            default=str,
            indent=2,
        )
        return f"Tool results:\n{payload}"

    async def execute(self, input: Any) -> str:
        """Structured entry point: non-string input is sent as JSON."""
        message = input if isinstance(input, str) else json.dumps(input, default=str)
        return await self.chat(message)

    def clear_history(self) -> None:
        """Drop every turn except system prompts."""
        self._history = [m for m in self._history if m.role == "system"]

    def add_tool(self, tool: ToolDefinition) -> None:
        self.tool_registry.register(tool)
        self.config.tools.append(tool)

