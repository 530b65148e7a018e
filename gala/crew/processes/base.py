"""Runtime surface the crew processes drive."""

import asyncio
from typing import Any, Awaitable, Optional, Protocol, TypeVar

from gala.crew.agent import CrewAgent
from gala.crew.schemas import CrewConfig, TaskConfig, TaskResult

T = TypeVar("T")


class CrewRuntime(Protocol):
    """What a process needs from the crew running it."""

    config: CrewConfig

    def get_agent(self, agent_id: str) -> Optional[CrewAgent]:
        ...

    def all_agents(self) -> list[CrewAgent]:
        ...

    def agent_for_task(self, task: TaskConfig) -> CrewAgent:
        ...

    async def run_task(
        self, agent: CrewAgent, task: TaskConfig, context: Optional[dict[str, Any]] = None
    ) -> TaskResult:
        ...

    async def record(self, task: TaskConfig, result: TaskResult) -> None:
        """Store result under task.id and fire the task callback."""
        ...


async def gather_settled(*aws: Awaitable[T]) -> list[T]:
    """Await every awaitable, then re-raise the first failure.

    Unlike a plain gather, no sibling is left running when one fails.
    """
    outcomes = await asyncio.gather(*aws, return_exceptions=True)
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)
