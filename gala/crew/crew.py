"""Crew: runs a set of tasks across role-played agents."""

import asyncio
import inspect
import logging
import time
from datetime import datetime
from typing import Any, Optional

from gala.config import CrewProcess, ProviderClient
from gala.crew.agent import CrewAgent
from gala.crew.errors import CrewConfigurationError
from gala.crew.processes import PROCESSES
from gala.crew.schemas import CrewConfig, CrewResult, TaskConfig, TaskResult

logger = logging.getLogger(__name__)


def validate_crew_config(config: CrewConfig) -> None:
    """Reject crews that cannot run.

    Raises:
        CrewConfigurationError: On missing id/name, no agents or tasks,
            an unknown manager, or a task assigned to an unknown agent
    """
    if not config.id or not config.name:
        raise CrewConfigurationError("Crew must have id and name")
    if not config.agents:
        raise CrewConfigurationError("Crew must have at least one agent")
    if not config.tasks:
        raise CrewConfigurationError("Crew must have at least one task")

    agent_ids = {agent.id for agent in config.agents}
    if config.process == CrewProcess.HIERARCHICAL:
        if not config.manager_id:
            raise CrewConfigurationError("Hierarchical process requires a manager agent")
        if config.manager_id not in agent_ids:
            raise CrewConfigurationError(f"Manager agent not found: {config.manager_id}")

    for task in config.tasks:
        if task.agent is not None and task.agent not in agent_ids:
            raise CrewConfigurationError(f"Task {task.id} references unknown agent: {task.agent}")


class Crew:
    """A validated team of agents and the process they follow.

    Task failures never abort a kickoff; they are recorded as failed
    results. Only process-level errors and timeouts make the CrewResult
    unsuccessful.
    """

    def __init__(self, config: CrewConfig, client: ProviderClient):
        validate_crew_config(config)
        self.config = config
        self._agents: dict[str, CrewAgent] = {
            agent_config.id: CrewAgent(agent_config, client) for agent_config in config.agents
        }
        self._results: dict[str, TaskResult] = {}

    def get_agent(self, agent_id: str) -> Optional[CrewAgent]:
        return self._agents.get(agent_id)

    def all_agents(self) -> list[CrewAgent]:
        return list(self._agents.values())

    def agent_for_task(self, task: TaskConfig) -> CrewAgent:
        if task.agent:
            agent = self._agents.get(task.agent)
            if agent is not None:
                return agent
        return next(iter(self._agents.values()))

    async def run_task(
        self, agent: CrewAgent, task: TaskConfig, context: Optional[dict[str, Any]] = None
    ) -> TaskResult:
        """Execute task on agent, retrying failures up to max_retries times."""
        result = await agent.execute_task(task, context)
        for attempt in range(1, self.config.max_retries + 1):
            if result.status != "failed":
                break
            logger.warning(
                f"[Crew {self.config.id}] task {task.id} failed ({result.error}); "
                f"retry {attempt}/{self.config.max_retries}"
            )
            result = await agent.execute_task(task, context)
        return result

    async def record(self, task: TaskConfig, result: TaskResult) -> None:
        self._results[task.id] = result
        if task.callback is not None:
            outcome = task.callback(result)
            if inspect.isawaitable(outcome):
                await outcome

    async def kickoff(self) -> CrewResult:
        """Run every task under the configured process."""
        start_time = datetime.now()
        started = time.perf_counter()
        self._results = {}
        process = PROCESSES[self.config.process]

        logger.info(
            f"[Crew {self.config.id}] kickoff: process={self.config.process.value} "
            f"agents={len(self._agents)} tasks={len(self.config.tasks)}"
        )

        error: Optional[str] = None
        try:
            if self.config.timeout is not None:
                await asyncio.wait_for(process(self), timeout=self.config.timeout)
            else:
                await process(self)
        except asyncio.TimeoutError:
            error = f"Crew timed out after {self.config.timeout} seconds"
            logger.error(f"[Crew {self.config.id}] {error}")
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error(f"[Crew {self.config.id}] process failed: {error}")

        return CrewResult(
            crew_id=self.config.id,
            success=error is None,
            results=self.get_results(),
            start_time=start_time,
            end_time=datetime.now(),
            duration=time.perf_counter() - started,
            error=error,
        )

    def get_results(self) -> list[TaskResult]:
        return list(self._results.values())

    def get_config(self) -> CrewConfig:
        return self.config
