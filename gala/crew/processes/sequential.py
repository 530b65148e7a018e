"""SEQUENTIAL crew process."""

import logging
from typing import Any

from gala.crew.processes.base import CrewRuntime

logger = logging.getLogger(__name__)


async def execute_sequential(runtime: CrewRuntime) -> None:
    """Run tasks in list order, sharing completed outputs forward.

    Each later task receives the outputs of every earlier completed task,
    keyed by task id.
    """
    shared_context: dict[str, Any] = {}

    for task in runtime.config.tasks:
        agent = runtime.agent_for_task(task)
        if runtime.config.verbose:
            logger.info(f"[Crew] Executing task {task.id} with agent {agent.config.role}")

        result = await runtime.run_task(agent, task, dict(shared_context))
        await runtime.record(task, result)

        if result.status == "completed":
            shared_context[task.id] = result.output
