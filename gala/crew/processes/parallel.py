"""PARALLEL crew process."""

from gala.crew.processes.base import CrewRuntime, gather_settled
from gala.crew.schemas import TaskConfig, TaskResult


async def execute_parallel(runtime: CrewRuntime) -> None:
    """Launch every task at once; no task sees another's output."""

    async def run(task: TaskConfig) -> TaskResult:
        result = await runtime.run_task(runtime.agent_for_task(task), task)
        await runtime.record(task, result)
        return result

    await gather_settled(*(run(task) for task in runtime.config.tasks))
