"""HIERARCHICAL crew process."""

from gala.crew.errors import CrewConfigurationError
from gala.crew.processes.base import CrewRuntime
from gala.crew.processes.sequential import execute_sequential
from gala.crew.schemas import TaskConfig

PLANNING_TASK_ID = "planning"


async def execute_hierarchical(runtime: CrewRuntime) -> None:
    """Have the manager write a plan, then run the tasks sequentially.

    The plan is recorded as a ``planning`` result; it does not change
    which agent runs each task.
    """
    manager_id = runtime.config.manager_id
    if not manager_id:
        raise CrewConfigurationError("Hierarchical process requires a manager agent")
    manager = runtime.get_agent(manager_id)
    if manager is None:
        raise CrewConfigurationError(f"Manager agent not found: {manager_id}")

    task_list = "\n".join(f"- {task.description}" for task in runtime.config.tasks)
    planning_task = TaskConfig(
        id=PLANNING_TASK_ID,
        description=f"Plan how to execute these tasks:\n{task_list}",
        expected_output="A detailed execution plan with task assignments",
    )
    plan_result = await runtime.run_task(manager, planning_task)
    await runtime.record(planning_task, plan_result)

    await execute_sequential(runtime)
