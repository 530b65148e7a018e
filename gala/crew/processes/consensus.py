"""CONSENSUS crew process."""

from gala.crew.processes.base import CrewRuntime, gather_settled
from gala.crew.schemas import TaskResult


def select_best_result(results: list[TaskResult]) -> TaskResult:
    """Longest completed output; the earliest wins ties.

    Falls back to the first result when none completed. Output length is
    a heuristic, not a judgment of quality.
    """
    completed = [r for r in results if r.status == "completed"]
    if not completed:
        return results[0]

    best = completed[0]
    for current in completed[1:]:
        if len(current.output) > len(best.output):
            best = current
    return best


async def execute_consensus(runtime: CrewRuntime) -> None:
    """Every agent attempts each task; the selected result is recorded."""
    agents = runtime.all_agents()
    for task in runtime.config.tasks:
        results = await gather_settled(*(runtime.run_task(agent, task) for agent in agents))
        await runtime.record(task, select_best_result(list(results)))
