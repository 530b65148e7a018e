"""Sequential plan execution with variable resolution and human-input pauses."""

import json
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from pydantic import BaseModel

from gala.orchestration.planner import VARIABLE_PATTERN
from gala.schemas import OrchestrationPlan, WorkflowStep

logger = logging.getLogger(__name__)

StepCompleteCallback = Callable[[WorkflowStep, Any], None]
HumanInputCallback = Callable[[WorkflowStep], Awaitable[Any]]

_MISSING = object()


class StepAgent(Protocol):
    async def execute(self, input: Any) -> str:
        ...


def lookup_path(path: str, results: dict[str, Any]) -> Any:
    """Walk a dotted path through results; returns _MISSING when absent."""
    value: Any = results
    for key in path.split("."):
        if isinstance(value, dict):
            value = value.get(key, _MISSING)
        elif isinstance(value, (list, tuple)) and key.isdigit():
            index = int(key)
            value = value[index] if index < len(value) else _MISSING
        elif isinstance(value, BaseModel):
            value = getattr(value, key, _MISSING)
        else:
            return _MISSING
        if value is _MISSING:
            return _MISSING
    return value


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def resolve_variables(value: Any, results: dict[str, Any]) -> Any:
    """Substitute ``{{path}}`` tokens in value from accumulated results.

    Strings, lists and dicts are resolved recursively. A string that is
    exactly one token resolves to the raw value, keeping its type; tokens
    embedded in longer text are substituted as text. Unresolvable tokens
    are left unchanged.
    """
    if isinstance(value, str):
        whole = VARIABLE_PATTERN.fullmatch(value)
        if whole:
            resolved = lookup_path(whole.group(1).strip(), results)
            return value if resolved is _MISSING else resolved

        def substitute(match) -> str:
            resolved = lookup_path(match.group(1).strip(), results)
            return match.group(0) if resolved is _MISSING else _as_text(resolved)

        return VARIABLE_PATTERN.sub(substitute, value)

    if isinstance(value, list):
        return [resolve_variables(item, results) for item in value]

    if isinstance(value, dict):
        return {key: resolve_variables(item, results) for key, item in value.items()}

    return value


def _step_payload(step: WorkflowStep, resolved_input: Any) -> dict[str, Any]:
    if isinstance(resolved_input, dict):
        return {"action": step.action, **resolved_input}
    if resolved_input is None:
        return {"action": step.action}
    return {"action": step.action, "input": resolved_input}


async def execute_orchestration_plan(
    plan: OrchestrationPlan,
    get_agent: Callable[[str], Optional[StepAgent]],
    on_step_complete: Optional[StepCompleteCallback] = None,
    on_human_input_required: Optional[HumanInputCallback] = None,
) -> dict[str, Any]:
    """Run plan steps strictly in order.

    Agent steps store ``{"output": text}``; human-input steps store the
    callback's return value unchanged; failures store ``{"error": message}``.
    Execution always continues to the next step, also when a callback
    raises: a failing human-input callback stores an error for its step.

    Args:
        plan: Plan to execute
        get_agent: Lookup for the agent named by each step
        on_step_complete: Called after every step with its result
        on_human_input_required: Awaited for steps that require approval

    Returns:
        Mapping with exactly one entry per step id
    """
    results: dict[str, Any] = {}

    for step in plan.steps:
        if step.requires_human_input and on_human_input_required is not None:
            logger.info(f"[{plan.task_id}] waiting for human input on {step.id}")
            try:
                result = await on_human_input_required(step)
            except Exception as e:
                logger.error(f"[{plan.task_id}] human input failed for step {step.id}: {e!r}")
                result = {"error": str(e) or type(e).__name__}
        else:
            result = await _run_agent_step(plan.task_id, step, results, get_agent)

        results[step.id] = result
        if on_step_complete is not None:
            try:
                on_step_complete(step, result)
            except Exception as e:
                logger.error(f"[{plan.task_id}] on_step_complete failed for step {step.id}: {e!r}")

    return results


async def _run_agent_step(
    task_id: str,
    step: WorkflowStep,
    results: dict[str, Any],
    get_agent: Callable[[str], Optional[StepAgent]],
) -> Any:
    agent = get_agent(step.agent_id)
    if agent is None:
        logger.warning(f"[{task_id}] agent not found: {step.agent_id}, skipping step {step.id}")
        return {"error": f"Agent not found: {step.agent_id}"}

    resolved_input = resolve_variables(step.input, results)
    try:
        output = await agent.execute(_step_payload(step, resolved_input))
    except Exception as e:
        logger.error(f"[{task_id}] error executing step {step.id}: {e}")
        return {"error": str(e) or type(e).__name__}

    logger.debug(f"[{task_id}] step {step.id} completed")
    return {"output": output}
