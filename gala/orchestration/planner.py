"""Per-intent step templates and plan construction."""

import re
import time
import uuid
from typing import Any, Callable, Optional

from gala.schemas import OrchestrationPlan, TaskIntent, WorkflowStep

SECONDS_PER_STEP = 5

VARIABLE_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


class PlanningError(Exception):
    """A plan's steps are malformed (duplicate ids or bad references)."""

    pass


def _social_media_steps(context: dict[str, Any]) -> list[WorkflowStep]:
    files = list(context.get("files") or [])
    return [
        WorkflowStep(
            id="analyze_images",
            agent_id="vision_analyzer",
            action="analyze_images",
            input={"files": files},
        ),
        WorkflowStep(
            id="generate_caption",
            agent_id="content_creator",
            action="generate_caption",
            input={"analysis": "{{analyze_images.output}}"},
            requires_human_input=True,
            human_input_prompt="Review and edit the suggested caption:",
        ),
        WorkflowStep(
            id="generate_hashtags",
            agent_id="content_creator",
            action="generate_hashtags",
            input={"caption": "{{generate_caption.output}}"},
        ),
        WorkflowStep(
            id="post_to_buffer",
            agent_id="social_media_manager",
            action="post_to_buffer",
            input={
                "images": files,
                "caption": "{{generate_caption.output}}",
                "hashtags": "{{generate_hashtags.output}}",
                "profiles": "instagram",
                "schedule": "now",
            },
            requires_human_input=True,
            human_input_prompt=(
                "Ready to post via Buffer? This will publish to your connected Instagram account:"
            ),
        ),
        WorkflowStep(
            id="update_portfolio",
            agent_id="portfolio_manager",
            action="add_to_portfolio",
            input={"images": files, "description": "{{generate_caption.output}}"},
        ),
        WorkflowStep(
            id="create_email_campaign",
            agent_id="email_marketer",
            action="create_campaign",
            input={
                "subject": "Portfolio Updated - New Work Available",
                "content": "{{generate_caption.output}}",
                "images": files,
            },
            requires_human_input=True,
            human_input_prompt="Review email campaign before sending:",
        ),
    ]


def _email_campaign_steps(context: dict[str, Any]) -> list[WorkflowStep]:
    return [
        WorkflowStep(
            id="draft_email",
            agent_id="email_marketer",
            action="draft_email",
            input=dict(context),
        ),
        WorkflowStep(
            id="send_campaign",
            agent_id="email_marketer",
            action="send_campaign",
            input={"draft": "{{draft_email.output}}"},
            requires_human_input=True,
            human_input_prompt="Review and approve email campaign:",
        ),
    ]


def _portfolio_update_steps(context: dict[str, Any]) -> list[WorkflowStep]:
    return [
        WorkflowStep(
            id="prepare_content",
            agent_id="portfolio_manager",
            action="prepare_content",
            input=dict(context),
        ),
        WorkflowStep(
            id="upload_to_portfolio",
            agent_id="portfolio_manager",
            action="upload",
            input={"content": "{{prepare_content.output}}"},
        ),
    ]


STEP_TEMPLATES: dict[str, Callable[[dict[str, Any]], list[WorkflowStep]]] = {
    "social_media_post": _social_media_steps,
    "email_campaign": _email_campaign_steps,
    "portfolio_update": _portfolio_update_steps,
}


def generate_workflow_steps(
    intent: TaskIntent, context: Optional[dict[str, Any]] = None
) -> list[WorkflowStep]:
    """Expand an intent into its static step template; unknown intents yield []."""
    template = STEP_TEMPLATES.get(intent.intent)
    if template is None:
        return []
    return template(context or {})


def find_references(value: Any) -> list[str]:
    """All ``{{path}}`` tokens embedded anywhere in a step input."""
    if isinstance(value, str):
        return [match.strip() for match in VARIABLE_PATTERN.findall(value)]
    if isinstance(value, (list, tuple)):
        return [ref for item in value for ref in find_references(item)]
    if isinstance(value, dict):
        return [ref for item in value.values() for ref in find_references(item)]
    return []


def validate_plan(steps: list[WorkflowStep]) -> None:
    """Check step ids are unique and references only point backwards.

    A reference whose head is not a step id of this plan is allowed; it
    is left literal at execution time.

    Raises:
        PlanningError: On a duplicate id or a forward/self reference
    """
    all_ids = [step.id for step in steps]
    duplicates = sorted({step_id for step_id in all_ids if all_ids.count(step_id) > 1})
    if duplicates:
        raise PlanningError(f"Duplicate step ids: {', '.join(duplicates)}")

    known = set(all_ids)
    seen: set[str] = set()
    for step in steps:
        for ref in find_references(step.input):
            head = ref.split(".", 1)[0]
            if head in known and head not in seen:
                raise PlanningError(
                    f"Step {step.id!r} references {{{{{ref}}}}} before step {head!r} runs"
                )
        seen.add(step.id)


def generate_task_id() -> str:
    return f"task_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def estimate_duration(steps: list[WorkflowStep]) -> int:
    """Rough estimate in seconds."""
    return len(steps) * SECONDS_PER_STEP


def build_plan(intent: TaskIntent, context: Optional[dict[str, Any]] = None) -> OrchestrationPlan:
    """Create and validate the plan for an already analyzed intent."""
    steps = generate_workflow_steps(intent, context)
    validate_plan(steps)
    return OrchestrationPlan(
        task_id=generate_task_id(),
        intent=intent,
        steps=steps,
        estimated_duration=estimate_duration(steps),
    )


def format_plan_summary(plan: OrchestrationPlan) -> str:
    """Human-readable numbered plan ending with a yes/no prompt."""
    lines = [f"I understand you want to: {plan.intent.intent}", "", "Here's my plan:"]
    for index, step in enumerate(plan.steps, start=1):
        icon = "⏸️" if step.requires_human_input else "✓"
        lines.append(f"{index}. {icon} {step.action.replace('_', ' ')}")

    if any(step.requires_human_input for step in plan.steps):
        lines.append("")
        lines.append("Some steps will require your input.")

    lines.append("")
    lines.append(f"Estimated time: ~{plan.estimated_duration} seconds")
    lines.append("")
    lines.append('Should I proceed? (Reply "yes" to start)')
    return "\n".join(lines)
