"""Intent analysis, planning and sequential plan execution."""

from gala.orchestration.audit import CapabilityAuditor, CapabilityAuditResult, CapabilityGap
from gala.orchestration.executor import execute_orchestration_plan, resolve_variables
from gala.orchestration.intent import (
    IntentParseError,
    extract_json_object,
    fallback_intent_detection,
    parse_intent_response,
)
from gala.orchestration.orchestrator import AIOrchestrator
from gala.orchestration.planner import (
    PlanningError,
    build_plan,
    format_plan_summary,
    generate_workflow_steps,
    validate_plan,
)

__all__ = [
    "AIOrchestrator",
    "CapabilityAuditResult",
    "CapabilityAuditor",
    "CapabilityGap",
    "IntentParseError",
    "PlanningError",
    "build_plan",
    "execute_orchestration_plan",
    "extract_json_object",
    "fallback_intent_detection",
    "format_plan_summary",
    "generate_workflow_steps",
    "parse_intent_response",
    "resolve_variables",
    "validate_plan",
]
