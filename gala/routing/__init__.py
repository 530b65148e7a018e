"""Task analysis and model routing."""

from gala.routing.analysis import analyze_task
from gala.routing.base import (
    ModelCapability,
    RouteAlternative,
    RouteDecision,
    RouterPreferences,
    TaskAnalysis,
)
from gala.routing.defaults import DEFAULT_MODEL_REGISTRY
from gala.routing.intelligent import IntelligentRouter

__all__ = [
    "IntelligentRouter",
    "ModelCapability",
    "RouteAlternative",
    "RouteDecision",
    "RouterPreferences",
    "TaskAnalysis",
    "analyze_task",
    "DEFAULT_MODEL_REGISTRY",
]
