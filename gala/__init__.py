"""Gala: multi-agent orchestration over a quota-aware provider fallback chain.

Public exports:
- Gala: Plan and run natural-language requests with the preset agents
- AIOrchestrator: Intent analysis, planning and plan execution
- EngineConfig: Configuration for the engine
- Crew, CrewBuilder: Explicitly authored multi-agent crews
- ModelProviderFallback: Priority-ordered provider chain
- IntelligentRouter: Advisory model routing
- ToolRegistry, ToolDefinition: Schema-validated tools
"""

from gala.config import EngineConfig
from gala.crew import Crew, CrewBuilder
from gala.engine import Gala
from gala.orchestration import AIOrchestrator
from gala.providers import ModelProviderFallback
from gala.routing import IntelligentRouter
from gala.tools import ToolDefinition, ToolRegistry

__all__ = [
    "AIOrchestrator",
    "Crew",
    "CrewBuilder",
    "EngineConfig",
    "Gala",
    "IntelligentRouter",
    "ModelProviderFallback",
    "ToolDefinition",
    "ToolRegistry",
]
