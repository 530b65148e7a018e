"""Multi-agent crews with sequential, parallel, hierarchical and consensus processes."""

from gala.crew.agent import CrewAgent
from gala.crew.builder import CrewBuilder, create_example_crew
from gala.crew.crew import Crew, validate_crew_config
from gala.crew.errors import CrewConfigurationError
from gala.crew.processes import select_best_result
from gala.crew.schemas import (
    CrewAgentConfig,
    CrewConfig,
    CrewResult,
    TaskConfig,
    TaskContext,
    TaskResult,
)

__all__ = [
    "Crew",
    "CrewAgent",
    "CrewAgentConfig",
    "CrewBuilder",
    "CrewConfig",
    "CrewConfigurationError",
    "CrewResult",
    "TaskConfig",
    "TaskContext",
    "TaskResult",
    "create_example_crew",
    "select_best_result",
    "validate_crew_config",
]
