"""Fluent construction of crews."""

from typing import Optional

from gala.config import CrewProcess, ProviderClient
from gala.crew.crew import Crew
from gala.crew.errors import CrewConfigurationError
from gala.crew.schemas import CrewAgentConfig, CrewConfig, TaskConfig


class CrewBuilder:
    """Collects crew settings; build() validates and returns a Crew."""

    def __init__(self):
        self._id: Optional[str] = None
        self._name: Optional[str] = None
        self._description = ""
        self._agents: list[CrewAgentConfig] = []
        self._tasks: list[TaskConfig] = []
        self._process = CrewProcess.SEQUENTIAL
        self._manager_id: Optional[str] = None
        self._verbose = False
        self._max_retries = 0
        self._timeout: Optional[float] = None

    def crew(self, id: str, name: str, description: str = "") -> "CrewBuilder":
        self._id = id
        self._name = name
        self._description = description
        return self

    def agent(self, config: CrewAgentConfig) -> "CrewBuilder":
        self._agents.append(config)
        return self

    def task(self, config: TaskConfig) -> "CrewBuilder":
        self._tasks.append(config)
        return self

    def process(self, process: CrewProcess) -> "CrewBuilder":
        self._process = process
        return self

    def manager(self, agent_id: str) -> "CrewBuilder":
        self._manager_id = agent_id
        return self

    def verbose(self, verbose: bool = True) -> "CrewBuilder":
        self._verbose = verbose
        return self

    def max_retries(self, retries: int) -> "CrewBuilder":
        self._max_retries = retries
        return self

    def timeout(self, seconds: float) -> "CrewBuilder":
        self._timeout = seconds
        return self

    def build(self, client: ProviderClient) -> Crew:
        """Validate and create the crew.

        Raises:
            CrewConfigurationError: If the crew definition is incomplete or inconsistent
        """
        if not self._id or not self._name:
            raise CrewConfigurationError("Crew must have id and name")

        config = CrewConfig(
            id=self._id,
            name=self._name,
            description=self._description,
            agents=list(self._agents),
            tasks=list(self._tasks),
            process=self._process,
            verbose=self._verbose,
            manager_id=self._manager_id,
            max_retries=self._max_retries,
            timeout=self._timeout,
        )
        return Crew(config, client)


def create_example_crew(client: ProviderClient) -> Crew:
    """Two-agent research-then-write crew."""
    return (
        CrewBuilder()
        .crew("research-crew", "Research Team", "Comprehensive research and analysis crew")
        .agent(
            CrewAgentConfig(
                id="researcher",
                role="Senior Research Analyst",
                goal="Uncover cutting-edge developments and insights",
                backstory="You are an expert analyst with years of experience in research",
                verbose=True,
            )
        )
        .agent(
            CrewAgentConfig(
                id="writer",
                role="Tech Content Strategist",
                goal="Craft compelling and technically accurate content",
                backstory="You are a seasoned writer specialized in technology and AI",
                verbose=True,
            )
        )
        .task(
            TaskConfig(
                id="research",
                description="Research the latest trends in AI and machine learning",
                expected_output="A comprehensive report on AI trends with key insights",
                agent="researcher",
            )
        )
        .task(
            TaskConfig(
                id="write",
                description="Write an engaging blog post based on the research",
                expected_output="A well-written 1000-word blog post",
                agent="writer",
            )
        )
        .process(CrewProcess.SEQUENTIAL)
        .verbose(True)
        .build(client)
    )
