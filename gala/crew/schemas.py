"""Crew data structures: agents, tasks and their results."""

from datetime import datetime
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from gala.config import CrewProcess
from gala.tools.registry import ToolDefinition

TaskStatus = Literal["completed", "failed", "cancelled"]


class CrewAgentConfig(BaseModel):
    """A role-played crew member."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    role: str
    goal: str
    backstory: str
    verbose: bool = False
    allow_delegation: bool = False
    tools: list[ToolDefinition] = Field(
        default_factory=list,
        description="Listed in the system prompt; crew agents do not call tools",
    )
    model: str = "claude-3-5-sonnet-20241022"
    temperature: float = 0.7
    max_tokens: int = 4096


class TaskContext(BaseModel):
    dependencies: list[str] = Field(default_factory=list)
    shared_data: dict[str, Any] = Field(default_factory=dict)
    deadline: Optional[datetime] = None
    priority: Literal["low", "medium", "high", "critical"] = "medium"


class TaskResult(BaseModel):
    """Outcome of one task; immutable once produced."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    agent_id: str
    output: str = ""
    status: TaskStatus
    start_time: datetime
    end_time: datetime
    duration: float = Field(description="Seconds")
    tokens_used: Optional[int] = None
    error: Optional[str] = None


TaskCallback = Callable[[TaskResult], Union[None, Awaitable[None]]]


class TaskConfig(BaseModel):
    """A unit of crew work; runs on the first agent when ``agent`` is unset."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: str
    description: str
    expected_output: str
    agent: Optional[str] = None
    context: Optional[TaskContext] = None
    async_execution: bool = Field(default=False, alias="async")
    callback: Optional[TaskCallback] = None


class CrewConfig(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    name: str
    description: str = ""
    agents: list[CrewAgentConfig]
    tasks: list[TaskConfig]
    process: CrewProcess = CrewProcess.SEQUENTIAL
    verbose: bool = False
    manager_id: Optional[str] = None
    max_retries: int = Field(default=0, ge=0, description="Extra attempts for a failed task")
    timeout: Optional[float] = Field(default=None, gt=0, description="Seconds for the whole kickoff")


class CrewResult(BaseModel):
    crew_id: str
    success: bool
    results: list[TaskResult] = Field(default_factory=list)
    start_time: datetime
    end_time: datetime
    duration: float = Field(description="Seconds")
    error: Optional[str] = None
