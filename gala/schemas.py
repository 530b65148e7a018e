"""Data structures shared across the engine."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from gala.config import ProviderType


class Message(BaseModel):
    """A single conversation turn."""

    role: Literal["system", "user", "assistant"]
    content: str


class ToolCall(BaseModel):
    """A tool invocation requested by a model."""

    id: str
    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class AgentResponse(BaseModel):
    """Normalized reply from any provider client."""

    content: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    finish_reason: Optional[str] = None
    usage: Optional["TokenUsage"] = None


class ChatOptions(BaseModel):
    """Per-call options passed to a provider client."""

    model_config = {"arbitrary_types_allowed": True}

    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    tools: list[Any] = Field(
        default_factory=list,
        description="ToolDefinition objects offered to the model; empty means no tools",
    )
    stream: bool = False


class TokenUsage(BaseModel):
    """Token counters reported by a provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ModelRequest(BaseModel):
    """A single completion request for the fallback chain."""

    messages: list[Message]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False


class ModelResponse(BaseModel):
    """Completion result annotated with where it was served from."""

    content: str
    model: str
    provider: str
    usage: Optional[TokenUsage] = None
    cost: Optional[float] = None
    fallback_used: bool = False


class ProviderConfig(BaseModel):
    """One entry in the provider fallback chain."""

    name: str
    priority: int = Field(description="Lower is tried first")
    type: ProviderType
    model: str
    endpoint: Optional[str] = None
    cost: float = Field(default=0.0, ge=0, description="USD per 1M tokens; 0 for free/local")
    tags: list[str] = Field(default_factory=list)


class QuotaCheck(BaseModel):
    """Answer from the quota tracker."""

    allowed: bool
    reason: Optional[str] = None


class UsageRecord(BaseModel):
    """Usage reported to the quota tracker after a call."""

    provider: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    agent_id: Optional[str] = None
    workflow_id: Optional[str] = None


class TaskIntent(BaseModel):
    """Classified intent of a natural-language request."""

    intent: str
    entities: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    required_tools: list[str] = Field(default_factory=list)
    suggested_workflow: Optional[str] = None


class WorkflowStep(BaseModel):
    """One step of an orchestration plan.

    ``input`` may embed ``{{step_id.path}}`` tokens that refer to results
    of earlier steps in the same plan.
    """

    id: str
    agent_id: str
    action: str
    input: Any = None
    requires_human_input: bool = False
    human_input_prompt: Optional[str] = None


class OrchestrationPlan(BaseModel):
    """Ordered, variable-wired steps derived from one request."""

    task_id: str
    intent: TaskIntent
    steps: list[WorkflowStep] = Field(default_factory=list)
    estimated_duration: int = Field(default=0, description="Seconds, heuristic")


AgentResponse.model_rebuild()
