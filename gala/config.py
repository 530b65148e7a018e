"""Engine configuration, enums and collaborator protocols."""

import os
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Protocol

from pydantic import BaseModel, Field, model_validator

if TYPE_CHECKING:
    from gala.schemas import AgentResponse, ChatOptions, Message, QuotaCheck, UsageRecord


DEFAULT_OLLAMA_ENDPOINT = "http://localhost:11434"


class AIProvider(str, Enum):
    """Backends an agent client can be bound to."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    OLLAMA = "ollama"
    DOCKER = "docker"


class ProviderType(str, Enum):
    """Transport family of an entry in the fallback chain."""

    API = "api"
    LOCAL = "local"
    HUGGINGFACE = "huggingface"


class TaskCategory(str, Enum):
    """Task categories used for model routing."""

    CODE_GENERATION = "code_generation"
    CODE_REVIEW = "code_review"
    DATA_ANALYSIS = "data_analysis"
    CREATIVE_WRITING = "creative_writing"
    RESEARCH = "research"
    REASONING = "reasoning"
    MATH = "math"
    VISION = "vision"
    CONVERSATION = "conversation"
    SUMMARIZATION = "summarization"
    TRANSLATION = "translation"
    CLASSIFICATION = "classification"
    EXTRACTION = "extraction"


class CrewProcess(str, Enum):
    """How a crew's agents collaborate on its tasks."""

    SEQUENTIAL = "sequential"
    HIERARCHICAL = "hierarchical"
    PARALLEL = "parallel"
    CONSENSUS = "consensus"


class ProviderClient(Protocol):
    """Protocol every model backend client implements.

    The core treats hosted APIs, local inference servers and free
    inference endpoints uniformly through this single call.
    """

    async def chat(
        self,
        messages: list["Message"],
        options: Optional["ChatOptions"] = None,
    ) -> "AgentResponse":
        """Run one completion over the conversation.

        Args:
            messages: Full conversation, system turns included
            options: Model, sampling and tool options

        Returns:
            AgentResponse with text content and any requested tool calls
        """
        ...


class QuotaTracker(Protocol):
    """Protocol for the host's per-user, per-provider quota store."""

    async def check_quota(self, user_id: str, provider: str) -> "QuotaCheck":
        """Return whether user_id may call provider right now."""
        ...

    async def track_usage(self, user_id: str, record: "UsageRecord") -> None:
        """Record token usage after a successful call."""
        ...


class EngineConfig(BaseModel):
    """Configuration for the orchestration engine.

    API keys are optional: a deployment running only local models needs
    none. Missing values are resolved from the environment.
    """

    model_config = {"arbitrary_types_allowed": True}

    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    ollama_endpoint: str = Field(
        default="",
        description="Base URL of the Ollama server; OLLAMA_ENDPOINT or localhost when empty",
    )
    default_provider: AIProvider = AIProvider.ANTHROPIC
    router_model: str = "claude-3-5-sonnet-20241022"
    docker_providers: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Docker-hosted OpenAI-compatible models: {container_name, base_url, model}",
    )
    request_timeout: float = 60.0

    @model_validator(mode="after")
    def resolve_from_environment(self) -> "EngineConfig":
        """Fill unset keys and endpoints from environment variables."""
        env_keys = {
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "openai_api_key": "OPENAI_API_KEY",
            "huggingface_api_key": "HUGGINGFACE_API_KEY",
        }
        for field_name, env_name in env_keys.items():
            current = getattr(self, field_name)
            if current and current.strip():
                continue
            env_value = os.environ.get(env_name)
            if env_value and env_value.strip():
                object.__setattr__(self, field_name, env_value)

        if not self.ollama_endpoint.strip():
            object.__setattr__(
                self,
                "ollama_endpoint",
                os.environ.get("OLLAMA_ENDPOINT") or DEFAULT_OLLAMA_ENDPOINT,
            )
        return self

    @model_validator(mode="after")
    def validate_docker_providers(self) -> "EngineConfig":
        """Validate that docker entries name a container."""
        for entry in self.docker_providers:
            if not entry.get("container_name"):
                raise ValueError("docker_providers entries require container_name")
        return self

    def available_providers(self) -> list[AIProvider]:
        """Providers that can be used with the current credentials."""
        providers = [AIProvider.OLLAMA]
        if self.anthropic_api_key:
            providers.append(AIProvider.ANTHROPIC)
        if self.openai_api_key:
            providers.append(AIProvider.OPENAI)
        if self.docker_providers:
            providers.append(AIProvider.DOCKER)
        return providers
