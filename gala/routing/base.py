"""Types shared by task analysis and model routing."""

from typing import Optional

from pydantic import BaseModel, Field

from gala.config import AIProvider, TaskCategory


class ModelCapability(BaseModel):
    """Static description of what a model is good at."""

    provider: AIProvider
    model: str
    strengths: list[TaskCategory] = Field(default_factory=list)
    speed: int = Field(ge=1, le=10, description="10 is fastest")
    cost: int = Field(ge=0, le=10, description="10 is most expensive")
    quality: int = Field(ge=1, le=10, description="10 is highest quality")
    context_window: int
    supports_vision: bool = False
    supports_function_calling: bool = False
    local_only: bool = False


class TaskAnalysis(BaseModel):
    """Category and requirement profile of a task."""

    category: TaskCategory = TaskCategory.CONVERSATION
    complexity: int = Field(default=5, ge=1, le=10)
    requires_vision: bool = False
    requires_functions: bool = False
    context_size: int = Field(default=0, description="Estimated size of the prompt")
    priority_speed: bool = False
    priority_cost: bool = False
    priority_quality: bool = False


class RouterPreferences(BaseModel):
    """User-level routing constraints."""

    prefer_local: bool = False
    max_cost: int = 10
    min_quality: int = 5


class RouteAlternative(BaseModel):
    """A runner-up candidate and its score."""

    provider: AIProvider
    model: str
    score: float


class RouteDecision(BaseModel):
    """Chosen model plus why it was chosen."""

    provider: AIProvider
    model: str
    reasoning: str
    confidence: float
    alternatives: list[RouteAlternative] = Field(default_factory=list, max_length=3)


def format_category(category: Optional[TaskCategory]) -> str:
    """Human-readable category name, e.g. "code generation"."""
    if category is None:
        return "general tasks"
    return category.value.replace("_", " ")
