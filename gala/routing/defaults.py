"""Default model capability registry for IntelligentRouter."""

from gala.config import AIProvider, TaskCategory
from gala.routing.base import ModelCapability

DEFAULT_MODEL_REGISTRY: list[ModelCapability] = [
    ModelCapability(
        provider=AIProvider.ANTHROPIC,
        model="claude-3-5-sonnet-20241022",
        strengths=[
            TaskCategory.CODE_GENERATION,
            TaskCategory.CODE_REVIEW,
            TaskCategory.REASONING,
            TaskCategory.RESEARCH,
            TaskCategory.CREATIVE_WRITING,
        ],
        speed=7,
        cost=8,
        quality=10,
        context_window=200_000,
        supports_vision=True,
        supports_function_calling=True,
    ),
    ModelCapability(
        provider=AIProvider.ANTHROPIC,
        model="claude-3-haiku-20240307",
        strengths=[
            TaskCategory.CLASSIFICATION,
            TaskCategory.EXTRACTION,
            TaskCategory.SUMMARIZATION,
            TaskCategory.CONVERSATION,
        ],
        speed=10,
        cost=2,
        quality=7,
        context_window=200_000,
        supports_vision=True,
        supports_function_calling=True,
    ),
    ModelCapability(
        provider=AIProvider.OPENAI,
        model="gpt-4-turbo",
        strengths=[
            TaskCategory.REASONING,
            TaskCategory.MATH,
            TaskCategory.DATA_ANALYSIS,
            TaskCategory.CODE_GENERATION,
        ],
        speed=6,
        cost=9,
        quality=9,
        context_window=128_000,
        supports_vision=True,
        supports_function_calling=True,
    ),
    ModelCapability(
        provider=AIProvider.OPENAI,
        model="gpt-3.5-turbo",
        strengths=[
            TaskCategory.CONVERSATION,
            TaskCategory.SUMMARIZATION,
            TaskCategory.TRANSLATION,
        ],
        speed=9,
        cost=1,
        quality=6,
        context_window=16_000,
        supports_function_calling=True,
    ),
    ModelCapability(
        provider=AIProvider.OLLAMA,
        model="llama2",
        strengths=[TaskCategory.CONVERSATION, TaskCategory.SUMMARIZATION],
        speed=5,
        cost=0,
        quality=5,
        context_window=4096,
        local_only=True,
    ),
    ModelCapability(
        provider=AIProvider.OLLAMA,
        model="codellama",
        strengths=[TaskCategory.CODE_GENERATION, TaskCategory.CODE_REVIEW],
        speed=5,
        cost=0,
        quality=7,
        context_window=4096,
        local_only=True,
    ),
]
