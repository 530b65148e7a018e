"""Model provider clients and the fallback chain."""

from gala.providers.client import (
    AnthropicClient,
    DockerModelClient,
    OllamaClient,
    OpenAIClient,
    OpenAICompatibleClient,
    ProviderError,
    create_provider,
)
from gala.providers.cost_optimized import TASK_MODEL_PREFERENCES, CostOptimizedModelProvider
from gala.providers.fallback import (
    AllProvidersFailedError,
    FallbackClient,
    ModelProviderFallback,
    complete_with_retry,
    default_providers,
)
from gala.providers.usage import InMemoryUsageTracker, QuotaLimits

__all__ = [
    "AllProvidersFailedError",
    "AnthropicClient",
    "CostOptimizedModelProvider",
    "DockerModelClient",
    "FallbackClient",
    "InMemoryUsageTracker",
    "ModelProviderFallback",
    "OllamaClient",
    "OpenAIClient",
    "OpenAICompatibleClient",
    "ProviderError",
    "QuotaLimits",
    "TASK_MODEL_PREFERENCES",
    "complete_with_retry",
    "create_provider",
    "default_providers",
]
