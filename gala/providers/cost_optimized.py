"""Local-first provider chain that reserves paid APIs for last."""

import logging
from typing import Optional

from gala.config import EngineConfig, ProviderType
from gala.providers.client import REQUEST_TIMEOUT, ProviderError, _HTTPClient
from gala.providers.fallback import ModelProviderFallback
from gala.providers.transports import HUGGINGFACE_INFERENCE_URL
from gala.schemas import ProviderConfig

logger = logging.getLogger(__name__)

EMBEDDING_MODEL = "nomic-embed-text"

# Task type -> preferred local models, best first
TASK_MODEL_PREFERENCES: dict[str, list[str]] = {
    "code": ["qwen2.5-coder", "codellama", "llama3.1"],
    "chat": ["llama3.1", "gemma3", "mistral-small3.1"],
    "reasoning": ["deepseek-r1", "gpt-oss:20b", "llama3.1"],
    "complex": ["gpt-oss:20b", "mistral-small3.1", "llama3.1"],
    "fast": ["gemma3", "llama3.1"],
    "vision": ["llava"],
    "multilingual": ["qwen3", "llama3.1"],
}
DEFAULT_TASK_MODELS = ["llama3.1"]

# (model, tags) for the local tier, in priority order
_LOCAL_MODELS: list[tuple[str, list[str]]] = [
    ("qwen2.5-coder", ["code", "programming", "debugging"]),
    ("llama3.1", ["general", "chat", "writing"]),
    ("codellama", ["code", "programming"]),
    ("deepseek-r1", ["reasoning", "analysis", "problem-solving"]),
    ("gpt-oss:20b", ["complex", "large-context"]),
    ("gemma3", ["fast", "lightweight", "chat"]),
    ("qwen3", ["multilingual", "chinese"]),
    ("mistral-small3.1", ["large", "complex", "general"]),
    ("llava", ["vision", "image", "multimodal"]),
]


class CostOptimizedModelProvider(ModelProviderFallback):
    """Fallback chain ordered local models, then Hugging Face, then paid APIs."""

    _embedder: Optional[_HTTPClient] = None

    def _initialize_providers(self) -> list[ProviderConfig]:
        endpoint = self._ollama_endpoint()
        providers = [
            ProviderConfig(
                name="local",
                priority=index,
                type=ProviderType.LOCAL,
                model=model,
                endpoint=endpoint,
                tags=tags,
            )
            for index, (model, tags) in enumerate(_LOCAL_MODELS, start=1)
        ]
        next_priority = len(providers) + 1
        providers.append(
            ProviderConfig(
                name="huggingface",
                priority=next_priority,
                type=ProviderType.HUGGINGFACE,
                model="mistralai/Mistral-7B-Instruct-v0.2",
                endpoint=HUGGINGFACE_INFERENCE_URL,
            )
        )
        paid = [
            ("anthropic", "claude-3-haiku-20240307", 0.25, ["fast", "cheap", "premium"]),
            ("openai", "gpt-3.5-turbo", 0.5, ["affordable", "general"]),
            ("anthropic", "claude-3-sonnet-20240229", 3, ["premium", "quality"]),
            ("openai", "gpt-4-turbo", 10, ["premium", "emergency"]),
        ]
        for offset, (name, model, cost, tags) in enumerate(paid, start=1):
            providers.append(
                ProviderConfig(
                    name=name,
                    priority=next_priority + offset,
                    type=ProviderType.API,
                    model=model,
                    cost=cost,
                    tags=tags,
                )
            )
        return providers

    def _ollama_endpoint(self) -> str:
        return (self._config or EngineConfig()).ollama_endpoint

    async def select_model_for_task(self, user_id: str, task_type: str) -> ProviderConfig:
        """Pick the preferred local model for task_type.

        Falls back to get_recommended_provider when none of the preferred
        models is configured as a local provider.
        """
        preferred = TASK_MODEL_PREFERENCES.get(task_type, DEFAULT_TASK_MODELS)
        for model_name in preferred:
            for provider in self.providers:
                if provider.model == model_name and provider.type == ProviderType.LOCAL:
                    return provider

        logger.info(f"No local model configured for task type {task_type!r}; using recommendation")
        return await self.get_recommended_provider(user_id)

    async def get_embedding(self, text: str) -> list[float]:
        """Embed text with the local embedding model.

        Raises:
            ProviderError: If the embedding request fails
        """
        if self._embedder is None:
            self._embedder = _HTTPClient(REQUEST_TIMEOUT)
        endpoint = self._ollama_endpoint().rstrip("/")
        data = await self._embedder._post(
            f"{endpoint}/api/embeddings",
            {"model": EMBEDDING_MODEL, "prompt": text},
        )

        try:
            return data["embedding"]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected embedding response shape: {e}") from e
