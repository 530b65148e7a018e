"""Quota-aware, priority-ordered model provider fallback chain."""

import asyncio
import logging
from typing import Optional

from gala.config import EngineConfig, ProviderType, QuotaTracker
from gala.providers.transports import HUGGINGFACE_INFERENCE_URL, Transport, default_transports
from gala.providers.usage import InMemoryUsageTracker
from gala.schemas import (
    AgentResponse,
    ChatOptions,
    Message,
    ModelRequest,
    ModelResponse,
    ProviderConfig,
    UsageRecord,
)

logger = logging.getLogger(__name__)


def default_providers(config: Optional[EngineConfig] = None) -> list[ProviderConfig]:
    """Premium APIs first, then cheaper APIs, free Hugging Face, and local Ollama."""
    ollama = (config or EngineConfig()).ollama_endpoint
    return [
        ProviderConfig(name="anthropic", priority=1, type=ProviderType.API,
                       model="claude-3-sonnet-20240229", cost=3),
        ProviderConfig(name="openai", priority=2, type=ProviderType.API,
                       model="gpt-4-turbo", cost=10),
        ProviderConfig(name="anthropic", priority=3, type=ProviderType.API,
                       model="claude-3-haiku-20240307", cost=0.25),
        ProviderConfig(name="openai", priority=4, type=ProviderType.API,
                       model="gpt-3.5-turbo", cost=0.5),
        ProviderConfig(name="gemini", priority=5, type=ProviderType.API,
                       model="gemini-pro", cost=0.5),
        ProviderConfig(name="huggingface", priority=6, type=ProviderType.HUGGINGFACE,
                       model="mistralai/Mistral-7B-Instruct-v0.2", endpoint=HUGGINGFACE_INFERENCE_URL),
        ProviderConfig(name="huggingface", priority=7, type=ProviderType.HUGGINGFACE,
                       model="meta-llama/Llama-2-7b-chat-hf", endpoint=HUGGINGFACE_INFERENCE_URL),
        ProviderConfig(name="huggingface", priority=8, type=ProviderType.HUGGINGFACE,
                       model="google/flan-t5-xxl", endpoint=HUGGINGFACE_INFERENCE_URL),
        ProviderConfig(name="local", priority=9, type=ProviderType.LOCAL,
                       model="ollama/llama2", endpoint=ollama),
    ]


class AllProvidersFailedError(Exception):
    """Every provider in the chain was quota-blocked or failed."""

    def __init__(self, errors: list[tuple[str, str]]):
        self.errors = errors
        details = "\n".join(f"- {provider}: {error}" for provider, error in errors)
        super().__init__(f"All model providers failed:\n{details}")


class ModelProviderFallback:
    """Try providers in ascending priority until one answers.

    API providers pass a quota check first; local and Hugging Face
    providers are always attempted. Each provider is tried exactly once
    per call and never concurrently with another.
    """

    def __init__(
        self,
        providers: Optional[list[ProviderConfig]] = None,
        usage_tracker: Optional[QuotaTracker] = None,
        transports: Optional[dict[ProviderType, Transport]] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._config = config
        chain = providers if providers is not None else self._initialize_providers()
        # Stable sort keeps list order among equal priorities
        self.providers: list[ProviderConfig] = sorted(chain, key=lambda p: p.priority)
        self.usage_tracker: QuotaTracker = usage_tracker or InMemoryUsageTracker()
        self._transports = transports if transports is not None else default_transports(config)

    def _initialize_providers(self) -> list[ProviderConfig]:
        return default_providers(self._config)

    @property
    def min_priority(self) -> Optional[int]:
        return self.providers[0].priority if self.providers else None

    async def complete(self, user_id: str, request: ModelRequest) -> ModelResponse:
        """Complete a chat request with automatic fallback.

        Args:
            user_id: User whose quota gates API providers
            request: Messages and sampling options

        Returns:
            ModelResponse from the first provider that succeeded

        Raises:
            AllProvidersFailedError: If every provider was skipped or failed
        """
        errors: list[tuple[str, str]] = []

        for provider in self.providers:
            label = f"{provider.name} ({provider.model})"
            try:
                if provider.type == ProviderType.API:
                    quota = await self.usage_tracker.check_quota(user_id, provider.name)
                    if not quota.allowed:
                        reason = quota.reason or "Quota exceeded"
                        logger.warning(f"{label} quota exceeded: {reason}")
                        errors.append((label, reason))
                        continue

                transport = self._transports.get(provider.type)
                if transport is None:
                    raise ValueError(f"No transport for provider type: {provider.type.value}")

                response = await transport(provider, request)

                if response.usage is not None:
                    await self.usage_tracker.track_usage(
                        user_id,
                        UsageRecord(
                            provider=provider.name,
                            model=provider.model,
                            prompt_tokens=response.usage.prompt_tokens,
                            completion_tokens=response.usage.completion_tokens,
                            total_tokens=response.usage.total_tokens,
                        ),
                    )
                    response.cost = self._cost_for(provider, response.usage.total_tokens)
                elif response.cost is None:
                    response.cost = 0.0

                response.fallback_used = provider.priority != self.min_priority
                if response.fallback_used:
                    logger.info(f"Served by fallback provider {label}")
                return response

            except Exception as e:
                logger.error(f"{label} failed: {e}")
                errors.append((label, str(e) or type(e).__name__))

        raise AllProvidersFailedError(errors)

    @staticmethod
    def _cost_for(provider: ProviderConfig, tokens: int) -> float:
        return (tokens / 1_000_000) * provider.cost

    def estimate_cost(self, provider_name: str, tokens: int) -> float:
        """Estimated USD cost of tokens on the first provider named provider_name."""
        provider = next((p for p in self.providers if p.name == provider_name), None)
        if provider is None:
            return 0.0
        return self._cost_for(provider, tokens)

    async def get_recommended_provider(self, user_id: str) -> ProviderConfig:
        """First provider in priority order that is usable right now.

        Raises:
            AllProvidersFailedError: If the chain has no providers
        """
        if not self.providers:
            raise AllProvidersFailedError([])
        for provider in self.providers:
            if provider.type != ProviderType.API:
                return provider
            quota = await self.usage_tracker.check_quota(user_id, provider.name)
            if quota.allowed:
                return provider

        # Last resort
        return self.providers[-1]


class FallbackClient:
    """Expose a fallback chain through the ProviderClient contract.

    Tool calling is not available through the chain, so agents bound to
    it always receive plain text answers.
    """

    def __init__(self, chain: ModelProviderFallback, user_id: str):
        self._chain = chain
        self._user_id = user_id

    async def chat(
        self,
        messages: list[Message],
        options: Optional[ChatOptions] = None,
    ) -> AgentResponse:
        options = options or ChatOptions()
        response = await self._chain.complete(
            self._user_id,
            ModelRequest(
                messages=messages,
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                stream=options.stream,
            ),
        )
        return AgentResponse(content=response.content, finish_reason="stop", usage=response.usage)


async def complete_with_retry(
    chain: ModelProviderFallback,
    user_id: str,
    request: ModelRequest,
    attempts: int = 3,
    base_delay: float = 1.0,
) -> ModelResponse:
    """Re-run the whole chain with exponential backoff.

    Each traversal still tries every provider exactly once.

    Raises:
        AllProvidersFailedError: From the last attempt if all attempts fail
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: Optional[AllProvidersFailedError] = None
    for attempt in range(attempts):
        try:
            return await chain.complete(user_id, request)
        except AllProvidersFailedError as e:
            last_error = e
            if attempt < attempts - 1:
                delay = base_delay * (2**attempt)
                logger.warning(
                    f"Provider chain exhausted (attempt {attempt + 1}/{attempts}); "
                    f"retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

    raise last_error or AllProvidersFailedError([])
