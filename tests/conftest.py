"""Shared fakes for provider clients, transports and quota tracking."""

from typing import Callable, Optional, Union

import pytest

from gala.schemas import (
    AgentResponse,
    ChatOptions,
    Message,
    ModelRequest,
    ModelResponse,
    ProviderConfig,
    QuotaCheck,
    TokenUsage,
    UsageRecord,
)

Reply = Union[AgentResponse, Exception, Callable[[list[Message], Optional[ChatOptions]], AgentResponse]]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class ScriptedClient:
    """ProviderClient returning queued replies; the last reply repeats."""

    def __init__(self, *replies: Reply):
        self.replies = list(replies) or [AgentResponse(content="ok")]
        self.calls: list[tuple[list[Message], Optional[ChatOptions]]] = []

    async def chat(self, messages, options=None) -> AgentResponse:
        self.calls.append((list(messages), options))
        index = min(len(self.calls) - 1, len(self.replies) - 1)
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(messages, options)
        return reply


class FakeQuotaTracker:
    """QuotaTracker denying the listed providers."""

    def __init__(self, denied: Optional[dict[str, str]] = None):
        self.denied = denied or {}
        self.checked: list[str] = []
        self.tracked: list[UsageRecord] = []

    async def check_quota(self, user_id: str, provider: str) -> QuotaCheck:
        self.checked.append(provider)
        if provider in self.denied:
            return QuotaCheck(allowed=False, reason=self.denied[provider])
        return QuotaCheck(allowed=True)

    async def track_usage(self, user_id: str, record: UsageRecord) -> None:
        self.tracked.append(record)


class RecordingTransport:
    """Transport that fails for the listed models and answers otherwise."""

    def __init__(self, failing: Optional[dict[str, Exception]] = None, usage: Optional[TokenUsage] = None):
        self.failing = failing or {}
        self.usage = usage
        self.called: list[str] = []

    async def __call__(self, provider: ProviderConfig, request: ModelRequest) -> ModelResponse:
        self.called.append(provider.model)
        if provider.model in self.failing:
            raise self.failing[provider.model]
        return ModelResponse(
            content=f"answer from {provider.model}",
            model=provider.model,
            provider=provider.name,
            usage=self.usage,
        )
