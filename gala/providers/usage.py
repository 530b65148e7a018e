"""In-process quota and usage tracking."""

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel, Field

from gala.schemas import QuotaCheck, UsageRecord

logger = logging.getLogger(__name__)

# USD per 1M tokens: (input, output)
PRICING: dict[str, dict[str, tuple[float, float]]] = {
    "openai": {
        "gpt-4": (30.0, 60.0),
        "gpt-4-turbo": (10.0, 30.0),
        "gpt-3.5-turbo": (0.5, 1.5),
    },
    "anthropic": {
        "claude-3-opus": (15.0, 75.0),
        "claude-3-sonnet": (3.0, 15.0),
        "claude-3-haiku": (0.25, 1.25),
    },
    "gemini": {
        "gemini-pro": (0.5, 1.5),
        "gemini-ultra": (10.0, 30.0),
    },
    "huggingface": {
        "default": (0.0, 0.0),
    },
}


def calculate_cost(record: UsageRecord) -> float:
    """Estimate the USD cost of a usage record from PRICING.

    Model names match by prefix so dated ids such as
    ``claude-3-haiku-20240307`` resolve to their family price.
    Unknown providers cost nothing.
    """
    provider_pricing = PRICING.get(record.provider.lower())
    if not provider_pricing:
        return 0.0

    model = record.model.lower()
    pricing = provider_pricing.get(model)
    if pricing is None:
        # Longest prefix first so "gpt-4-turbo" wins over "gpt-4"
        for name in sorted(provider_pricing, key=len, reverse=True):
            if model.startswith(name):
                pricing = provider_pricing[name]
                break
    if pricing is None:
        pricing = provider_pricing.get("default") or next(iter(provider_pricing.values()))

    input_rate, output_rate = pricing
    return (
        record.prompt_tokens * input_rate / 1_000_000
        + record.completion_tokens * output_rate / 1_000_000
    )


class QuotaLimits(BaseModel):
    """Limits for one user/provider pair; None means unlimited."""

    daily_limit: Optional[int] = None
    monthly_limit: Optional[int] = None
    daily_cost_limit: Optional[float] = None
    monthly_cost_limit: Optional[float] = None
    daily_token_limit: Optional[int] = None
    monthly_token_limit: Optional[int] = None


class UsageCounters(BaseModel):
    """Running usage for one user/provider pair."""

    day: str = ""
    month: str = ""
    daily_requests: int = 0
    monthly_requests: int = 0
    daily_cost: float = 0.0
    monthly_cost: float = 0.0
    daily_tokens: int = 0
    monthly_tokens: int = 0
    history: list[UsageRecord] = Field(default_factory=list)


class InMemoryUsageTracker:
    """Quota tracker holding limits and counters in memory.

    Implements the QuotaTracker protocol. Nothing is persisted; hosts
    that need durable quotas supply their own tracker.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._limits: dict[tuple[str, str], QuotaLimits] = {}
        self._usage: dict[tuple[str, str], UsageCounters] = {}

    def set_limits(self, user_id: str, provider: str, limits: QuotaLimits) -> None:
        self._limits[(user_id, provider)] = limits

    def get_usage(self, user_id: str, provider: str) -> UsageCounters:
        return self._rolled(user_id, provider)

    def _rolled(self, user_id: str, provider: str) -> UsageCounters:
        """Return counters for the pair, resetting stale day/month windows."""
        now = self._clock()
        day = now.strftime("%Y-%m-%d")
        month = now.strftime("%Y-%m")
        counters = self._usage.setdefault((user_id, provider), UsageCounters(day=day, month=month))

        if counters.month != month:
            counters.month = month
            counters.monthly_requests = 0
            counters.monthly_cost = 0.0
            counters.monthly_tokens = 0
        if counters.day != day:
            counters.day = day
            counters.daily_requests = 0
            counters.daily_cost = 0.0
            counters.daily_tokens = 0
        return counters

    async def check_quota(self, user_id: str, provider: str) -> QuotaCheck:
        limits = self._limits.get((user_id, provider))
        if limits is None:
            return QuotaCheck(allowed=True)

        usage = self._rolled(user_id, provider)
        checks = [
            (limits.daily_limit, usage.daily_requests, "Daily request limit reached ({})"),
            (limits.monthly_limit, usage.monthly_requests, "Monthly request limit reached ({})"),
            (limits.daily_cost_limit, usage.daily_cost, "Daily cost limit reached (${})"),
            (limits.monthly_cost_limit, usage.monthly_cost, "Monthly cost limit reached (${})"),
            (limits.daily_token_limit, usage.daily_tokens, "Daily token limit reached ({})"),
            (limits.monthly_token_limit, usage.monthly_tokens, "Monthly token limit reached ({})"),
        ]
        for limit, current, reason in checks:
            if limit is not None and current >= limit:
                return QuotaCheck(allowed=False, reason=reason.format(limit))

        return QuotaCheck(allowed=True)

    async def track_usage(self, user_id: str, record: UsageRecord) -> None:
        cost = calculate_cost(record)
        usage = self._rolled(user_id, record.provider)
        usage.daily_requests += 1
        usage.monthly_requests += 1
        usage.daily_cost += cost
        usage.monthly_cost += cost
        usage.daily_tokens += record.total_tokens
        usage.monthly_tokens += record.total_tokens
        usage.history.append(record)
        logger.debug(
            f"Tracked {record.total_tokens} tokens (${cost:.6f}) for user={user_id} "
            f"provider={record.provider} model={record.model}"
        )
