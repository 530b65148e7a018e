"""Tests for the provider fallback chain, quota tracking and cost helpers."""

from datetime import datetime

import pytest

from conftest import FakeQuotaTracker, RecordingTransport
from gala.config import AIProvider, EngineConfig, ProviderType
from gala.providers import (
    AllProvidersFailedError,
    CostOptimizedModelProvider,
    FallbackClient,
    InMemoryUsageTracker,
    ModelProviderFallback,
    OllamaClient,
    ProviderError,
    QuotaLimits,
    complete_with_retry,
    create_provider,
    default_providers,
)
from gala.providers.usage import calculate_cost
from gala.schemas import Message, ModelRequest, ProviderConfig, TokenUsage, UsageRecord

REQUEST = ModelRequest(messages=[Message(role="user", content="hello")])


def _chain_providers() -> list[ProviderConfig]:
    return [
        ProviderConfig(name="anthropic", priority=1, type=ProviderType.API, model="claude", cost=3),
        ProviderConfig(name="openai", priority=2, type=ProviderType.API, model="gpt", cost=10),
        ProviderConfig(name="local", priority=3, type=ProviderType.LOCAL, model="llama"),
    ]


def _chain(transport: RecordingTransport, tracker=None, providers=None) -> ModelProviderFallback:
    return ModelProviderFallback(
        providers=providers or _chain_providers(),
        usage_tracker=tracker or FakeQuotaTracker(),
        transports={t: transport for t in ProviderType},
    )


class TestFallbackChain:
    """Tests for ModelProviderFallback.complete()."""

    @pytest.mark.anyio
    async def test_first_provider_answers(self):
        transport = RecordingTransport()
        response = await _chain(transport).complete("u1", REQUEST)

        assert response.content == "answer from claude"
        assert response.fallback_used is False
        assert transport.called == ["claude"]

    @pytest.mark.anyio
    async def test_quota_denied_provider_is_never_called(self):
        transport = RecordingTransport()
        tracker = FakeQuotaTracker(denied={"anthropic": "Daily request limit reached (10)"})

        response = await _chain(transport, tracker).complete("u1", REQUEST)

        assert "claude" not in transport.called
        assert transport.called == ["gpt"]
        assert response.model == "gpt"
        assert response.fallback_used is True

    @pytest.mark.anyio
    async def test_local_providers_skip_quota_check(self):
        transport = RecordingTransport()
        tracker = FakeQuotaTracker(denied={"anthropic": "blocked", "openai": "blocked"})

        response = await _chain(transport, tracker).complete("u1", REQUEST)

        assert response.model == "llama"
        assert "local" not in tracker.checked

    @pytest.mark.anyio
    async def test_errors_advance_without_retry(self):
        transport = RecordingTransport(failing={"claude": ProviderError("HTTP 500")})

        response = await _chain(transport).complete("u1", REQUEST)

        assert transport.called == ["claude", "gpt"]
        assert response.model == "gpt"

    @pytest.mark.anyio
    async def test_exhausted_chain_names_every_provider(self):
        transport = RecordingTransport(
            failing={"gpt": ProviderError("HTTP 401"), "llama": ProviderError("connection refused")}
        )
        tracker = FakeQuotaTracker(denied={"anthropic": "Monthly cost limit reached ($5)"})

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await _chain(transport, tracker).complete("u1", REQUEST)

        message = str(exc_info.value)
        assert "anthropic (claude): Monthly cost limit reached ($5)" in message
        assert "openai (gpt): HTTP 401" in message
        assert "local (llama): connection refused" in message
        assert len(exc_info.value.errors) == 3

    @pytest.mark.anyio
    async def test_usage_is_tracked_and_costed(self):
        usage = TokenUsage(prompt_tokens=600_000, completion_tokens=400_000, total_tokens=1_000_000)
        transport = RecordingTransport(usage=usage)
        tracker = FakeQuotaTracker()

        response = await _chain(transport, tracker).complete("u1", REQUEST)

        assert response.cost == pytest.approx(3.0)
        assert len(tracker.tracked) == 1
        assert tracker.tracked[0].provider == "anthropic"
        assert tracker.tracked[0].total_tokens == 1_000_000

    @pytest.mark.anyio
    async def test_missing_transport_is_a_provider_failure(self):
        chain = ModelProviderFallback(
            providers=_chain_providers(),
            usage_tracker=FakeQuotaTracker(),
            transports={ProviderType.LOCAL: RecordingTransport()},
        )
        response = await chain.complete("u1", REQUEST)
        assert response.model == "llama"

    def test_providers_sorted_by_priority_stably(self):
        providers = [
            ProviderConfig(name="b", priority=2, type=ProviderType.LOCAL, model="m2"),
            ProviderConfig(name="a", priority=1, type=ProviderType.LOCAL, model="m1"),
            ProviderConfig(name="c", priority=2, type=ProviderType.LOCAL, model="m3"),
        ]
        chain = _chain(RecordingTransport(), providers=providers)
        assert [p.model for p in chain.providers] == ["m1", "m2", "m3"]

    def test_estimate_cost(self):
        chain = _chain(RecordingTransport())
        assert chain.estimate_cost("openai", 500_000) == pytest.approx(5.0)
        assert chain.estimate_cost("local", 1_000_000) == 0.0
        assert chain.estimate_cost("unknown", 1_000_000) == 0.0

    @pytest.mark.anyio
    async def test_recommended_provider_skips_blocked_apis(self):
        tracker = FakeQuotaTracker(denied={"anthropic": "blocked"})
        chain = _chain(RecordingTransport(), tracker)

        recommended = await chain.get_recommended_provider("u1")
        assert recommended.name == "openai"

    @pytest.mark.anyio
    async def test_recommended_provider_on_empty_chain(self):
        chain = ModelProviderFallback(providers=[], usage_tracker=FakeQuotaTracker(), transports={})

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await chain.get_recommended_provider("u1")
        assert exc_info.value.errors == []

    @pytest.mark.anyio
    async def test_empty_chain_fails_without_provider_calls(self):
        chain = ModelProviderFallback(providers=[], usage_tracker=FakeQuotaTracker(), transports={})

        with pytest.raises(AllProvidersFailedError):
            await complete_with_retry(chain, "u1", REQUEST, attempts=2, base_delay=0)

    def test_default_chain_order(self):
        providers = default_providers(EngineConfig(ollama_endpoint="http://ollama:11434"))

        assert [p.priority for p in providers] == list(range(1, 10))
        assert providers[0].name == "anthropic"
        assert providers[-1].type == ProviderType.LOCAL
        assert providers[-1].endpoint == "http://ollama:11434"


class TestRetryAndClient:
    """Tests for the retry wrapper and the ProviderClient adapter."""

    @pytest.mark.anyio
    async def test_retry_reruns_whole_chain(self):
        transport = RecordingTransport(
            failing={m: ProviderError("down") for m in ("claude", "gpt", "llama")}
        )
        chain = _chain(transport)

        with pytest.raises(AllProvidersFailedError):
            await complete_with_retry(chain, "u1", REQUEST, attempts=2, base_delay=0)

        assert transport.called == ["claude", "gpt", "llama"] * 2

    @pytest.mark.anyio
    async def test_retry_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            await complete_with_retry(_chain(RecordingTransport()), "u1", REQUEST, attempts=0)

    @pytest.mark.anyio
    async def test_fallback_client_returns_text(self):
        client = FallbackClient(_chain(RecordingTransport()), "u1")

        response = await client.chat([Message(role="user", content="hi")])

        assert response.content == "answer from claude"
        assert response.tool_calls == []
        assert response.finish_reason == "stop"


class TestUsageTracker:
    """Tests for InMemoryUsageTracker and cost calculation."""

    @pytest.mark.anyio
    async def test_unlimited_by_default(self):
        tracker = InMemoryUsageTracker()
        check = await tracker.check_quota("u1", "anthropic")
        assert check.allowed is True

    @pytest.mark.anyio
    async def test_daily_request_limit(self):
        tracker = InMemoryUsageTracker()
        tracker.set_limits("u1", "openai", QuotaLimits(daily_limit=1))

        await tracker.track_usage("u1", UsageRecord(provider="openai", model="gpt-4", total_tokens=10))
        check = await tracker.check_quota("u1", "openai")

        assert check.allowed is False
        assert check.reason == "Daily request limit reached (1)"

    @pytest.mark.anyio
    async def test_daily_counters_reset_on_new_day(self):
        now = {"value": datetime(2024, 3, 1, 23, 0)}
        tracker = InMemoryUsageTracker(clock=lambda: now["value"])
        tracker.set_limits("u1", "openai", QuotaLimits(daily_limit=1, monthly_limit=5))

        await tracker.track_usage("u1", UsageRecord(provider="openai", model="gpt-4"))
        assert (await tracker.check_quota("u1", "openai")).allowed is False

        now["value"] = datetime(2024, 3, 2, 1, 0)
        assert (await tracker.check_quota("u1", "openai")).allowed is True
        assert tracker.get_usage("u1", "openai").monthly_requests == 1

    def test_calculate_cost_prefix_match(self):
        record = UsageRecord(
            provider="anthropic",
            model="claude-3-haiku-20240307",
            prompt_tokens=1_000_000,
            completion_tokens=1_000_000,
        )
        assert calculate_cost(record) == pytest.approx(0.25 + 1.25)

    def test_calculate_cost_prefers_longest_prefix(self):
        record = UsageRecord(provider="openai", model="gpt-4-turbo-preview", prompt_tokens=1_000_000)
        assert calculate_cost(record) == pytest.approx(10.0)

    def test_calculate_cost_unknown_provider(self):
        assert calculate_cost(UsageRecord(provider="local", model="llama3", prompt_tokens=5)) == 0.0


class TestCostOptimizedProvider:
    """Tests for the local-first chain."""

    def _provider(self) -> CostOptimizedModelProvider:
        return CostOptimizedModelProvider(
            usage_tracker=FakeQuotaTracker(),
            transports={t: RecordingTransport() for t in ProviderType},
            config=EngineConfig(ollama_endpoint="http://ollama:11434"),
        )

    def test_local_models_come_first(self):
        providers = self._provider().providers

        assert all(p.type == ProviderType.LOCAL for p in providers[:9])
        assert providers[9].type == ProviderType.HUGGINGFACE
        assert [p.name for p in providers[10:]] == ["anthropic", "openai", "anthropic", "openai"]
        assert providers[0].endpoint == "http://ollama:11434"

    @pytest.mark.anyio
    async def test_select_model_for_task(self):
        provider = self._provider()

        assert (await provider.select_model_for_task("u1", "code")).model == "qwen2.5-coder"
        assert (await provider.select_model_for_task("u1", "vision")).model == "llava"

    @pytest.mark.anyio
    async def test_unknown_task_type_uses_default_model(self):
        selected = await self._provider().select_model_for_task("u1", "poetry")
        assert selected.model == "llama3.1"

    @pytest.mark.anyio
    async def test_missing_preferred_model_defers_to_recommendation(self):
        provider = CostOptimizedModelProvider(
            providers=[
                ProviderConfig(name="openai", priority=1, type=ProviderType.API, model="gpt-4-turbo"),
            ],
            usage_tracker=FakeQuotaTracker(),
            transports={},
        )
        selected = await provider.select_model_for_task("u1", "vision")
        assert selected.model == "gpt-4-turbo"


class TestCreateProvider:
    """Tests for backend client construction."""

    def test_missing_anthropic_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ProviderError, match="Anthropic API key required"):
            create_provider(AIProvider.ANTHROPIC, EngineConfig())

    def test_docker_requires_configuration(self):
        with pytest.raises(ProviderError, match="No Docker providers configured"):
            create_provider(AIProvider.DOCKER, EngineConfig())

    def test_ollama_needs_no_key(self):
        client = create_provider(AIProvider.OLLAMA, EngineConfig(ollama_endpoint="http://ollama:11434"))
        assert isinstance(client, OllamaClient)
