"""Tests for task analysis and IntelligentRouter."""

import pytest

from gala.config import AIProvider, TaskCategory
from gala.routing import (
    DEFAULT_MODEL_REGISTRY,
    IntelligentRouter,
    ModelCapability,
    RouterPreferences,
    TaskAnalysis,
    analyze_task,
)
from gala.routing.analysis import classify_category
from gala.routing.base import format_category


def _model(name: str, **overrides) -> ModelCapability:
    values = dict(
        provider=AIProvider.OPENAI,
        model=name,
        strengths=[],
        speed=5,
        cost=5,
        quality=7,
        context_window=8000,
    )
    values.update(overrides)
    return ModelCapability(**values)


class TestTaskAnalysis:
    """Tests for keyword task analysis."""

    def test_code_request(self):
        analysis = analyze_task("Write a function to parse the config file")
        assert analysis.category == TaskCategory.CODE_GENERATION
        assert analysis.complexity == 7

    def test_first_matching_category_wins(self):
        # "summarize" and "explain" both match; research is checked first
        category, _ = classify_category("explain and summarize this")
        assert category == TaskCategory.RESEARCH

    def test_conversation_default(self):
        category, complexity = classify_category("hello there")
        assert category == TaskCategory.CONVERSATION
        assert complexity == 5

    def test_flags_from_text(self):
        analysis = analyze_task("Quick, look at this photo, I need the best answer on a budget")
        assert analysis.requires_vision
        assert analysis.priority_speed
        assert analysis.priority_cost
        assert analysis.priority_quality

    def test_flags_from_context(self):
        analysis = analyze_task(
            "hi",
            {"has_images": True, "tools": ["search"], "conversation_history": [{}, {}]},
        )
        assert analysis.requires_vision
        assert analysis.requires_functions
        assert analysis.context_size == len("hi") + 2 * 500

    def test_format_category(self):
        assert format_category(TaskCategory.CODE_GENERATION) == "code generation"


class TestIntelligentRouter:
    """Tests for scoring and selection."""

    def test_empty_registry_raises(self):
        with pytest.raises(ValueError, match="registry cannot be empty"):
            IntelligentRouter(registry=[])

    def test_code_task_prefers_strong_quality_model(self):
        router = IntelligentRouter()
        decision = router.route(router.analyze_task("Write a function to parse the config file"))

        assert decision.model == "claude-3-5-sonnet-20241022"
        assert decision.confidence == pytest.approx(0.845)
        assert [alt.model for alt in decision.alternatives] == [
            "gpt-4-turbo",
            "codellama",
            "claude-3-haiku-20240307",
        ]
        assert "optimized for code generation" in decision.reasoning
        assert "handles complex tasks well" in decision.reasoning

    def test_vision_filter(self):
        router = IntelligentRouter()
        decision = router.route(router.analyze_task("describe this image"))

        assert decision.model == "claude-3-haiku-20240307"
        for alt in decision.alternatives:
            model = next(m for m in DEFAULT_MODEL_REGISTRY if m.model == alt.model)
            assert model.supports_vision

    def test_prefer_local(self):
        router = IntelligentRouter(preferences=RouterPreferences(prefer_local=True))
        decision = router.route(router.analyze_task("Write a function to sort a list"))

        assert decision.provider == AIProvider.OLLAMA
        assert decision.model == "codellama"
        assert "runs locally for privacy" in decision.reasoning

    def test_available_providers_filter(self):
        router = IntelligentRouter()
        decision = router.route(
            router.analyze_task("Write a function to sort a list"),
            available_providers=[AIProvider.OPENAI],
        )
        assert decision.provider == AIProvider.OPENAI

    def test_no_candidates_uses_full_registry(self):
        router = IntelligentRouter(
            preferences=RouterPreferences(prefer_local=True, min_quality=10)
        )
        decision = router.route(router.analyze_task("Write a function to sort a list"))

        # Filters removed every model; the unfiltered winner is returned
        assert decision.model == "claude-3-5-sonnet-20241022"

    def test_priority_speed_selects_faster_model(self):
        slow = _model("slow", speed=4)
        fast = _model("fast", speed=8)
        router = IntelligentRouter(registry=[slow, fast])

        decision = router.route(TaskAnalysis(priority_speed=True))
        assert decision.model == "fast"

    def test_priority_cost_weights_cheaper_model(self):
        cheap = _model("cheap", cost=1, quality=7)
        pricey = _model("pricey", cost=9, quality=9)
        router = IntelligentRouter(registry=[pricey, cheap])

        assert router.route(TaskAnalysis()).model == "pricey"
        assert router.route(TaskAnalysis(priority_cost=True)).model == "cheap"

    def test_ties_keep_registry_order(self):
        first = _model("first")
        second = _model("second")

        assert IntelligentRouter(registry=[first, second]).route(TaskAnalysis()).model == "first"
        assert IntelligentRouter(registry=[second, first]).route(TaskAnalysis()).model == "second"

    def test_score_components(self):
        model = _model("m", strengths=[TaskCategory.MATH], speed=10, cost=0, quality=10)
        analysis = TaskAnalysis(category=TaskCategory.MATH, complexity=8)

        # 40 strength + 30 quality + 5 speed + 5 cost + 10 complexity
        assert IntelligentRouter.score(model, analysis) == pytest.approx(90)

    def test_alternatives_capped_at_three(self):
        router = IntelligentRouter()
        decision = router.route(TaskAnalysis())
        assert len(decision.alternatives) == 3

    def test_generic_reasoning(self):
        model = _model("plain", speed=5, cost=5, quality=5)
        reasoning = IntelligentRouter.generate_reasoning(model, TaskAnalysis())
        assert reasoning == "Selected plain as the best overall match"

    def test_recommendations(self):
        router = IntelligentRouter()
        recommendations = router.get_recommendations("Write a function to sort a list")

        assert len(recommendations) == 4
        assert recommendations[0].model == "claude-3-5-sonnet-20241022"
        assert recommendations[1].alternatives == []
        assert recommendations[1].confidence < recommendations[0].confidence
