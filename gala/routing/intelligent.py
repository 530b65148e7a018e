"""IntelligentRouter: score a capability registry against a task profile."""

import logging
from typing import Any, Optional

from gala.config import AIProvider
from gala.routing.analysis import analyze_task
from gala.routing.base import (
    ModelCapability,
    RouteAlternative,
    RouteDecision,
    RouterPreferences,
    TaskAnalysis,
    format_category,
)
from gala.routing.defaults import DEFAULT_MODEL_REGISTRY

logger = logging.getLogger(__name__)

MAX_ALTERNATIVES = 3


class IntelligentRouter:
    """Pick a provider and model for a task before any call is made.

    Strategy:
    1. Hard-filter the registry (availability, vision, function calling,
       context window, user cost ceiling and quality floor)
    2. If nothing survives, score the full registry instead
    3. Score candidates on strength match, quality, speed, cost and
       complexity handling; highest score wins, registry order breaks ties

    Advisory only: routing never executes a request and never fails.
    """

    def __init__(
        self,
        registry: Optional[list[ModelCapability]] = None,
        preferences: Optional[RouterPreferences] = None,
    ):
        self.registry = registry if registry is not None else list(DEFAULT_MODEL_REGISTRY)
        if not self.registry:
            raise ValueError("registry cannot be empty")
        self.preferences = preferences or RouterPreferences()

    def analyze_task(self, user_input: str, context: Optional[dict[str, Any]] = None) -> TaskAnalysis:
        return analyze_task(user_input, context)

    def _passes_filters(
        self,
        model: ModelCapability,
        analysis: TaskAnalysis,
        available_providers: Optional[list[AIProvider]],
    ) -> bool:
        if available_providers is not None and model.provider not in available_providers:
            return False
        if analysis.requires_vision and not model.supports_vision:
            return False
        if analysis.requires_functions and not model.supports_function_calling:
            return False
        if analysis.context_size > model.context_window:
            return False
        if self.preferences.prefer_local and not model.local_only:
            return False
        if model.cost > self.preferences.max_cost:
            return False
        if model.quality < self.preferences.min_quality:
            return False
        return True

    @staticmethod
    def score(model: ModelCapability, analysis: TaskAnalysis) -> float:
        score = 0.0
        if analysis.category in model.strengths:
            score += 40
        score += model.quality / 10 * 30
        score += model.speed / 10 * (15 if analysis.priority_speed else 5)
        score += (10 - model.cost) / 10 * (15 if analysis.priority_cost else 5)
        if analysis.complexity >= 7 and model.quality >= 8:
            score += 10
        return score

    def route(
        self,
        analysis: TaskAnalysis,
        available_providers: Optional[list[AIProvider]] = None,
    ) -> RouteDecision:
        """Select the best model for analysis.

        Args:
            analysis: Task profile from analyze_task()
            available_providers: Restrict to these providers, or None for all

        Returns:
            RouteDecision with up to three scored alternatives
        """
        candidates = [
            model
            for model in self.registry
            if self._passes_filters(model, analysis, available_providers)
        ]
        if not candidates:
            logger.warning(
                f"No model satisfies the constraints for {analysis.category.value}; "
                "scoring the full registry"
            )
            candidates = self.registry

        scored = [(model, self.score(model, analysis)) for model in candidates]
        # sorted() is stable: equal scores keep registry order
        scored = sorted(scored, key=lambda item: item[1], reverse=True)

        winner, best_score = scored[0]
        alternatives = [
            RouteAlternative(provider=model.provider, model=model.model, score=score)
            for model, score in scored[1 : MAX_ALTERNATIVES + 1]
        ]

        return RouteDecision(
            provider=winner.provider,
            model=winner.model,
            reasoning=self.generate_reasoning(winner, analysis),
            confidence=best_score / 100,
            alternatives=alternatives,
        )

    @staticmethod
    def generate_reasoning(model: ModelCapability, analysis: TaskAnalysis) -> str:
        reasons = []
        if analysis.category in model.strengths:
            reasons.append(f"optimized for {format_category(analysis.category)}")
        if analysis.priority_speed and model.speed >= 8:
            reasons.append("fast response time")
        if analysis.priority_cost and model.cost <= 3:
            reasons.append("cost-effective")
        if analysis.priority_quality and model.quality >= 9:
            reasons.append("highest quality output")
        if model.local_only:
            reasons.append("runs locally for privacy")
        if analysis.complexity >= 7 and model.quality >= 8:
            reasons.append("handles complex tasks well")

        if not reasons:
            return f"Selected {model.model} as the best overall match"
        return f"Selected {model.model} because it's {', '.join(reasons)}"

    def get_recommendations(
        self,
        user_input: str,
        context: Optional[dict[str, Any]] = None,
    ) -> list[RouteDecision]:
        """Primary route followed by each alternative as its own decision."""
        analysis = self.analyze_task(user_input, context)
        primary = self.route(analysis)
        recommendations = [primary]

        for alt in primary.alternatives:
            model = next(
                (m for m in self.registry if m.provider == alt.provider and m.model == alt.model),
                None,
            )
            if model is None:
                continue
            recommendations.append(
                RouteDecision(
                    provider=alt.provider,
                    model=alt.model,
                    reasoning=self.generate_reasoning(model, analysis),
                    confidence=alt.score / 100,
                )
            )
        return recommendations
