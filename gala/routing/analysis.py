"""Keyword-based task analysis for routing."""

import re
from typing import Any, Optional

from gala.config import TaskCategory
from gala.routing.base import TaskAnalysis

# Ordered: first match wins
CATEGORY_PATTERNS: list[tuple[re.Pattern, TaskCategory, int]] = [
    (re.compile(r"\b(code|program|function|class|implement|debug|fix|refactor)\b|```"),
     TaskCategory.CODE_GENERATION, 7),
    (re.compile(r"\b(review|analyze.*code|check.*code)\b"), TaskCategory.CODE_REVIEW, 6),
    (re.compile(r"\b(analyze.*data|statistics|dataset|csv|excel|visualize)\b"),
     TaskCategory.DATA_ANALYSIS, 7),
    (re.compile(r"\b(write|story|article|blog|creative|poem|script)\b"),
     TaskCategory.CREATIVE_WRITING, 6),
    (re.compile(r"\b(research|find.*information|explain|what is|how does)\b"),
     TaskCategory.RESEARCH, 6),
    (re.compile(r"\b(calculate|math|solve|equation|proof|logic)\b"), TaskCategory.MATH, 8),
    (re.compile(r"\b(summarize|tldr|brief|overview)\b"), TaskCategory.SUMMARIZATION, 4),
    (re.compile(r"\b(classify|categorize|extract|parse)\b"), TaskCategory.CLASSIFICATION, 5),
]
DEFAULT_COMPLEXITY = 5

VISION_PATTERN = re.compile(r"\b(image|photo|picture|visual|screenshot)\b")
FUNCTIONS_PATTERN = re.compile(r"\b(use.*tool|call.*function|execute|run)\b")
SPEED_PATTERN = re.compile(r"\b(quick|fast|urgent|asap|immediately)\b")
COST_PATTERN = re.compile(r"\b(cheap|budget|free|local)\b")
QUALITY_PATTERN = re.compile(r"\b(best|high.*quality|accurate|precise|detailed)\b")

TOKENS_PER_HISTORY_TURN = 500


def classify_category(text: str) -> tuple[TaskCategory, int]:
    """Return (category, complexity) for lowercased text."""
    for pattern, category, complexity in CATEGORY_PATTERNS:
        if pattern.search(text):
            return category, complexity
    return TaskCategory.CONVERSATION, DEFAULT_COMPLEXITY


def analyze_task(user_input: str, context: Optional[dict[str, Any]] = None) -> TaskAnalysis:
    """Build a TaskAnalysis from the request text and optional context.

    Recognized context keys: ``has_images`` (bool), ``tools`` (list) and
    ``conversation_history`` (list of prior turns).
    """
    context = context or {}
    text = user_input.lower()
    category, complexity = classify_category(text)

    history = context.get("conversation_history") or []
    return TaskAnalysis(
        category=category,
        complexity=complexity,
        requires_vision=bool(context.get("has_images")) or bool(VISION_PATTERN.search(text)),
        requires_functions=bool(context.get("tools")) or bool(FUNCTIONS_PATTERN.search(text)),
        context_size=len(user_input) + len(history) * TOKENS_PER_HISTORY_TURN,
        priority_speed=bool(SPEED_PATTERN.search(text)),
        priority_cost=bool(COST_PATTERN.search(text)),
        priority_quality=bool(QUALITY_PATTERN.search(text)),
    )
