"""Capability audit: can the current deployment carry out an intent?"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from gala.schemas import TaskIntent
from gala.tools.registry import ToolRegistry

DEFAULT_CONFIDENCE = 0.6
MISSING_TOOL_PENALTY = 0.2
MISSING_INTEGRATION_PENALTY = 0.1


class CapabilityGap(BaseModel):
    type: Literal["tool", "integration", "generator", "workflow", "unknown"]
    name: str
    detail: Optional[str] = None
    severity: Literal["low", "medium", "high"]


class AuditAction(BaseModel):
    kind: Literal["connect", "generate", "install", "configure", "confirm"]
    description: str
    payload: Optional[dict[str, Any]] = None


class CapabilityAuditResult(BaseModel):
    intent: TaskIntent
    present_tools: list[str] = Field(default_factory=list)
    missing_tools: list[CapabilityGap] = Field(default_factory=list)
    missing_integrations: list[CapabilityGap] = Field(default_factory=list)
    suggested_generators: list[CapabilityGap] = Field(default_factory=list)
    actions: list[AuditAction] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0, description="Ability to execute now")


# (tool name markers, display name, env var, provider flag)
_INTEGRATIONS = [
    (("anthropic", "claude"), "Anthropic API", "ANTHROPIC_API_KEY", "anthropic"),
    (("openai", "gpt"), "OpenAI API", "OPENAI_API_KEY", "openai"),
]


class CapabilityAuditor:
    """Compares an intent's required tools with what is registered and configured."""

    def __init__(self, tools: ToolRegistry):
        self.tools = tools

    def audit(
        self,
        intent: TaskIntent,
        available_generators: Optional[list[str]] = None,
        env: Optional[dict[str, Optional[str]]] = None,
        providers: Optional[dict[str, bool]] = None,
    ) -> CapabilityAuditResult:
        env = env or {}
        providers = providers or {}
        generators = set(available_generators or [])

        missing_tools = [
            CapabilityGap(
                type="tool",
                name=name,
                severity="high",
                detail="Not registered in ToolRegistry",
            )
            for name in intent.required_tools
            if not self.tools.has(name)
        ]

        missing_integrations: list[CapabilityGap] = []
        actions: list[AuditAction] = []
        for markers, display_name, env_var, flag in _INTEGRATIONS:
            needed = any(
                marker in tool for tool in intent.required_tools for marker in markers
            )
            if needed and not env.get(env_var) and not providers.get(flag):
                missing_integrations.append(
                    CapabilityGap(
                        type="integration",
                        name=display_name,
                        severity="medium",
                        detail=f"Missing {env_var}",
                    )
                )
                actions.append(
                    AuditAction(kind="connect", description=f"Add {env_var} to environment")
                )

        suggested_generators: list[CapabilityGap] = []
        is_web_feature = any(word in intent.intent for word in ("feature", "web", "page"))
        if is_web_feature and "nextjs-feature" in generators:
            suggested_generators.append(
                CapabilityGap(
                    type="generator",
                    name="nextjs-feature",
                    severity="low",
                    detail="Scaffold route/component/API",
                )
            )
            actions.append(
                AuditAction(
                    kind="generate",
                    description="Scaffold Next.js feature",
                    payload={"generator": "nextjs-feature"},
                )
            )
        if missing_tools and "new-package" in generators:
            suggested_generators.append(
                CapabilityGap(
                    type="generator",
                    name="new-package",
                    severity="low",
                    detail="Create a package to host new tools",
                )
            )

        base = intent.confidence or DEFAULT_CONFIDENCE
        confidence = (
            base
            - len(missing_tools) * MISSING_TOOL_PENALTY
            - len(missing_integrations) * MISSING_INTEGRATION_PENALTY
        )
        confidence = max(0.0, min(1.0, confidence))

        if not missing_tools and not missing_integrations:
            actions.append(
                AuditAction(
                    kind="confirm",
                    description="All capabilities present. Proceed to execute plan?",
                )
            )

        return CapabilityAuditResult(
            intent=intent,
            present_tools=self.tools.list(),
            missing_tools=missing_tools,
            missing_integrations=missing_integrations,
            suggested_generators=suggested_generators,
            actions=actions,
            confidence=confidence,
        )
