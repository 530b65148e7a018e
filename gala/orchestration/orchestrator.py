"""AIOrchestrator: intent analysis, planning and plan execution."""

import logging
from typing import Any, Callable, Optional

from gala.agents.agent import Agent, AgentConfig
from gala.config import EngineConfig, ProviderClient
from gala.orchestration.audit import CapabilityAuditor, CapabilityAuditResult
from gala.orchestration.executor import (
    HumanInputCallback,
    StepCompleteCallback,
    execute_orchestration_plan,
)
from gala.orchestration.intent import (
    build_intent_prompt,
    fallback_intent_detection,
    parse_intent_response,
)
from gala.orchestration.planner import build_plan, format_plan_summary
from gala.orchestration.prompts import ROUTER_SYSTEM_PROMPT
from gala.providers.client import create_provider
from gala.schemas import OrchestrationPlan, TaskIntent
from gala.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

ClientFactory = Callable[[AgentConfig], ProviderClient]

ROUTER_AGENT_ID = "router"


class AIOrchestrator:
    """Turns a natural-language request into an executed multi-agent plan.

    Flow:
    1. analyze_intent: router agent JSON decode, keyword fallback on any failure
    2. create_orchestration_plan: static step template for the intent
    3. execute_orchestration_plan: sequential steps with human-input pauses

    The tool registry and client factory are injected; agents registered
    here share the orchestrator's tool registry.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        tool_registry: Optional[ToolRegistry] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.config = config or EngineConfig()
        self.tool_registry = tool_registry if tool_registry is not None else ToolRegistry()
        self._client_factory = client_factory or self._default_client
        self._agents: dict[str, Agent] = {}
        self._router_agent: Optional[Agent] = None
        self.auditor = CapabilityAuditor(self.tool_registry)

    def _default_client(self, agent_config: AgentConfig) -> ProviderClient:
        return create_provider(agent_config.provider, self.config, model=agent_config.model)

    def _router_config(self) -> AgentConfig:
        return AgentConfig(
            id=ROUTER_AGENT_ID,
            name="Task Router",
            description="Analyzes user intent and creates orchestration plans",
            system_prompt=ROUTER_SYSTEM_PROMPT,
            provider=self.config.default_provider,
            model=self.config.router_model,
        )

    def _get_router_agent(self) -> Agent:
        """Create the router agent on first use.

        Raises:
            ProviderError: If the default provider cannot be configured
        """
        if self._router_agent is None:
            router_config = self._router_config()
            self._router_agent = Agent(
                router_config, self._client_factory(router_config), self.tool_registry
            )
        return self._router_agent

    def register_agent(self, config: AgentConfig, client: Optional[ProviderClient] = None) -> Agent:
        """Create and register an agent; a client is built from config when omitted."""
        agent = Agent(config, client or self._client_factory(config), self.tool_registry)
        self._agents[config.id] = agent
        logger.debug(f"Registered agent {config.id} ({config.provider.value}/{config.model})")
        return agent

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(agent_id)

    @property
    def agents(self) -> list[Agent]:
        return list(self._agents.values())

    async def analyze_intent(
        self, user_input: str, context: Optional[dict[str, Any]] = None
    ) -> TaskIntent:
        """Classify a request, falling back to keywords when the router fails.

        Never raises: provider errors, missing credentials and unparseable
        replies all resolve to the deterministic classifier.
        """
        try:
            router = self._get_router_agent()
            response = await router.chat(build_intent_prompt(user_input, context))
            return parse_intent_response(response)
        except Exception as e:
            logger.warning(f"Intent decode failed, using keyword fallback: {e}")
            return fallback_intent_detection(user_input, context)

    async def create_orchestration_plan(
        self, user_input: str, context: Optional[dict[str, Any]] = None
    ) -> OrchestrationPlan:
        """Analyze intent and expand it into a validated plan.

        Raises:
            PlanningError: If the generated steps are malformed
        """
        intent = await self.analyze_intent(user_input, context)
        plan = build_plan(intent, context)
        logger.info(
            f"Plan {plan.task_id}: intent={intent.intent} "
            f"steps={len(plan.steps)} est={plan.estimated_duration}s"
        )
        return plan

    async def execute_orchestration_plan(
        self,
        plan: OrchestrationPlan,
        on_step_complete: Optional[StepCompleteCallback] = None,
        on_human_input_required: Optional[HumanInputCallback] = None,
    ) -> dict[str, Any]:
        return await execute_orchestration_plan(
            plan,
            self.get_agent,
            on_step_complete=on_step_complete,
            on_human_input_required=on_human_input_required,
        )

    async def gala(self, user_input: str, context: Optional[dict[str, Any]] = None) -> str:
        """Plan a request and describe the plan for confirmation."""
        plan = await self.create_orchestration_plan(user_input, context)
        return format_plan_summary(plan)

    async def self_audit(
        self,
        user_input: str,
        context: Optional[dict[str, Any]] = None,
        available_generators: Optional[list[str]] = None,
        env: Optional[dict[str, Optional[str]]] = None,
    ) -> CapabilityAuditResult:
        """Analyze intent and report which capabilities are missing."""
        intent = await self.analyze_intent(user_input, context)
        providers = {
            "anthropic": bool(self.config.anthropic_api_key),
            "openai": bool(self.config.openai_api_key),
            "ollama": bool(self.config.ollama_endpoint),
        }
        return self.auditor.audit(
            intent,
            available_generators=available_generators,
            env=env,
            providers=providers,
        )
