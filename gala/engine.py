"""Gala public adapter."""

import asyncio
from typing import Any, Optional

from gala.agents.presets import default_agent_configs
from gala.config import EngineConfig
from gala.orchestration.executor import HumanInputCallback, StepCompleteCallback
from gala.orchestration.orchestrator import AIOrchestrator, ClientFactory
from gala.schemas import OrchestrationPlan
from gala.tools.registry import ToolRegistry


class Gala:
    """Entry point wiring the orchestrator to the preset creative agents.

    Usage:
        from gala import Gala, EngineConfig

        engine = Gala(config=EngineConfig(anthropic_api_key="sk-ant-..."))

        print(await engine.describe("post these photos", {"files": ["a.jpg"]}))
        results = await engine.run("post these photos", {"files": ["a.jpg"]})
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        tool_registry: Optional[ToolRegistry] = None,
        client_factory: Optional[ClientFactory] = None,
        register_presets: bool = True,
    ):
        """Initialize the engine.

        Args:
            config: Engine configuration; resolved from the environment when omitted
            tool_registry: Registry shared by every agent
            client_factory: Builds a provider client per agent config
            register_presets: Register the vision, content, social, portfolio
                and email agents

        Raises:
            ProviderError: If presets are registered and their provider lacks credentials
        """
        self.orchestrator = AIOrchestrator(
            config=config,
            tool_registry=tool_registry,
            client_factory=client_factory,
        )
        if register_presets:
            for agent_config in default_agent_configs():
                self.orchestrator.register_agent(agent_config)

    async def plan(self, request: str, context: Optional[dict[str, Any]] = None) -> OrchestrationPlan:
        return await self.orchestrator.create_orchestration_plan(request, context)

    async def describe(self, request: str, context: Optional[dict[str, Any]] = None) -> str:
        """Plan a request and return the confirmation summary."""
        return await self.orchestrator.gala(request, context)

    async def run(
        self,
        request: str,
        context: Optional[dict[str, Any]] = None,
        on_step_complete: Optional[StepCompleteCallback] = None,
        on_human_input_required: Optional[HumanInputCallback] = None,
    ) -> dict[str, Any]:
        """Plan a request and execute the plan.

        Returns:
            Step results keyed by step id
        """
        plan = await self.plan(request, context)
        return await self.orchestrator.execute_orchestration_plan(
            plan,
            on_step_complete=on_step_complete,
            on_human_input_required=on_human_input_required,
        )

    def run_sync(self, request: str, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Synchronous wrapper for run() without callbacks."""
        return asyncio.run(self.run(request, context))
