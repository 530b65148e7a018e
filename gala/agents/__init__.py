"""Tool-using agents and the preset creative-workflow agents."""

from gala.agents.agent import Agent, AgentConfig, ToolResult
from gala.agents.presets import (
    content_creator_config,
    default_agent_configs,
    email_marketer_config,
    portfolio_manager_config,
    social_media_manager_config,
    vision_analyzer_config,
)

__all__ = [
    "Agent",
    "AgentConfig",
    "ToolResult",
    "content_creator_config",
    "default_agent_configs",
    "email_marketer_config",
    "portfolio_manager_config",
    "social_media_manager_config",
    "vision_analyzer_config",
]
