"""CrewAgent: a role-played agent that executes crew tasks."""

import json
import logging
import time
from datetime import datetime
from typing import Any, Optional

from gala.config import ProviderClient
from gala.crew.schemas import CrewAgentConfig, TaskConfig, TaskResult
from gala.schemas import ChatOptions, Message

logger = logging.getLogger(__name__)

MAX_HISTORY_TURNS = 10


class CrewAgent:
    """Executes tasks through a provider client, keeping a short private history."""

    def __init__(self, config: CrewAgentConfig, client: ProviderClient):
        self.config = config
        self._client = client
        self._history: list[Message] = []

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def history(self) -> list[Message]:
        return list(self._history)

    def build_system_prompt(self) -> str:
        delegation = (
            "You can delegate tasks to other agents if needed."
            if self.config.allow_delegation
            else "You work independently and complete tasks yourself."
        )
        sections = [
            f"You are {self.config.role}.",
            f"Your Goal: {self.config.goal}",
            f"Your Backstory: {self.config.backstory}",
            delegation,
        ]
        if self.config.tools:
            tool_lines = "\n".join(f"- {t.name}: {t.description}" for t in self.config.tools)
            sections.append(f"Available Tools:\n{tool_lines}")
        sections.append("Always provide high-quality, detailed output that meets the expected results.")
        return "\n\n".join(sections)

    @staticmethod
    def build_task_prompt(task: TaskConfig, context: Optional[dict[str, Any]] = None) -> str:
        prompt = f"Task: {task.description}\n\nExpected Output: {task.expected_output}"
        if context:
            prompt += f"\n\nContext:\n{json.dumps(context, indent=2, default=str)}"
        if task.context and task.context.shared_data:
            shared = json.dumps(task.context.shared_data, indent=2, default=str)
            prompt += f"\n\nShared Data from Previous Tasks:\n{shared}"
        return prompt

    async def execute_task(self, task: TaskConfig, context: Optional[dict[str, Any]] = None) -> TaskResult:
        """Run one task. Never raises: failures come back as status="failed"."""
        start_time = datetime.now()
        started = time.perf_counter()

        if self.config.verbose:
            logger.info(f"[{self.config.role}] Starting task: {task.description}")

        task_prompt = self.build_task_prompt(task, context)
        messages = [
            Message(role="system", content=self.build_system_prompt()),
            *self._history,
            Message(role="user", content=task_prompt),
        ]
        options = ChatOptions(
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

        try:
            response = await self._client.chat(messages, options)
        except Exception as e:
            logger.error(f"[{self.config.role}] Task {task.id} failed: {e}")
            return TaskResult(
                task_id=task.id,
                agent_id=self.config.id,
                status="failed",
                start_time=start_time,
                end_time=datetime.now(),
                duration=time.perf_counter() - started,
                error=str(e) or type(e).__name__,
            )

        output = response.content
        self._history.extend(
            [
                Message(role="user", content=task_prompt),
                Message(role="assistant", content=output),
            ]
        )
        self._history = self._history[-MAX_HISTORY_TURNS:]

        if self.config.verbose:
            logger.info(f"[{self.config.role}] Completed task: {task.id}")

        return TaskResult(
            task_id=task.id,
            agent_id=self.config.id,
            output=output,
            status="completed",
            start_time=start_time,
            end_time=datetime.now(),
            duration=time.perf_counter() - started,
            tokens_used=response.usage.total_tokens if response.usage else None,
        )
