"""Tests for intent analysis, planning and plan execution."""

import asyncio
import json

import pytest

from conftest import ScriptedClient
from gala.agents import AgentConfig
from gala.config import EngineConfig
from gala.engine import Gala
from gala.orchestration import (
    AIOrchestrator,
    PlanningError,
    build_plan,
    extract_json_object,
    fallback_intent_detection,
    format_plan_summary,
    parse_intent_response,
    resolve_variables,
    validate_plan,
)
from gala.orchestration.intent import IntentParseError
from gala.providers import ProviderError
from gala.schemas import AgentResponse, OrchestrationPlan, TaskIntent, WorkflowStep
from gala.tools import ToolRegistry

SOCIAL_TOOLS = ["image_analyzer", "caption_generator", "hashtag_generator", "social_media_poster"]


def _offline_orchestrator(**clients) -> AIOrchestrator:
    """Orchestrator whose router has no credentials; agents get scripted clients."""

    def factory(config: AgentConfig):
        if config.id in clients:
            return clients[config.id]
        raise ProviderError("Anthropic API key required")

    return AIOrchestrator(
        EngineConfig(anthropic_api_key="", openai_api_key=""),
        tool_registry=ToolRegistry(),
        client_factory=factory,
    )


class TestJsonExtraction:
    """Tests for pulling the intent object out of free text."""

    def test_plain_object(self):
        assert extract_json_object('{"intent": "x"}') == {"intent": "x"}

    def test_object_inside_prose_and_fences(self):
        text = 'Sure!\n```json\n{"intent": "email_campaign", "entities": {"to": "list"}}\n```\nDone.'
        assert extract_json_object(text) == {"intent": "email_campaign", "entities": {"to": "list"}}

    def test_braces_inside_strings(self):
        text = 'Result: {"intent": "general_query", "note": "use {curly} braces }"} trailing }'
        assert extract_json_object(text)["note"] == "use {curly} braces }"

    def test_skips_non_json_braces(self):
        text = 'Template {name} then {"intent": "portfolio_update"}'
        assert extract_json_object(text) == {"intent": "portfolio_update"}

    def test_no_object(self):
        assert extract_json_object("no json here") is None
        assert extract_json_object('{"unterminated": ') is None

    def test_parse_accepts_both_tool_key_styles(self):
        camel = parse_intent_response('{"intent": "a", "requiredTools": ["x"], "confidence": 0.9}')
        snake = parse_intent_response('{"intent": "a", "required_tools": ["y"]}')

        assert camel.required_tools == ["x"]
        assert camel.confidence == 0.9
        assert snake.required_tools == ["y"]
        assert snake.confidence == 0.5

    def test_parse_rejects_invalid_payload(self):
        with pytest.raises(IntentParseError):
            parse_intent_response('{"intent": "a", "confidence": 7}')
        with pytest.raises(IntentParseError, match="No JSON object"):
            parse_intent_response("I think you want to post photos")


class TestFallbackClassifier:
    """Tests for the deterministic keyword classifier."""

    def test_post_these_photos(self):
        intent = fallback_intent_detection("post these photos", {"files": ["img1"]})

        assert intent.intent == "social_media_post"
        assert intent.confidence == 0.8
        for tool in SOCIAL_TOOLS:
            assert tool in intent.required_tools
        assert intent.entities["files"] == ["img1"]
        assert intent.suggested_workflow == "photo_to_social_media"

    def test_post_with_files_but_no_media_words(self):
        assert fallback_intent_detection("post these", {"files": ["a.png"]}).intent == "social_media_post"

    def test_email_campaign(self):
        intent = fallback_intent_detection("Send an email to my subscribers")
        assert intent.intent == "email_campaign"
        assert intent.required_tools == ["email_service"]

    def test_portfolio_update(self):
        intent = fallback_intent_detection("update my website")
        assert intent.intent == "portfolio_update"
        assert intent.confidence == 0.7
        assert intent.required_tools == ["cms_api", "file_uploader"]

    def test_general_query(self):
        intent = fallback_intent_detection("what's the weather")
        assert intent.intent == "general_query"
        assert intent.confidence == 0.5
        assert intent.required_tools == []


class TestPlanning:
    """Tests for plan templates and validation."""

    def test_social_media_template(self):
        intent = fallback_intent_detection("post these photos", {"files": ["img1"]})
        plan = build_plan(intent, {"files": ["img1"]})

        assert [s.id for s in plan.steps] == [
            "analyze_images",
            "generate_caption",
            "generate_hashtags",
            "post_to_buffer",
            "update_portfolio",
            "create_email_campaign",
        ]
        assert plan.estimated_duration == 30
        assert plan.steps[0].input == {"files": ["img1"]}
        assert plan.steps[3].input["images"] == ["img1"]
        assert [s.requires_human_input for s in plan.steps] == [False, True, False, True, False, True]
        assert plan.task_id.startswith("task_")

    def test_email_and_portfolio_templates(self):
        email = build_plan(TaskIntent(intent="email_campaign"), {"audience": "clients"})
        portfolio = build_plan(TaskIntent(intent="portfolio_update"))

        assert [s.id for s in email.steps] == ["draft_email", "send_campaign"]
        assert email.steps[0].input == {"audience": "clients"}
        assert [s.id for s in portfolio.steps] == ["prepare_content", "upload_to_portfolio"]
        assert portfolio.estimated_duration == 10

    def test_unknown_intent_has_no_steps(self):
        plan = build_plan(TaskIntent(intent="general_query"))
        assert plan.steps == []
        assert plan.estimated_duration == 0

    def test_task_ids_are_unique(self):
        intent = TaskIntent(intent="general_query")
        assert build_plan(intent).task_id != build_plan(intent).task_id

    def test_duplicate_step_ids_rejected(self):
        steps = [
            WorkflowStep(id="a", agent_id="x", action="one"),
            WorkflowStep(id="a", agent_id="x", action="two"),
        ]
        with pytest.raises(PlanningError, match="Duplicate step ids: a"):
            validate_plan(steps)

    def test_forward_reference_rejected(self):
        steps = [
            WorkflowStep(id="a", agent_id="x", action="one", input={"v": "{{b.output}}"}),
            WorkflowStep(id="b", agent_id="x", action="two"),
        ]
        with pytest.raises(PlanningError, match="before step 'b' runs"):
            validate_plan(steps)

    def test_self_reference_rejected(self):
        steps = [WorkflowStep(id="a", agent_id="x", action="one", input=["{{a.output}}"])]
        with pytest.raises(PlanningError):
            validate_plan(steps)

    def test_non_step_references_allowed(self):
        steps = [WorkflowStep(id="a", agent_id="x", action="one", input={"v": "{{files}}"})]
        validate_plan(steps)

    def test_summary(self):
        intent = fallback_intent_detection("post these photos", {"files": ["img1"]})
        summary = format_plan_summary(build_plan(intent, {"files": ["img1"]}))

        assert summary.startswith("I understand you want to: social_media_post")
        assert "1. ✓ analyze images" in summary
        assert "2. ⏸️ generate caption" in summary
        assert "Some steps will require your input." in summary
        assert "Estimated time: ~30 seconds" in summary
        assert summary.endswith('Should I proceed? (Reply "yes" to start)')

    def test_summary_without_pauses(self):
        plan = build_plan(TaskIntent(intent="portfolio_update"))
        assert "require your input" not in format_plan_summary(plan)


class TestVariableResolution:
    """Tests for {{path}} substitution."""

    def test_embedded_token(self):
        results = {"step1": {"output": "X"}}
        assert resolve_variables("{{step1.output}}-suffix", results) == "X-suffix"

    def test_unresolved_token_is_literal(self):
        assert resolve_variables("{{missing.output}}", {}) == "{{missing.output}}"
        assert resolve_variables("a {{missing.output}} b", {}) == "a {{missing.output}} b"

    def test_whole_token_keeps_type(self):
        results = {"tags": {"output": ["#a", "#b"]}}
        assert resolve_variables("{{tags.output}}", results) == ["#a", "#b"]

    def test_embedded_structured_value_is_json(self):
        results = {"tags": {"output": ["#a"]}}
        assert resolve_variables("tags: {{tags.output}}", results) == 'tags: ["#a"]'

    def test_nested_structures(self):
        results = {"s": {"output": "v"}}
        value = {"list": ["{{s.output}}", 3], "nested": {"k": "{{s.output}}!"}, "n": None}
        assert resolve_variables(value, results) == {"list": ["v", 3], "nested": {"k": "v!"}, "n": None}

    def test_list_index(self):
        results = {"s": {"output": ["first", "second"]}}
        assert resolve_variables("{{s.output.1}}", results) == "second"

    def test_path_through_scalar_is_unresolved(self):
        results = {"s": "plain text"}
        assert resolve_variables("{{s.output}}", results) == "{{s.output}}"


class TestPlanExecution:
    """Tests for execute_orchestration_plan."""

    def _plan(self, *steps: WorkflowStep) -> OrchestrationPlan:
        return OrchestrationPlan(task_id="task_test", intent=TaskIntent(intent="test"), steps=list(steps))

    @pytest.mark.anyio
    async def test_outputs_flow_into_later_steps(self):
        writer = ScriptedClient(AgentResponse(content="draft text"))
        sender = ScriptedClient(AgentResponse(content="sent"))
        orchestrator = _offline_orchestrator(writer=writer, sender=sender)
        orchestrator.register_agent(AgentConfig(id="writer", name="Writer"))
        orchestrator.register_agent(AgentConfig(id="sender", name="Sender"))

        results = await orchestrator.execute_orchestration_plan(
            self._plan(
                WorkflowStep(id="draft", agent_id="writer", action="draft", input={"topic": "news"}),
                WorkflowStep(id="send", agent_id="sender", action="send", input={"body": "{{draft.output}}"}),
            )
        )

        assert results == {"draft": {"output": "draft text"}, "send": {"output": "sent"}}
        sent_payload = json.loads(sender.calls[0][0][-1].content)
        assert sent_payload == {"action": "send", "body": "draft text"}

    @pytest.mark.anyio
    async def test_every_step_has_an_entry(self):
        failing = ScriptedClient(ProviderError("HTTP 500"))
        orchestrator = _offline_orchestrator(broken=failing)
        orchestrator.register_agent(AgentConfig(id="broken", name="Broken"))
        completed = []

        results = await orchestrator.execute_orchestration_plan(
            self._plan(
                WorkflowStep(id="one", agent_id="broken", action="go"),
                WorkflowStep(id="two", agent_id="nobody", action="go"),
                WorkflowStep(id="three", agent_id="broken", action="go"),
            ),
            on_step_complete=lambda step, result: completed.append(step.id),
        )

        assert list(results) == ["one", "two", "three"]
        assert results["one"] == {"error": "HTTP 500"}
        assert results["two"] == {"error": "Agent not found: nobody"}
        assert completed == ["one", "two", "three"]

    @pytest.mark.anyio
    async def test_human_input_replaces_agent_call(self):
        client = ScriptedClient(AgentResponse(content="agent output"))
        orchestrator = _offline_orchestrator(captioner=client)
        orchestrator.register_agent(AgentConfig(id="captioner", name="Captioner"))
        prompts = []

        async def approve(step):
            prompts.append(step.human_input_prompt)
            return {"output": "approved caption"}

        results = await orchestrator.execute_orchestration_plan(
            self._plan(
                WorkflowStep(
                    id="caption",
                    agent_id="captioner",
                    action="caption",
                    requires_human_input=True,
                    human_input_prompt="Review:",
                ),
                WorkflowStep(id="post", agent_id="captioner", action="post", input="{{caption.output}}"),
            ),
            on_human_input_required=approve,
        )

        assert prompts == ["Review:"]
        assert results["caption"] == {"output": "approved caption"}
        assert len(client.calls) == 1
        assert json.loads(client.calls[0][0][-1].content) == {"action": "post", "input": "approved caption"}

    @pytest.mark.anyio
    async def test_human_step_without_callback_runs_agent(self):
        client = ScriptedClient(AgentResponse(content="auto"))
        orchestrator = _offline_orchestrator(captioner=client)
        orchestrator.register_agent(AgentConfig(id="captioner", name="Captioner"))

        results = await orchestrator.execute_orchestration_plan(
            self._plan(
                WorkflowStep(id="caption", agent_id="captioner", action="caption", requires_human_input=True)
            )
        )
        assert results == {"caption": {"output": "auto"}}

    @pytest.mark.anyio
    async def test_timed_out_human_input_keeps_other_results(self):
        client = ScriptedClient(AgentResponse(content="done"))
        orchestrator = _offline_orchestrator(worker=client)
        orchestrator.register_agent(AgentConfig(id="worker", name="Worker"))

        async def slow_reviewer(step):
            await asyncio.sleep(5)
            return {"output": "too late"}

        async def bounded(step):
            return await asyncio.wait_for(slow_reviewer(step), 0.01)

        results = await orchestrator.execute_orchestration_plan(
            self._plan(
                WorkflowStep(id="one", agent_id="worker", action="go"),
                WorkflowStep(id="review", agent_id="worker", action="review", requires_human_input=True),
                WorkflowStep(id="three", agent_id="worker", action="go", input="{{review.output}}"),
            ),
            on_human_input_required=bounded,
        )

        assert list(results) == ["one", "review", "three"]
        assert results["one"] == {"output": "done"}
        assert results["review"] == {"error": "TimeoutError"}
        assert results["three"] == {"output": "done"}

    @pytest.mark.anyio
    async def test_failing_step_callback_does_not_stop_plan(self):
        orchestrator = _offline_orchestrator(worker=ScriptedClient(AgentResponse(content="done")))
        orchestrator.register_agent(AgentConfig(id="worker", name="Worker"))
        seen = []

        def on_step_complete(step, result):
            seen.append(step.id)
            raise RuntimeError("listener crashed")

        results = await orchestrator.execute_orchestration_plan(
            self._plan(
                WorkflowStep(id="one", agent_id="worker", action="go"),
                WorkflowStep(id="two", agent_id="worker", action="go"),
            ),
            on_step_complete=on_step_complete,
        )

        assert seen == ["one", "two"]
        assert results == {"one": {"output": "done"}, "two": {"output": "done"}}


class TestOrchestrator:
    """Tests for AIOrchestrator intent analysis and planning."""

    @pytest.mark.anyio
    async def test_router_json_is_used(self):
        router = ScriptedClient(
            AgentResponse(content='Here: {"intent": "email_campaign", "requiredTools": ["email_service"], "confidence": 0.95}')
        )
        orchestrator = _offline_orchestrator(router=router)

        intent = await orchestrator.analyze_intent("send the newsletter")

        assert intent.intent == "email_campaign"
        assert intent.confidence == 0.95
        system_turn = router.calls[0][0][0]
        assert system_turn.role == "system"
        assert "task router" in system_turn.content

    @pytest.mark.anyio
    async def test_missing_credentials_fall_back(self):
        orchestrator = _offline_orchestrator()
        intent = await orchestrator.analyze_intent("post these photos", {"files": ["img1"]})

        assert intent.intent == "social_media_post"
        for tool in SOCIAL_TOOLS:
            assert tool in intent.required_tools

    @pytest.mark.anyio
    async def test_unparseable_reply_falls_back(self):
        router = ScriptedClient(AgentResponse(content="You probably want a portfolio refresh."))
        intent = await _offline_orchestrator(router=router).analyze_intent("refresh my portfolio")
        assert intent.intent == "portfolio_update"

    @pytest.mark.anyio
    async def test_provider_error_falls_back(self):
        router = ScriptedClient(ProviderError("HTTP 529"))
        intent = await _offline_orchestrator(router=router).analyze_intent("hello")
        assert intent.intent == "general_query"

    @pytest.mark.anyio
    async def test_gala_summary(self):
        summary = await _offline_orchestrator().gala("post these photos", {"files": ["img1"]})
        assert "social_media_post" in summary
        assert "6. ⏸️ create campaign" in summary

    @pytest.mark.anyio
    async def test_self_audit_reports_missing_tools(self):
        orchestrator = _offline_orchestrator()
        audit = await orchestrator.self_audit("post these photos", {"files": ["img1"]})

        assert [gap.name for gap in audit.missing_tools] == SOCIAL_TOOLS
        assert audit.confidence == pytest.approx(0.0)
        assert all(action.kind != "confirm" for action in audit.actions)

    @pytest.mark.anyio
    async def test_self_audit_confirms_when_capable(self):
        orchestrator = _offline_orchestrator()
        audit = await orchestrator.self_audit("what's new?")

        assert audit.missing_tools == []
        assert audit.confidence == pytest.approx(0.5)
        assert audit.actions[-1].kind == "confirm"


class TestGalaEngine:
    """End-to-end runs through the preset agents."""

    @pytest.mark.anyio
    async def test_post_these_photos(self):
        client = ScriptedClient(AgentResponse(content="step done"))

        def factory(config: AgentConfig):
            if config.id == "router":
                raise ProviderError("Anthropic API key required")
            return client

        engine = Gala(EngineConfig(), client_factory=factory)
        approvals = []

        async def approve(step):
            approvals.append(step.id)
            return {"output": f"approved {step.id}"}

        results = await engine.run(
            "post these photos",
            {"files": ["img1"]},
            on_human_input_required=approve,
        )

        assert list(results) == [
            "analyze_images",
            "generate_caption",
            "generate_hashtags",
            "post_to_buffer",
            "update_portfolio",
            "create_email_campaign",
        ]
        assert approvals == ["generate_caption", "post_to_buffer", "create_email_campaign"]
        assert results["analyze_images"] == {"output": "step done"}
        assert engine.orchestrator.tool_registry.has("generate_caption")

        hashtag_request = json.loads(client.calls[1][0][-1].content)
        assert hashtag_request == {"action": "generate_hashtags", "caption": "approved generate_caption"}
