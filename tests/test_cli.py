"""Tests for the gala command line."""

import json

import pytest

from gala.cli import _truncate, main


@pytest.fixture(autouse=True)
def offline(monkeypatch):
    for name in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "HUGGINGFACE_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestCli:
    def test_intent_uses_keyword_fallback(self, capsys):
        assert _run(["intent", "post these photos", "--files", "img1.jpg"]) == 0

        intent = json.loads(capsys.readouterr().out)
        assert intent["intent"] == "social_media_post"
        assert intent["entities"]["files"] == ["img1.jpg"]

    def test_plan_summary(self, capsys):
        assert _run(["plan", "send an email campaign"]) == 0

        out = capsys.readouterr().out
        assert "1. ✓ draft email" in out
        assert "2. ⏸️ send campaign" in out

    def test_plan_json(self, capsys):
        assert _run(["plan", "update my portfolio", "--json"]) == 0

        plan = json.loads(capsys.readouterr().out)
        assert [step["id"] for step in plan["steps"]] == ["prepare_content", "upload_to_portfolio"]

    def test_audit(self, capsys):
        assert _run(["audit", "post these photos", "--files", "a.png"]) == 0

        out = capsys.readouterr().out
        assert "missing tool: image_analyzer [high]" in out

    def test_route(self, capsys):
        assert _run(["route", "Write a function to sort a list", "--prefer-local"]) == 0

        out = capsys.readouterr().out
        assert "Category:   code_generation" in out
        assert "1. ollama/codellama" in out

    def test_truncate(self):
        assert _truncate("a\nb") == "a b"
        assert _truncate("x" * 300, max_len=10) == "x" * 10 + "..."
