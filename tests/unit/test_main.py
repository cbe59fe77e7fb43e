"""CLI behaviour: JSON on stdout, CI-friendly exit codes."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterator

import pytest

from agency_orchestrator.config import OrchestratorSettings
from agency_orchestrator.llm.openai_provider import OpenAIProvider
from agency_orchestrator.main import build_runtime, main


@pytest.fixture(autouse=True)
def _restore_root_logging(clean_env: None) -> Iterator[None]:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)


def _stdout_json(capsys: pytest.CaptureFixture[str]) -> dict[str, object]:
    return json.loads(capsys.readouterr().out)


def test_agents_lists_default_departments(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["agents"]) == 0

    out = _stdout_json(capsys)
    assert out["registered_departments"] == ["construction", "manufacturing", "hr"]
    assert out["learned_intent"] is False


def test_detect_prints_keyword_detection(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["detect", "We need to check inventory levels for production"]) == 0

    out = _stdout_json(capsys)
    assert out["department"] == "manufacturing"
    assert out["method"] == "keyword"


def test_detect_honours_department_override(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["detect", "anything at all", "--department", "HR"]) == 0

    assert _stdout_json(capsys)["method"] == "context"


def test_route_reports_missing_tool_as_data(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["route", "What is the HR vacation policy?", "--session-id", "s-1"]) == 0

    out = _stdout_json(capsys)
    assert out["session_id"] == "s-1"
    assert out["department"] == "hr"
    assert "is not available" in str(out["message"])


def test_workflows_list_and_show(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["workflows", "list"]) == 0
    assert _stdout_json(capsys)["total_workflows"] == 3

    assert main(["workflows", "show", "project_kickoff"]) == 0
    assert len(_stdout_json(capsys)["steps"]) == 5  # type: ignore[arg-type]

    assert main(["workflows", "show", "nope"]) == 5


def test_workflows_detect(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["workflows", "detect", "time to restock the warehouse"]) == 0
    assert _stdout_json(capsys)["id"] == "inventory_restock"

    assert main(["workflows", "detect", "What's the weather like?"]) == 5


def test_run_reports_missing_context(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["workflows", "run", "employee_onboarding", "--context", "first_name=Ana"])

    assert code == 3
    assert _stdout_json(capsys)["missing"] == ["last_name", "position", "department"]


def test_run_without_tools_is_not_completed(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["workflows", "run", "--message", "please restock"])

    assert code == 4
    out = _stdout_json(capsys)
    assert out["status"] == "failed"
    assert out["steps_completed"] == 0


def test_run_without_detected_workflow() -> None:
    assert main(["workflows", "run", "--message", "hello there"]) == 5


def test_malformed_context_is_a_usage_error() -> None:
    assert main(["workflows", "run", "inventory_restock", "--context", "oops"]) == 2


def test_configuration_error_exit_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORCHESTRATOR_LEARNED_INTENT_ENABLED", "true")
    monkeypatch.setenv("ORCHESTRATOR_LLM_PROVIDER", "openai")

    assert main(["agents"]) == 2


def test_build_runtime_wires_learned_intent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORCHESTRATOR_LEARNED_INTENT_ENABLED", "true")

    runtime = build_runtime(OrchestratorSettings())

    assert runtime.router.stats().learned_intent is True
    assert isinstance(runtime.provider, OpenAIProvider)
    asyncio.run(runtime.close())
