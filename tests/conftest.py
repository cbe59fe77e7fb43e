"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from agency_orchestrator.agents.base import BaseAgent
from agency_orchestrator.agents.registry import AgentRegistry
from agency_orchestrator.agents.types import AgentResponse, IntentDetection, ToolResult


class FakeTool:
    """Tool double that records calls and answers from a callable or fixed result."""

    def __init__(
        self,
        name: str,
        result: ToolResult | Callable[[Mapping[str, Any]], ToolResult] | None = None,
        description: str = "",
    ) -> None:
        self.name = name
        self.description = description or f"{name} tool"
        self._result = result if result is not None else ToolResult.ok({})
        self.calls: list[dict[str, Any]] = []

    async def execute(self, params: Mapping[str, Any]) -> ToolResult:
        self.calls.append(dict(params))
        if callable(self._result):
            return self._result(params)
        return self._result


class RecordingAgent(BaseAgent):
    """Agent double that echoes what it was asked to do."""

    def __init__(self, name: str, description: str, actions: list[str] | None = None) -> None:
        super().__init__(name, description)
        self._actions = actions or []
        self.received: list[tuple[str, dict[str, Any], IntentDetection | None]] = []

    def supported_actions(self) -> list[str]:
        return list(self._actions)

    async def process_message(
        self,
        message: str,
        session_id: str,
        context: Mapping[str, Any] | None = None,
        detection: IntentDetection | None = None,
    ) -> AgentResponse:
        self.received.append((message, dict(context or {}), detection))
        return AgentResponse(message=f"{self.name} handled: {message}", session_id=session_id)


@pytest.fixture
def construction() -> RecordingAgent:
    return RecordingAgent(
        "Construction",
        "Manages construction projects, including project tracking, material cost "
        "estimation, timelines, and safety checklists.",
        ["CREATE_PROJECT"],
    )


@pytest.fixture
def manufacturing() -> RecordingAgent:
    return RecordingAgent(
        "Manufacturing",
        "Manages manufacturing operations, including inventory, production, quality "
        "control, and equipment maintenance.",
        ["CHECK_STOCK"],
    )


@pytest.fixture
def hr() -> RecordingAgent:
    return RecordingAgent(
        "HR",
        "Handles Human Resources inquiries, including questions about company policies, "
        "benefits, and leave.",
        ["QUERY_POLICY"],
    )


@pytest.fixture
def agent_registry(
    construction: RecordingAgent, manufacturing: RecordingAgent, hr: RecordingAgent
) -> AgentRegistry:
    registry = AgentRegistry()
    registry.register("construction", construction)
    registry.register("manufacturing", manufacturing)
    registry.register("hr", hr)
    return registry


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> None:
    """Isolate settings from the developer's environment and .env file."""

    for name in (
        "LOG_LEVEL",
        "LOG_FORMAT",
        "ORCHESTRATOR_DEFAULT_DEPARTMENT",
        "ORCHESTRATOR_LEARNED_INTENT_ENABLED",
        "ORCHESTRATOR_STEP_TIMEOUT_SECONDS",
        "ORCHESTRATOR_LLM_PROVIDER",
        "ORCHESTRATOR_LLM_API_KEY",
        "ORCHESTRATOR_LLM_MODEL",
        "ORCHESTRATOR_LLM_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def make_tool() -> type[FakeTool]:
    return FakeTool


@pytest.fixture
def make_agent() -> type[RecordingAgent]:
    return RecordingAgent
