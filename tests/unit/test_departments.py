"""Unit tests for intent-driven department agents and the default catalogue."""

from __future__ import annotations

from typing import Any

from agency_orchestrator.agents.router import AgentRouter, IntentResolver
from agency_orchestrator.agents.types import DetectionMethod, IntentDetection, ToolResult
from agency_orchestrator.departments import build_default_registry, manufacturing_agent


def test_default_registry_departments_and_actions() -> None:
    registry = build_default_registry()

    assert registry.departments() == ["construction", "manufacturing", "hr"]
    manufacturing = registry.get("manufacturing")
    assert manufacturing is not None
    assert manufacturing.supported_actions() == [
        "ADD_ITEM",
        "UPDATE_STOCK",
        "CHECK_STOCK",
        "LIST_ITEMS",
        "SCHEDULE_RUN",
        "LIST_RUNS",
        "LIST_EQUIPMENT",
    ]
    hr = registry.get("hr")
    assert hr is not None
    assert {"QUERY_POLICY", "SEARCH_EMPLOYEE"} <= set(hr.supported_actions())


def test_detected_action_beats_keywords() -> None:
    agent = manufacturing_agent()
    detection = IntentDetection(
        department="manufacturing",
        confidence=0.9,
        reason="learned",
        method=DetectionMethod.LEARNED,
        action="LIST_RUNS",
    )

    intent = agent.match_intent("check stock of bolts", detection)

    assert intent is not None
    assert intent.action == "LIST_RUNS"
    assert agent.match_intent("check stock of bolts").action == "CHECK_STOCK"  # type: ignore[union-attr]


async def test_process_message_calls_mapped_tool(make_tool: Any) -> None:
    agent = manufacturing_agent()
    tool = make_tool(
        "inventory_tracker", ToolResult.ok({"message": "Bolts: 20 units", "quantity": 20})
    )
    agent.register_tool(tool)

    response = await agent.process_message(
        "check stock please", "s-1", {"item": "bolts", "department": "manufacturing"}
    )

    assert response.message == "Bolts: 20 units"
    assert response.tools_used == ["inventory_tracker"]
    assert response.department == "manufacturing"
    assert tool.calls == [{"item": "bolts", "action": "check_stock"}]


async def test_process_message_reports_tool_failure() -> None:
    agent = manufacturing_agent()

    response = await agent.process_message("list equipment", "s-2")

    assert response.message == (
        'Maintenance List failed: Tool "equipment_maintenance" is not available.'
    )


async def test_unmatched_message_returns_capabilities() -> None:
    response = await manufacturing_agent().process_message("tell me a joke", "s-3")

    assert response.message.startswith("Manufacturing Agent: Manages manufacturing operations")
    assert response.tools_used is None


async def test_default_catalogue_routes_inventory_to_manufacturing(make_tool: Any) -> None:
    registry = build_default_registry()
    agent = registry.get("manufacturing")
    assert agent is not None
    agent.register_tool(make_tool("inventory_tracker", ToolResult.ok({"count": 0})))
    router = AgentRouter(registry, IntentResolver(registry))

    response = await router.route("Please check stock of production inventory", "s-4")

    assert response.department == "manufacturing"
    assert response.detection is not None
    assert response.detection.method is DetectionMethod.KEYWORD
    assert response.tools_used == ["inventory_tracker"]
    assert response.message == "Check Stock: done"
