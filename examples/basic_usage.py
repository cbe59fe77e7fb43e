#!/usr/bin/env python3
"""Programmatic routing and workflow example.

This demonstrates using the orchestrator components directly:

* load settings from `.env`
* attach in-memory tools to the default HR agent
* route a free-text request
* detect and run the employee onboarding workflow
"""

from __future__ import annotations

import argparse
import asyncio
import json
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from agency_orchestrator.agents.types import ToolResult
from agency_orchestrator.config import OrchestratorSettings
from agency_orchestrator.logging import configure_logging
from agency_orchestrator.main import build_runtime
from agency_orchestrator.workflows.types import WorkflowOptions


class InMemoryTool:
    def __init__(self, name: str, description: str, reply: dict[str, Any]) -> None:
        self.name = name
        self.description = description
        self._reply = reply

    async def execute(self, params: Mapping[str, Any]) -> ToolResult:
        return ToolResult.ok({**self._reply, "received": dict(params)})


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Onboard an employee (programmatic example).")
    parser.add_argument("--first-name", required=True)
    parser.add_argument("--last-name", required=True)
    parser.add_argument("--position", required=True)
    parser.add_argument("--department", default="Construction")
    parser.add_argument("--email", default="", help="Send a welcome email when given")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    settings = OrchestratorSettings()
    configure_logging(settings.log_level, settings.log_format)
    runtime = build_runtime(settings)

    hr = runtime.agents.get("hr")
    assert hr is not None
    hr.register_tool(
        InMemoryTool("employee_directory", "Employee records", {"employee_id": "EMP-0001"})
    )
    hr.register_tool(
        InMemoryTool(
            "onboarding_checklist", "Role checklists", {"checklist_id": "CL-1", "total_tasks": 8}
        )
    )
    hr.register_tool(
        InMemoryTool("hr_policy_tool", "Policy handbook", {"message": "25 days of annual leave."})
    )
    hr.register_tool(InMemoryTool("performance_tracker", "Goals and reviews", {"goal_id": "G-1"}))
    hr.register_tool(InMemoryTool("email_sender", "Outbound email", {"sent": True}))

    session_id = str(uuid.uuid4())
    try:
        response = await runtime.router.route("What is the vacation policy?", session_id)
        print(json.dumps(response.to_json(), indent=2, default=str))

        definition = runtime.workflows.detect("We want to hire a new engineer")
        assert definition is not None

        context = {
            "first_name": args.first_name,
            "last_name": args.last_name,
            "position": args.position,
            "department": args.department,
            "email": args.email,
        }
        validation = runtime.workflows.validate_context(definition, context)
        if not validation.valid:
            print(f"Missing context: {', '.join(validation.missing)}")
            return 3

        result = await runtime.engine.execute(
            definition, WorkflowOptions(session_id=session_id, context=context)
        )
        print(result.message)
        return 0 if result.success else 4
    finally:
        await runtime.close()


def main(argv: Sequence[str] | None = None) -> int:
    return asyncio.run(_run(_parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
