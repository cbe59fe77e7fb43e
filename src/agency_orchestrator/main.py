"""CLI entrypoint for the agency orchestrator.

Routes free-text requests to department agents and runs the multi-step
business workflows. Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from agency_orchestrator import __version__
from agency_orchestrator.agents.registry import AgentRegistry
from agency_orchestrator.agents.router import AgentRouter, IntentResolver
from agency_orchestrator.config import OrchestratorSettings
from agency_orchestrator.departments import build_default_registry
from agency_orchestrator.llm.classifier import LLMIntentClassifier
from agency_orchestrator.llm.factory import LLMFactory
from agency_orchestrator.llm.provider import LLMProvider
from agency_orchestrator.logging import configure_logging
from agency_orchestrator.workflows.engine import WorkflowEngine
from agency_orchestrator.workflows.predefined import default_workflows
from agency_orchestrator.workflows.registry import WorkflowRegistry
from agency_orchestrator.workflows.types import ResultStatus, WorkflowOptions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_MISSING_CONTEXT = 3
EXIT_NOT_COMPLETED = 4
EXIT_NOT_FOUND = 5


def _parse_context(pairs: list[str] | None) -> dict[str, str]:
    context: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        context[key.strip()] = value
    return context


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agency-orchestrator",
        description="Route requests to department agents and run business workflows",
    )
    parser.add_argument(
        "--version", action="version", version=f"agency-orchestrator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("agents", help="List registered departments and their actions")

    detect = subparsers.add_parser("detect", help="Show which department would handle a message")
    detect.add_argument("message", help="Free-text request")
    detect.add_argument("--department", default=None, help="Explicit department override")

    route = subparsers.add_parser("route", help="Route a message to a department agent")
    route.add_argument("message", help="Free-text request")
    route.add_argument("--session-id", default=None, help="Session identifier (default: random)")
    route.add_argument("--department", default=None, help="Explicit department override")

    workflows = subparsers.add_parser("workflows", help="Inspect and run workflows")
    wf_sub = workflows.add_subparsers(dest="workflow_command", required=True)

    wf_sub.add_parser("list", help="List registered workflows")

    wf_detect = wf_sub.add_parser("detect", help="Detect a workflow from a message")
    wf_detect.add_argument("message", help="Free-text request")

    wf_show = wf_sub.add_parser("show", help="Describe a workflow and its steps")
    wf_show.add_argument("workflow_id", help="Workflow id, e.g. 'employee_onboarding'")

    wf_run = wf_sub.add_parser("run", help="Execute a workflow")
    target = wf_run.add_mutually_exclusive_group(required=True)
    target.add_argument("workflow_id", nargs="?", default=None, help="Workflow id")
    target.add_argument("--message", default=None, help="Detect the workflow from this message")
    wf_run.add_argument(
        "--context",
        nargs="*",
        default=None,
        metavar="KEY=VALUE",
        help="Initial workflow context, e.g. first_name=Jane last_name=Doe",
    )
    wf_run.add_argument(
        "--session-id", default=None, help="Session identifier (default: random)"
    )
    wf_run.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep running later steps after a step fails",
    )

    return parser


@dataclass(slots=True)
class Runtime:
    agents: AgentRegistry
    router: AgentRouter
    workflows: WorkflowRegistry
    engine: WorkflowEngine
    provider: LLMProvider | None = None

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()


def build_runtime(settings: OrchestratorSettings, agents: AgentRegistry | None = None) -> Runtime:
    agents = agents if agents is not None else build_default_registry()

    provider: LLMProvider | None = None
    classifier: LLMIntentClassifier | None = None
    if settings.learned_intent_enabled:
        provider = LLMFactory.create(settings.llm)
        classifier = LLMFactory.create_classifier(settings.llm, provider)

    resolver = IntentResolver(
        agents,
        classifier,
        default_department=settings.normalized_default_department,
        learned_enabled=settings.learned_intent_enabled,
    )
    return Runtime(
        agents=agents,
        router=AgentRouter(agents, resolver),
        workflows=WorkflowRegistry(default_workflows(agents)),
        engine=WorkflowEngine(step_timeout=settings.step_timeout_seconds),
        provider=provider,
    )


async def _run_workflow(runtime: Runtime, args: argparse.Namespace) -> int:
    if args.workflow_id:
        definition = runtime.workflows.get(args.workflow_id)
        if definition is None:
            print(f"Unknown workflow: {args.workflow_id}", file=sys.stderr)
            return EXIT_NOT_FOUND
    else:
        definition = runtime.workflows.detect(args.message)
        if definition is None:
            print("No workflow matched the message", file=sys.stderr)
            return EXIT_NOT_FOUND

    context = _parse_context(args.context)
    validation = runtime.workflows.validate_context(definition, context)
    if not validation.valid:
        _print_json({"workflow": definition.id, "missing": list(validation.missing)})
        return EXIT_MISSING_CONTEXT

    result = await runtime.engine.execute(
        definition,
        WorkflowOptions(
            session_id=args.session_id or str(uuid.uuid4()),
            context=context,
            continue_on_error=args.continue_on_error,
        ),
    )
    _print_json(result.to_json())
    return EXIT_OK if result.status is ResultStatus.COMPLETED else EXIT_NOT_COMPLETED


async def _dispatch(runtime: Runtime, args: argparse.Namespace) -> int:
    if args.command == "agents":
        _print_json(
            {
                **runtime.router.stats().to_json(),
                "agents": [summary.to_json() for summary in runtime.agents.summaries()],
            }
        )
        return EXIT_OK

    if args.command in ("detect", "route"):
        context = {"department": args.department} if args.department else None
        if args.command == "detect":
            detection = await runtime.router.detect(args.message, context)
            _print_json(detection.to_json())
            return EXIT_OK
        response = await runtime.router.route(
            args.message, args.session_id or str(uuid.uuid4()), context
        )
        _print_json(response.to_json())
        return EXIT_OK

    if args.command == "workflows":
        if args.workflow_command == "list":
            _print_json(runtime.workflows.stats())
            return EXIT_OK

        if args.workflow_command == "detect":
            definition = runtime.workflows.detect(args.message)
            if definition is None:
                print("No workflow matched the message", file=sys.stderr)
                return EXIT_NOT_FOUND
            _print_json(definition.to_json())
            return EXIT_OK

        if args.workflow_command == "show":
            description = runtime.workflows.describe(args.workflow_id)
            if description is None:
                print(f"Unknown workflow: {args.workflow_id}", file=sys.stderr)
                return EXIT_NOT_FOUND
            _print_json(description)
            return EXIT_OK

        if args.workflow_command == "run":
            return await _run_workflow(runtime, args)

    logger.error("Unknown command", extra={"command": args.command})
    return EXIT_CONFIG


async def _amain(settings: OrchestratorSettings, args: argparse.Namespace) -> int:
    runtime = build_runtime(settings)
    try:
        return await _dispatch(runtime, args)
    finally:
        await runtime.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = OrchestratorSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_CONFIG

    configure_logging(settings.log_level, settings.log_format)

    try:
        return asyncio.run(_amain(settings, args))
    except argparse.ArgumentTypeError as e:
        print(str(e), file=sys.stderr)
        return EXIT_CONFIG
    except Exception:
        logger.exception("Command failed")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
