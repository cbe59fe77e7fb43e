"""Workflow catalogue: keyed storage plus free-text detection."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from agency_orchestrator.workflows.types import ContextValidation, WorkflowDefinition

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """Holds workflow definitions in registration order."""

    def __init__(self, definitions: list[WorkflowDefinition] | None = None) -> None:
        self._workflows: dict[str, WorkflowDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    def register(self, definition: WorkflowDefinition) -> None:
        if definition.id in self._workflows:
            logger.warning(
                "Workflow already registered; overwriting", extra={"workflow": definition.id}
            )
        self._workflows[definition.id] = definition
        logger.info(
            "Registered workflow",
            extra={"workflow": definition.id, "workflow_name": definition.name},
        )

    def get(self, workflow_id: str) -> WorkflowDefinition | None:
        return self._workflows.get(workflow_id)

    def all(self) -> list[WorkflowDefinition]:
        return list(self._workflows.values())

    def detect(self, message: str) -> WorkflowDefinition | None:
        """First workflow (registration order) with a keyword contained in the message."""

        message_lower = message.lower()
        for definition in self._workflows.values():
            matches = [
                kw for kw in definition.keywords if kw.strip() and kw.lower() in message_lower
            ]
            if matches:
                logger.info(
                    "Detected workflow",
                    extra={"workflow": definition.id, "matched_keywords": matches},
                )
                return definition
        return None

    @staticmethod
    def validate_context(
        definition: WorkflowDefinition, context: Mapping[str, Any] | None
    ) -> ContextValidation:
        context = context or {}
        missing = tuple(field for field in definition.required_context if _is_blank(context.get(field)))
        return ContextValidation(valid=not missing, missing=missing)

    def describe(self, workflow_id: str) -> dict[str, object] | None:
        definition = self._workflows.get(workflow_id)
        if definition is None:
            return None
        out = definition.to_json()
        out["steps"] = [
            {
                "step": index,
                "name": step.name,
                "description": step.description,
                "agent": step.agent,
                "tool": step.tool,
                "has_condition": step.condition is not None,
                "has_error_handler": step.on_error is not None,
            }
            for index, step in enumerate(definition.steps, start=1)
        ]
        return out

    def stats(self) -> dict[str, object]:
        return {
            "total_workflows": len(self._workflows),
            "workflows": [
                {"id": d.id, "name": d.name, "steps": len(d.steps)} for d in self._workflows.values()
            ],
        }

    def __len__(self) -> int:
        return len(self._workflows)


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
