"""Agents driven by a declarative intent table.

Each intent maps an action id and trigger keywords onto one tool call. The
agent picks an intent from the router's detected action first and falls back
to keyword matching on the message.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from agency_orchestrator.agents.base import BaseAgent
from agency_orchestrator.agents.types import AgentResponse, IntentDetection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Intent:
    name: str
    action: str
    tool: str
    tool_action: str | None = None
    keywords: tuple[str, ...] = field(default_factory=tuple)

    def matches(self, message_lower: str) -> bool:
        return any(keyword in message_lower for keyword in self.keywords)


class IntentDrivenAgent(BaseAgent):
    """A department agent whose behaviour is a table of intents."""

    def __init__(
        self,
        name: str,
        description: str,
        department: str,
        intents: list[Intent],
    ) -> None:
        super().__init__(name, description)
        self._department = department
        self._intents = list(intents)

    @property
    def department(self) -> str:
        return self._department

    def supported_actions(self) -> list[str]:
        return [intent.action for intent in self._intents]

    def match_intent(self, message: str, detection: IntentDetection | None = None) -> Intent | None:
        if detection is not None and detection.action:
            for intent in self._intents:
                if intent.action == detection.action:
                    return intent

        message_lower = message.lower()
        for intent in self._intents:
            if intent.matches(message_lower):
                return intent
        return None

    async def process_message(
        self,
        message: str,
        session_id: str,
        context: Mapping[str, Any] | None = None,
        detection: IntentDetection | None = None,
    ) -> AgentResponse:
        intent = self.match_intent(message, detection)
        if intent is None:
            return AgentResponse(
                message=self.capabilities(),
                session_id=session_id,
                department=self._department,
            )

        logger.info(
            "Matched intent",
            extra={"agent": self.name, "intent": intent.name, "action": intent.action},
        )

        params: dict[str, Any] = dict(context or {})
        params.pop("department", None)
        if intent.tool_action is not None:
            params["action"] = intent.tool_action

        result = await self.execute_tool(intent.tool, params)
        if result.success:
            text = f"{intent.name}: done"
            if isinstance(result.data, Mapping) and isinstance(result.data.get("message"), str):
                text = result.data["message"]
        else:
            text = f"{intent.name} failed: {result.error}"

        return AgentResponse(
            message=text,
            session_id=session_id,
            tools_used=[intent.tool],
            data=result.data,
            department=self._department,
        )
