"""Catalogue of department agents.

Registration happens once at start-up; lookups per request never mutate the
registry. Department keys are case-insensitive.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from agency_orchestrator.agents.base import BaseAgent
from agency_orchestrator.agents.types import AgentSummary

logger = logging.getLogger(__name__)


def normalize_department(department: str) -> str:
    return department.strip().lower()


class AgentRegistry:
    """Maps a normalized department key to the agent that handles it.

    The registry holds a shared reference to each agent; it does not copy them.
    """

    def __init__(self) -> None:
        self._agents: dict[str, BaseAgent] = {}

    def register(self, department: str, agent: BaseAgent) -> None:
        """Register an agent for a department.

        Re-registering a department replaces the previous agent (last write wins).
        """
        key = normalize_department(department)
        previous = self._agents.get(key)
        if previous is not None:
            logger.warning(
                "Department already registered; overwriting",
                extra={"department": key, "previous": previous.name, "agent": agent.name},
            )
        self._agents[key] = agent
        logger.info("Registered agent", extra={"department": key, "agent": agent.name})

    def get(self, department: str) -> BaseAgent | None:
        return self._agents.get(normalize_department(department))

    def has(self, department: str) -> bool:
        return normalize_department(department) in self._agents

    def departments(self) -> list[str]:
        """Department keys in registration order."""

        return list(self._agents)

    def items(self) -> Iterator[tuple[str, BaseAgent]]:
        return iter(list(self._agents.items()))

    def summaries(self) -> list[AgentSummary]:
        return [
            AgentSummary(
                department=department,
                name=agent.name,
                description=agent.description,
                supported_actions=tuple(agent.supported_actions()),
            )
            for department, agent in self._agents.items()
        ]

    def capabilities(self) -> dict[str, str]:
        return {department: agent.capabilities() for department, agent in self._agents.items()}

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, department: object) -> bool:
        return isinstance(department, str) and self.has(department)
