"""Agent capability model.

An agent is a named handler for one department. It owns a set of tools and
exposes a single message-processing entry point; everything department
specific lives behind those two surfaces.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Protocol

from agency_orchestrator.agents.types import AgentResponse, IntentDetection, ToolResult

logger = logging.getLogger(__name__)


class Tool(Protocol):
    """A single capability invoked by name with a parameter payload."""

    name: str
    description: str

    async def execute(self, params: Mapping[str, Any]) -> ToolResult: ...


class BaseAgent(ABC):
    """Abstract base class for department agents.

    Subclasses provide `supported_actions()` and `process_message()`; tool
    bookkeeping and tool dispatch are shared.
    """

    def __init__(self, name: str, description: str) -> None:
        self._name = name
        self._description = description
        self._tools: dict[str, Tool] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    def register_tool(self, tool: Tool) -> None:
        """Make a tool available to this agent.

        Args:
            tool: Tool instance; replaces any tool already registered under the same name.
        """
        if tool.name in self._tools:
            logger.warning(
                "Tool already registered; overwriting",
                extra={"agent": self._name, "tool": tool.name},
            )
        self._tools[tool.name] = tool
        logger.info("Registered tool", extra={"agent": self._name, "tool": tool.name})

    def tools(self) -> list[Tool]:
        return list(self._tools.values())

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    async def execute_tool(self, name: str, params: Mapping[str, Any]) -> ToolResult:
        """Execute a registered tool by name.

        Args:
            name: Tool name.
            params: Parameter payload passed through untouched.

        Returns:
            The tool's result. An unknown tool or a tool that raises yields a
            failed ToolResult instead of an exception.
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.error("Tool not found", extra={"agent": self._name, "tool": name})
            return ToolResult.fail(f'Tool "{name}" is not available.')

        logger.info("Executing tool", extra={"agent": self._name, "tool": name})
        try:
            result = await tool.execute(params)
        except Exception as e:
            logger.exception("Tool raised", extra={"agent": self._name, "tool": name})
            return ToolResult.fail(str(e) or type(e).__name__)

        logger.info(
            "Tool execution completed",
            extra={"agent": self._name, "tool": name, "success": result.success},
        )
        return result

    def capabilities(self) -> str:
        """Human-readable description of the agent and its tools."""

        lines = [f"  - {tool.name}: {tool.description}" for tool in self._tools.values()]
        tool_block = "\n".join(lines) if lines else "  (No tools registered)"
        return f"{self._name} Agent: {self._description}\n\nAvailable Tools:\n{tool_block}"

    @abstractmethod
    def supported_actions(self) -> list[str]:
        """Discrete action identifiers this agent understands."""

    @abstractmethod
    async def process_message(
        self,
        message: str,
        session_id: str,
        context: Mapping[str, Any] | None = None,
        detection: IntentDetection | None = None,
    ) -> AgentResponse:
        """Handle one inbound message.

        Args:
            message: The user's input message.
            session_id: Conversation identifier.
            context: Caller context merged with any extracted parameters.
            detection: The routing decision that selected this agent, if any.

        Returns:
            The agent's response.
        """
