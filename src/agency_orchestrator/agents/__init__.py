"""Department agents, their registry, and message routing."""

from agency_orchestrator.agents.base import BaseAgent, Tool
from agency_orchestrator.agents.intent_agent import Intent, IntentDrivenAgent
from agency_orchestrator.agents.registry import AgentRegistry
from agency_orchestrator.agents.router import AgentRouter, IntentResolver
from agency_orchestrator.agents.types import (
    AgentResponse,
    AgentSummary,
    DetectionMethod,
    IntentDetection,
    ToolResult,
)

__all__ = [
    "AgentRegistry",
    "AgentResponse",
    "AgentRouter",
    "AgentSummary",
    "BaseAgent",
    "DetectionMethod",
    "Intent",
    "IntentDetection",
    "IntentDrivenAgent",
    "IntentResolver",
    "Tool",
    "ToolResult",
]
