from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DetectionMethod(str, Enum):
    CONTEXT = "context"
    LEARNED = "learned"
    KEYWORD = "keyword"


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of a single tool call.

    Exactly one of `data` or `error` is meaningful, gated by `success`.
    """

    success: bool
    data: Any = None
    error: str | None = None

    @staticmethod
    def ok(data: Any = None) -> ToolResult:
        return ToolResult(success=True, data=data)

    @staticmethod
    def fail(error: str) -> ToolResult:
        return ToolResult(success=False, error=error)


@dataclass(frozen=True, slots=True)
class AgentSummary:
    """What the resolver and the classifier are allowed to see of an agent."""

    department: str
    name: str
    description: str
    supported_actions: tuple[str, ...] = ()

    def to_json(self) -> dict[str, object]:
        return {
            "department": self.department,
            "name": self.name,
            "description": self.description,
            "supported_actions": list(self.supported_actions),
        }


@dataclass(frozen=True, slots=True)
class IntentDetection:
    """The resolver's routing decision for one message."""

    department: str
    confidence: float
    reason: str
    method: DetectionMethod
    action: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "department": self.department,
            "confidence": self.confidence,
            "reason": self.reason,
            "method": self.method.value,
        }
        if self.action is not None:
            out["action"] = self.action
        if self.parameters:
            out["parameters"] = dict(self.parameters)
        return out


@dataclass(slots=True)
class AgentResponse:
    message: str
    session_id: str
    tools_used: list[str] | None = None
    data: Any = None
    department: str | None = None
    detection: IntentDetection | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"message": self.message, "session_id": self.session_id}
        if self.tools_used:
            out["tools_used"] = list(self.tools_used)
        if self.data is not None:
            out["data"] = self.data
        if self.department is not None:
            out["department"] = self.department
        if self.detection is not None:
            out["detection"] = self.detection.to_json()
        return out
