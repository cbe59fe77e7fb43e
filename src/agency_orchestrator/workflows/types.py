from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class WorkflowStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ResultStatus(str, Enum):
    """Terminal classification of a finished run.

    PARTIAL is derived after the fact: some steps succeeded, some failed.
    """

    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StepResult:
    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None

    @staticmethod
    def ok(data: Any = None, message: str | None = None) -> StepResult:
        return StepResult(success=True, data=data, message=message)

    @staticmethod
    def fail(error: str) -> StepResult:
        return StepResult(success=False, error=error)


@dataclass(slots=True)
class WorkflowState:
    """Mutable state threaded through one workflow run.

    `data` carries outputs between steps: each step sees everything written by
    the steps that ran before it.
    """

    workflow_id: str
    session_id: str
    total_steps: int
    current_step: int = 0
    status: WorkflowStatus = WorkflowStatus.PENDING
    data: dict[str, Any] = field(default_factory=dict)
    results: list[Any] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None


StepAction = Callable[[WorkflowState], Awaitable[StepResult]]
StepCondition = Callable[[WorkflowState], bool]
StepErrorHandler = Callable[[Exception, WorkflowState], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    name: str
    description: str
    action: StepAction
    condition: StepCondition | None = None
    on_error: StepErrorHandler | None = None
    # Documentation only; the engine never reads these.
    agent: str | None = None
    tool: str | None = None


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    id: str
    name: str
    description: str
    steps: tuple[WorkflowStep, ...]
    keywords: tuple[str, ...] = ()
    required_context: tuple[str, ...] = ()

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "keywords": list(self.keywords),
            "required_context": list(self.required_context),
            "steps": len(self.steps),
        }


@dataclass(frozen=True, slots=True)
class WorkflowOptions:
    session_id: str
    context: Mapping[str, Any] | None = None
    continue_on_error: bool = False
    step_timeout: float | None = None


@dataclass(frozen=True, slots=True)
class ContextValidation:
    valid: bool
    missing: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class WorkflowResult:
    workflow_id: str
    workflow_name: str
    session_id: str
    success: bool
    status: ResultStatus
    run_status: WorkflowStatus
    message: str
    results: list[Any]
    errors: list[str]
    execution_time: float
    steps_completed: int
    total_steps: int
    data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, object]:
        return {
            "workflow_id": self.workflow_id,
            "workflow_name": self.workflow_name,
            "session_id": self.session_id,
            "success": self.success,
            "status": self.status.value,
            "run_status": self.run_status.value,
            "message": self.message,
            "results": self.results,
            "errors": list(self.errors),
            "execution_time": self.execution_time,
            "steps_completed": self.steps_completed,
            "total_steps": self.total_steps,
        }


def classify_outcome(error_count: int, steps_completed: int) -> ResultStatus:
    if error_count == 0:
        return ResultStatus.COMPLETED
    if steps_completed > 0:
        return ResultStatus.PARTIAL
    return ResultStatus.FAILED


def result_message(name: str, status: ResultStatus, steps_completed: int, total: int, errors: int) -> str:
    if status is ResultStatus.COMPLETED:
        return f"{name} completed successfully ({steps_completed}/{total} steps)"
    if status is ResultStatus.PARTIAL:
        return f"{name} partially completed ({steps_completed}/{total} steps). {errors} error(s)."
    return f"{name} failed. {errors} error(s)."
