from agency_orchestrator.workflows.engine import StepFailed, WorkflowEngine
from agency_orchestrator.workflows.graph import END, GraphWorkflow
from agency_orchestrator.workflows.predefined import (
    default_workflows,
    employee_onboarding,
    inventory_restock,
    onboarding_graph,
    project_kickoff,
)
from agency_orchestrator.workflows.registry import WorkflowRegistry
from agency_orchestrator.workflows.types import (
    ContextValidation,
    ResultStatus,
    StepResult,
    WorkflowDefinition,
    WorkflowOptions,
    WorkflowResult,
    WorkflowState,
    WorkflowStatus,
    WorkflowStep,
)

__all__ = [
    "END",
    "ContextValidation",
    "GraphWorkflow",
    "ResultStatus",
    "StepFailed",
    "StepResult",
    "WorkflowDefinition",
    "WorkflowEngine",
    "WorkflowOptions",
    "WorkflowRegistry",
    "WorkflowResult",
    "WorkflowState",
    "WorkflowStatus",
    "WorkflowStep",
    "default_workflows",
    "employee_onboarding",
    "inventory_restock",
    "onboarding_graph",
    "project_kickoff",
]
