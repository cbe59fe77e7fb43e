"""Ready-to-use business workflows.

Every step reaches its department agent through the `AgentRegistry` it was
built with and calls one tool. A missing agent or a failed tool call is a
step failure, never an exception. Steps hand identifiers forward through
`state.data` (e.g. `employee_id` created in step 1 is used by steps 2 to 4).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

from agency_orchestrator.agents.registry import AgentRegistry
from agency_orchestrator.workflows.graph import END, GraphWorkflow
from agency_orchestrator.workflows.types import (
    StepCondition,
    StepResult,
    WorkflowDefinition,
    WorkflowState,
    WorkflowStep,
)

logger = logging.getLogger(__name__)

ParamsBuilder = Callable[[WorkflowState], dict[str, Any]]
SuccessHook = Callable[[WorkflowState, Any], str | None]

DEFAULT_REORDER_POINT = 50
DEFAULT_MAX_STOCK = 200
DEFAULT_UNIT_COST = 10


def _field(data: Any, *keys: str, default: Any = None) -> Any:
    """Read a nested key from a tool payload without trusting its shape."""
    current = data
    for key in keys:
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


def _email_not_configured(error: str) -> bool:
    return "not configured" in error.lower()


def tool_step(
    agents: AgentRegistry,
    *,
    name: str,
    description: str,
    department: str,
    tool: str,
    params: ParamsBuilder,
    on_success: SuccessHook | None = None,
    condition: StepCondition | None = None,
    tolerate: Callable[[str], bool] | None = None,
) -> WorkflowStep:
    """Build a step that invokes one department tool.

    Args:
        agents: Registry the department agent is looked up in at run time.
        params: Builds the tool payload from the current state.
        on_success: Writes outputs into `state.data`; returns the step message.
        tolerate: Errors for which the step is reported as skipped instead of failed.
    """

    async def action(state: WorkflowState) -> StepResult:
        agent = agents.get(department)
        if agent is None:
            return StepResult.fail(f"{department} agent not found")

        result = await agent.execute_tool(tool, params(state))
        if result.success:
            message = on_success(state, result.data) if on_success else None
            return StepResult.ok(result.data, message)

        error = result.error or "Unknown error"
        if tolerate is not None and tolerate(error):
            logger.warning("Tolerated tool failure", extra={"tool": tool, "error": error})
            return StepResult.ok(None, f"{name} skipped: {error}")
        return StepResult.fail(error)

    return WorkflowStep(
        name=name,
        description=description,
        action=action,
        condition=condition,
        agent=department,
        tool=tool,
    )


# --- Employee onboarding ---------------------------------------------------


def _employee_params(state: WorkflowState) -> dict[str, Any]:
    d = state.data
    first, last = str(d["first_name"]), str(d["last_name"])
    return {
        "action": "create",
        "first_name": first,
        "last_name": last,
        "email": d.get("email") or f"{first.lower()}.{last.lower()}@company.com",
        "phone": d.get("phone"),
        "department": d["department"],
        "position": d["position"],
        "start_date": d.get("start_date") or date.today().isoformat(),
        "salary": d.get("salary"),
    }


def _store_employee(state: WorkflowState, data: Any) -> str:
    employee_id = _field(data, "employee", "employee_id") or _field(data, "employee_id")
    state.data["employee_id"] = employee_id
    return f"Created employee: {employee_id}"


def _checklist_params(state: WorkflowState) -> dict[str, Any]:
    return {
        "action": "generate",
        "employee_id": state.data.get("employee_id"),
        "role": state.data["position"],
        "department": state.data["department"],
    }


def _store_checklist(state: WorkflowState, data: Any) -> str:
    state.data["checklist_id"] = _field(data, "checklist_id")
    state.data["total_tasks"] = _field(data, "total_tasks", default=0)
    return f"Generated checklist with {state.data['total_tasks']} tasks"


def _performance_goals_step(agents: AgentRegistry) -> WorkflowStep:
    async def action(state: WorkflowState) -> StepResult:
        agent = agents.get("hr")
        if agent is None:
            return StepResult.fail("hr agent not found")

        today = date.today()
        goals = [
            {
                "title": "Complete onboarding checklist",
                "description": "Finish all onboarding tasks",
                "category": "onboarding",
                "priority": "high",
                "due_date": (today + timedelta(days=30)).isoformat(),
            },
            {
                "title": "90-day performance review",
                "description": "Complete first performance review",
                "category": "performance",
                "priority": "medium",
                "due_date": (today + timedelta(days=90)).isoformat(),
            },
        ]

        created = []
        for goal in goals:
            result = await agent.execute_tool(
                "performance_tracker",
                {"action": "create_goal", "employee_id": state.data.get("employee_id"), **goal},
            )
            if result.success:
                created.append(result.data)

        state.data["goals_created"] = len(created)
        return StepResult.ok(created, f"Created {len(created)} performance goals")

    return WorkflowStep(
        name="Set Performance Goals",
        description="Create initial 30 and 90 day performance goals",
        action=action,
        agent="hr",
        tool="performance_tracker",
    )


def _welcome_email_params(state: WorkflowState) -> dict[str, Any]:
    d = state.data
    body = (
        f"Hi {d['first_name']},\n\n"
        f"Welcome to {d['department']}! We're excited to have you join us as {d['position']}.\n\n"
        f"Your onboarding checklist has {d.get('total_tasks', 0)} tasks to complete.\n"
        "We've also set up your initial performance goals.\n\n"
        f"Employee ID: {d.get('employee_id')}\n"
        f"Start Date: {d.get('start_date') or date.today().isoformat()}\n\n"
        "Best regards,\nHR Team"
    )
    return {
        "to": d["email"],
        "subject": f"Welcome to the team, {d['first_name']}!",
        "body": body,
    }


def employee_onboarding(agents: AgentRegistry) -> WorkflowDefinition:
    return WorkflowDefinition(
        id="employee_onboarding",
        name="Employee Onboarding",
        description=(
            "Complete employee onboarding: create record, checklist, goals, "
            "and send welcome email"
        ),
        keywords=("hire", "onboard", "new employee", "recruit"),
        required_context=("first_name", "last_name", "position", "department"),
        steps=(
            tool_step(
                agents,
                name="Create Employee Record",
                description="Create employee in HR system",
                department="hr",
                tool="employee_directory",
                params=_employee_params,
                on_success=_store_employee,
            ),
            tool_step(
                agents,
                name="Generate Onboarding Checklist",
                description="Create role-based onboarding checklist",
                department="hr",
                tool="onboarding_checklist",
                params=_checklist_params,
                on_success=_store_checklist,
            ),
            _performance_goals_step(agents),
            tool_step(
                agents,
                name="Send Welcome Email",
                description="Send welcome email with onboarding information",
                department="hr",
                tool="email_sender",
                params=_welcome_email_params,
                condition=lambda state: bool(state.data.get("email")),
                tolerate=_email_not_configured,
            ),
        ),
    )


# --- Project kickoff -------------------------------------------------------

DEFAULT_MATERIALS: tuple[dict[str, Any], ...] = (
    {"name": "Concrete", "quantity": 100, "unit": "cubic yards"},
    {"name": "Steel", "quantity": 50, "unit": "tons"},
    {"name": "Lumber", "quantity": 200, "unit": "board feet"},
)


def _project_params(state: WorkflowState) -> dict[str, Any]:
    d = state.data
    return {
        "action": "create",
        "name": d["project_name"],
        "location": d["location"],
        "type": d["type"],
        "status": "planning",
        "budget": d.get("budget", 500_000),
        "start_date": d.get("start_date") or date.today().isoformat(),
    }


def _store_project(state: WorkflowState, data: Any) -> str:
    state.data["project_id"] = _field(data, "project_id")
    return f"Created project: {state.data['project_id']}"


def _store_costs(state: WorkflowState, data: Any) -> str:
    state.data["total_cost"] = _field(data, "total_cost")
    state.data["material_breakdown"] = _field(data, "breakdown")
    return f"Estimated material cost: {state.data['total_cost']}"


def _store_timeline(state: WorkflowState, data: Any) -> str:
    state.data["estimated_duration"] = _field(data, "estimated_duration")
    state.data["milestones"] = _field(data, "milestones", default=[])
    return f"Estimated duration: {state.data['estimated_duration']} days"


def _store_safety(state: WorkflowState, data: Any) -> str:
    state.data["safety_items"] = _field(data, "total_items")
    return f"Generated safety checklist with {state.data['safety_items']} items"


def _project_report_params(state: WorkflowState) -> dict[str, Any]:
    d = state.data
    content = "\n".join(
        [
            "PROJECT KICKOFF REPORT",
            "======================",
            "",
            f"Project: {d['project_name']}",
            f"ID: {d.get('project_id')}",
            f"Location: {d['location']}",
            f"Type: {d['type']}",
            "",
            f"Total Material Cost: {d.get('total_cost', 'N/A')}",
            f"Estimated Duration: {d.get('estimated_duration', 'N/A')} days",
            f"Milestones: {len(d.get('milestones') or [])}",
            f"Safety Checklist Items: {d.get('safety_items', 'N/A')}",
            "",
            f"Generated: {datetime.now(UTC).isoformat()}",
        ]
    )
    return {"content": content, "filename": f"project_kickoff_{d.get('project_id')}.pdf"}


def project_kickoff(agents: AgentRegistry) -> WorkflowDefinition:
    return WorkflowDefinition(
        id="project_kickoff",
        name="Project Kickoff",
        description=(
            "Complete project setup: create project, calculate costs, estimate timeline, "
            "generate safety checklist, and export PDF"
        ),
        keywords=("new project", "start project", "kickoff", "project setup", "begin project"),
        required_context=("project_name", "location", "type"),
        steps=(
            tool_step(
                agents,
                name="Create Project Record",
                description="Create project in construction system",
                department="construction",
                tool="project_tracker",
                params=_project_params,
                on_success=_store_project,
            ),
            tool_step(
                agents,
                name="Calculate Material Costs",
                description="Estimate material costs for project",
                department="construction",
                tool="material_cost_calculator",
                params=lambda state: {
                    "action": "calculate",
                    "project_id": state.data.get("project_id"),
                    "materials": state.data.get("materials") or [dict(m) for m in DEFAULT_MATERIALS],
                },
                on_success=_store_costs,
            ),
            tool_step(
                agents,
                name="Estimate Project Timeline",
                description="Generate project timeline and milestones",
                department="construction",
                tool="timeline_estimator",
                params=lambda state: {
                    "action": "estimate",
                    "project_id": state.data.get("project_id"),
                    "project_type": state.data["type"],
                    "complexity": state.data.get("complexity", "medium"),
                },
                on_success=_store_timeline,
            ),
            tool_step(
                agents,
                name="Generate Safety Checklist",
                description="Create project-specific safety checklist",
                department="construction",
                tool="safety_checklist_generator",
                params=lambda state: {
                    "action": "generate",
                    "project_id": state.data.get("project_id"),
                    "project_type": state.data["type"],
                    "location": state.data["location"],
                },
                on_success=_store_safety,
            ),
            tool_step(
                agents,
                name="Export Project Plan",
                description="Generate comprehensive PDF report",
                department="construction",
                tool="pdf_generator",
                params=_project_report_params,
                on_success=lambda state, data: "Project plan exported to PDF",
            ),
        ),
    )


# --- Inventory restock -----------------------------------------------------


def _store_inventory(state: WorkflowState, data: Any) -> str:
    inventory = _field(data, "inventory", default=[]) or []
    state.data["all_inventory"] = inventory
    state.data["total_items"] = _field(data, "count", default=len(inventory))
    return f"Checked {state.data['total_items']} inventory items"


async def _identify_low_stock(state: WorkflowState) -> StepResult:
    low = [
        item
        for item in state.data.get("all_inventory", [])
        if item.get("quantity", 0) <= item.get("reorder_point", DEFAULT_REORDER_POINT)
    ]
    state.data["low_stock_items"] = low
    state.data["low_stock_count"] = len(low)
    return StepResult.ok(
        {"low_stock_items": low, "count": len(low)},
        f"Found {len(low)} items below reorder threshold",
    )


async def _calculate_reorder(state: WorkflowState) -> StepResult:
    reorder_list = []
    for item in state.data.get("low_stock_items", []):
        current = item.get("quantity", 0)
        reorder_point = item.get("reorder_point", DEFAULT_REORDER_POINT)
        max_stock = item.get("max_stock", DEFAULT_MAX_STOCK)
        quantity = max(max_stock - current, reorder_point)
        reorder_list.append(
            {
                "item_id": item.get("item_id"),
                "name": item.get("name"),
                "current_quantity": current,
                "reorder_quantity": quantity,
                "estimated_cost": item.get("unit_cost", DEFAULT_UNIT_COST) * quantity,
                "supplier": item.get("supplier", "Default Supplier"),
            }
        )

    total = sum(entry["estimated_cost"] for entry in reorder_list)
    state.data["reorder_list"] = reorder_list
    state.data["total_reorder_cost"] = total
    return StepResult.ok(
        {"reorder_list": reorder_list, "total_cost": total},
        f"Calculated reorder for {len(reorder_list)} items, total cost: {total}",
    )


def _procurement_email_params(state: WorkflowState) -> dict[str, Any]:
    d = state.data
    lines = "\n".join(
        f"- {entry['name']}: {entry['reorder_quantity']} units ({entry['estimated_cost']})"
        for entry in d.get("reorder_list", [])
    )
    body = (
        "INVENTORY RESTOCK ALERT\n\n"
        f"Low Stock Items: {d['low_stock_count']}\n"
        f"Total Reorder Cost: {d.get('total_reorder_cost', 0)}\n\n"
        f"ITEMS TO REORDER:\n{lines}\n\n"
        f"Generated: {datetime.now(UTC).isoformat()}"
    )
    return {
        "to": d.get("procurement_email") or "procurement@company.com",
        "subject": f"Inventory Restock Required - {d['low_stock_count']} Items",
        "body": body,
    }


def inventory_restock(agents: AgentRegistry) -> WorkflowDefinition:
    return WorkflowDefinition(
        id="inventory_restock",
        name="Inventory Restock",
        description=(
            "Analyze inventory levels, identify low stock, calculate reorder quantities, "
            "and generate procurement report"
        ),
        keywords=("restock", "reorder", "inventory low", "stock check", "replenish"),
        required_context=(),
        steps=(
            tool_step(
                agents,
                name="Check Inventory Levels",
                description="Analyze current inventory status",
                department="manufacturing",
                tool="inventory_tracker",
                params=lambda state: {"action": "list"},
                on_success=_store_inventory,
            ),
            WorkflowStep(
                name="Identify Low Stock Items",
                description="Find items below reorder threshold",
                action=_identify_low_stock,
                agent="manufacturing",
            ),
            WorkflowStep(
                name="Calculate Reorder Quantities",
                description="Determine reorder amounts",
                action=_calculate_reorder,
                agent="manufacturing",
            ),
            tool_step(
                agents,
                name="Generate Procurement Report",
                description="Create CSV report for procurement team",
                department="manufacturing",
                tool="csv_generator",
                params=lambda state: {
                    "data": state.data.get("reorder_list", []),
                    "filename": f"inventory_restock_{date.today().isoformat()}.csv",
                },
                on_success=lambda state, data: "Procurement report exported to CSV",
            ),
            tool_step(
                agents,
                name="Send Procurement Summary",
                description="Email summary to procurement team (if configured)",
                department="manufacturing",
                tool="email_sender",
                params=_procurement_email_params,
                condition=lambda state: state.data.get("low_stock_count", 0) > 0,
                tolerate=_email_not_configured,
            ),
        ),
    )


def default_workflows(agents: AgentRegistry) -> list[WorkflowDefinition]:
    return [employee_onboarding(agents), project_kickoff(agents), inventory_restock(agents)]


# --- Graph variant ---------------------------------------------------------


def onboarding_graph(agents: AgentRegistry) -> GraphWorkflow:
    """Onboarding as a graph: create, checklist, then email only when an address was given."""

    steps = {step.name: step for step in employee_onboarding(agents).steps}
    graph = GraphWorkflow(
        "employee_onboarding_graph",
        "Employee Onboarding (graph)",
        "Create the employee record and checklist; email when an address is known",
    )
    graph.add_node("create_employee", steps["Create Employee Record"].action)
    graph.add_node("generate_checklist", steps["Generate Onboarding Checklist"].action)
    graph.add_node("send_email", steps["Send Welcome Email"].action)
    graph.set_entry("create_employee")
    graph.add_edge("create_employee", "generate_checklist")
    graph.add_conditional_edge(
        "generate_checklist",
        lambda state: "send_email" if state.data.get("email") else END,
    )
    return graph
