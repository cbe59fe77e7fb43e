"""Default department catalogue.

Agents are registered with their intent tables only; concrete tools live
outside this package and are attached with `agent.register_tool(...)`.
"""

from __future__ import annotations

from agency_orchestrator.agents.intent_agent import Intent, IntentDrivenAgent
from agency_orchestrator.agents.registry import AgentRegistry

CONSTRUCTION_DESCRIPTION = (
    "Manages construction projects, including project tracking, material cost "
    "estimation, timelines, and safety checklists."
)
MANUFACTURING_DESCRIPTION = (
    "Manages manufacturing operations, including inventory, production, quality "
    "control, and equipment maintenance."
)
HR_DESCRIPTION = (
    "Handles Human Resources inquiries, including questions about company policies, "
    "benefits, and leave."
)


def construction_agent() -> IntentDrivenAgent:
    return IntentDrivenAgent(
        "Construction",
        CONSTRUCTION_DESCRIPTION,
        "construction",
        [
            Intent("Create Project", "CREATE_PROJECT", "project_tracker", "create",
                   ("create project", "new project")),
            Intent("List Projects", "LIST_PROJECTS", "project_tracker", "list",
                   ("list project", "show project")),
            Intent("Calculate Material Cost", "CALCULATE_COST", "material_cost_calculator",
                   "calculate", ("material cost", "calculate cost")),
            Intent("Estimate Timeline", "ESTIMATE_TIMELINE", "timeline_estimator", "estimate",
                   ("timeline", "schedule")),
            Intent("Safety Checklist", "SAFETY_CHECKLIST", "safety_checklist_generator",
                   "generate", ("safety", "checklist")),
            Intent("Export PDF", "EXPORT_PDF", "pdf_generator", None, ("export pdf", "pdf report")),
        ],
    )


def manufacturing_agent() -> IntentDrivenAgent:
    return IntentDrivenAgent(
        "Manufacturing",
        MANUFACTURING_DESCRIPTION,
        "manufacturing",
        [
            Intent("Add Inventory Item", "ADD_ITEM", "inventory_tracker", "add_item",
                   ("add item", "new item", "create item")),
            Intent("Update Stock", "UPDATE_STOCK", "inventory_tracker", "update_stock",
                   ("update stock", "adjust stock", "set quantity", "change stock")),
            Intent("Check Stock", "CHECK_STOCK", "inventory_tracker", "check_stock",
                   ("check stock", "current stock", "how many", "inventory status")),
            Intent("List Inventory", "LIST_ITEMS", "inventory_tracker", "list_items",
                   ("list items", "show directory", "all items", "inventory list")),
            Intent("Schedule Run", "SCHEDULE_RUN", "production_scheduler", "schedule_run",
                   ("schedule run", "plan production", "new run")),
            Intent("List Runs", "LIST_RUNS", "production_scheduler", "list_runs",
                   ("list runs", "show schedules", "production status")),
            Intent("Maintenance List", "LIST_EQUIPMENT", "equipment_maintenance", "list_equipment",
                   ("list equipment", "machine status", "equipment list")),
        ],
    )


def hr_agent() -> IntentDrivenAgent:
    return IntentDrivenAgent(
        "HR",
        HR_DESCRIPTION,
        "hr",
        [
            Intent("Ask HR Policy", "QUERY_POLICY", "hr_policy_tool", "query",
                   ("policy", "leave", "benefits", "conduct", "handbook", "401k", "vacation",
                    "sick day")),
            Intent("Search Employee", "SEARCH_EMPLOYEE", "employee_directory", "search",
                   ("search", "find", "lookup", "directory", "who is", "employee info")),
        ],
    )


def build_default_registry() -> AgentRegistry:
    registry = AgentRegistry()
    registry.register("construction", construction_agent())
    registry.register("manufacturing", manufacturing_agent())
    registry.register("hr", hr_agent())
    return registry
