"""Graph-shaped workflows on LangGraph.

The linear engine covers ordered steps with skip predicates. When control flow
needs real branching or loops, a `GraphWorkflow` names its nodes and wires
them with static edges or edge selectors; a selector inspects the state and
returns the next node name or `END`.

Node actions share the linear step contract (`WorkflowState -> StepResult`),
so the same step functions can be used in either shape. A failing node records
its error and ends the run.
"""

from __future__ import annotations

import logging
import operator
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, TypedDict

from langgraph.graph import END, START, StateGraph

from agency_orchestrator.workflows.engine import build_result
from agency_orchestrator.workflows.types import (
    StepAction,
    StepResult,
    WorkflowOptions,
    WorkflowResult,
    WorkflowState,
    WorkflowStatus,
)

logger = logging.getLogger(__name__)

EdgeSelector = Callable[[WorkflowState], str]

DEFAULT_RECURSION_LIMIT = 50

__all__ = ["END", "EdgeSelector", "GraphNode", "GraphWorkflow"]


def _merge_data(current: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    return {**current, **update}


class GraphRunState(TypedDict):
    workflow_id: str
    session_id: str
    total_steps: int
    data: Annotated[dict[str, Any], _merge_data]
    results: Annotated[list[Any], operator.add]
    errors: Annotated[list[str], operator.add]
    completed: Annotated[int, operator.add]


@dataclass(frozen=True, slots=True)
class GraphNode:
    name: str
    action: StepAction
    description: str = ""


def _view(state: GraphRunState) -> WorkflowState:
    return WorkflowState(
        workflow_id=state["workflow_id"],
        session_id=state["session_id"],
        total_steps=state["total_steps"],
        current_step=state["completed"],
        status=WorkflowStatus.RUNNING,
        data=dict(state["data"]),
        results=list(state["results"]),
        errors=list(state["errors"]),
    )


class GraphWorkflow:
    """A named set of nodes wired by edges, compiled lazily to a LangGraph graph."""

    def __init__(self, workflow_id: str, name: str, description: str = "") -> None:
        self.id = workflow_id
        self.name = name
        self.description = description
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, str | EdgeSelector] = {}
        self._entry: str | None = None
        self._compiled: Any = None

    @property
    def nodes(self) -> list[str]:
        return list(self._nodes)

    def add_node(self, name: str, action: StepAction, description: str = "") -> GraphWorkflow:
        if name in self._nodes:
            raise ValueError(f"Node already defined: {name}")
        self._nodes[name] = GraphNode(name=name, action=action, description=description)
        self._compiled = None
        return self

    def set_entry(self, name: str) -> GraphWorkflow:
        self._entry = name
        self._compiled = None
        return self

    def add_edge(self, source: str, target: str) -> GraphWorkflow:
        return self._set_edge(source, target)

    def add_conditional_edge(self, source: str, selector: EdgeSelector) -> GraphWorkflow:
        return self._set_edge(source, selector)

    def _set_edge(self, source: str, edge: str | EdgeSelector) -> GraphWorkflow:
        if source in self._edges:
            raise ValueError(f"Node already has an outgoing edge: {source}")
        self._edges[source] = edge
        self._compiled = None
        return self

    def compile(self) -> Any:
        if self._compiled is not None:
            return self._compiled
        if not self._nodes:
            raise ValueError(f"Graph workflow {self.id!r} has no nodes")
        entry = self._entry or next(iter(self._nodes))
        unknown = [
            name
            for name in [entry, *self._edges, *(e for e in self._edges.values() if isinstance(e, str))]
            if name not in self._nodes and name != END
        ]
        if unknown:
            raise ValueError(f"Graph workflow {self.id!r} references unknown nodes: {unknown}")

        graph = StateGraph(GraphRunState)
        for node in self._nodes.values():
            graph.add_node(node.name, self._node_runner(node))
            graph.add_conditional_edges(node.name, self._edge_router(node.name))
        graph.add_edge(START, entry)

        self._compiled = graph.compile()
        return self._compiled

    def _node_runner(self, node: GraphNode) -> Callable[[GraphRunState], Any]:
        async def run(state: GraphRunState) -> dict[str, Any]:
            view = _view(state)
            log_extra = {"workflow_id": view.workflow_id, "node": node.name}
            logger.info("Executing node", extra=log_extra)
            try:
                result = await node.action(view)
            except Exception as e:
                result = StepResult.fail(str(e) or type(e).__name__)

            if result.success:
                return {"data": view.data, "results": [result.data], "completed": 1}

            error = f"Node {node.name}: {result.error or 'Unknown error'}"
            logger.error("Node failed", extra={**log_extra, "error": result.error})
            return {"data": view.data, "errors": [error]}

        return run

    def _edge_router(self, source: str) -> Callable[[GraphRunState], str]:
        edge = self._edges.get(source)

        def route(state: GraphRunState) -> str:
            if state["errors"] or edge is None:
                return END
            if isinstance(edge, str):
                return edge
            return edge(_view(state))

        return route

    async def run(
        self, options: WorkflowOptions, *, recursion_limit: int = DEFAULT_RECURSION_LIMIT
    ) -> WorkflowResult:
        started = time.monotonic()
        initial: GraphRunState = {
            "workflow_id": str(uuid.uuid4()),
            "session_id": options.session_id,
            "total_steps": len(self._nodes),
            "data": dict(options.context or {}),
            "results": [],
            "errors": [],
            "completed": 0,
        }
        logger.info(
            "Starting graph workflow",
            extra={"workflow_id": initial["workflow_id"], "workflow": self.id},
        )

        # Last full state seen; survives a failure part-way through the run.
        final: dict[str, Any] = dict(initial)
        try:
            async for snapshot in self.compile().astream(
                initial, config={"recursion_limit": recursion_limit}, stream_mode="values"
            ):
                final = snapshot
        except Exception as e:
            logger.exception("Graph workflow failed", extra={"workflow_id": initial["workflow_id"]})
            final = {**final, "errors": [*final["errors"], f"Workflow error: {e}"]}

        state = WorkflowState(
            workflow_id=initial["workflow_id"],
            session_id=options.session_id,
            total_steps=initial["total_steps"],
            current_step=final["completed"],
            status=WorkflowStatus.FAILED if final["errors"] else WorkflowStatus.COMPLETED,
            data=dict(final["data"]),
            results=list(final["results"]),
            errors=list(final["errors"]),
        )
        return build_result(self.name, state, final["completed"], time.monotonic() - started)
