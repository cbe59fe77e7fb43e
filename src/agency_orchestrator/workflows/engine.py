"""Linear workflow execution.

Steps run strictly in definition order against one mutable `WorkflowState`.
A step whose condition is false is skipped without a trace. A failing step is
recorded, then the run either stops (default) or continues
(`continue_on_error`). Failures are reported in the `WorkflowResult`; the
engine never raises to its caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import UTC, datetime

from agency_orchestrator.workflows.types import (
    StepResult,
    WorkflowDefinition,
    WorkflowOptions,
    WorkflowResult,
    WorkflowState,
    WorkflowStatus,
    WorkflowStep,
    classify_outcome,
    result_message,
)

logger = logging.getLogger(__name__)


class StepFailed(RuntimeError):
    """Passed to a step's error handler when the action reported failure."""


class WorkflowEngine:
    """Execute workflow definitions."""

    def __init__(self, *, step_timeout: float | None = None) -> None:
        self._step_timeout = step_timeout

    async def execute(self, definition: WorkflowDefinition, options: WorkflowOptions) -> WorkflowResult:
        started = time.monotonic()
        state = WorkflowState(
            workflow_id=str(uuid.uuid4()),
            session_id=options.session_id,
            total_steps=len(definition.steps),
            status=WorkflowStatus.RUNNING,
            # Copy so steps can write freely without touching the caller's mapping.
            data=dict(options.context or {}),
        )
        timeout = options.step_timeout if options.step_timeout is not None else self._step_timeout
        log_extra = {"workflow_id": state.workflow_id, "workflow": definition.id}

        logger.info(
            "Starting workflow execution",
            extra={**log_extra, "total_steps": state.total_steps},
        )

        steps_completed = 0
        try:
            for index, step in enumerate(definition.steps, start=1):
                state.current_step = index
                step_extra = {**log_extra, "step": index, "step_name": step.name}

                outcome = await self._run_step(step, state, timeout)
                if outcome is None:
                    logger.info("Skipping step due to condition", extra=step_extra)
                    continue

                result, exc = outcome
                if result.success:
                    state.results.append(result.data)
                    steps_completed += 1
                    logger.info("Step completed successfully", extra=step_extra)
                    continue

                error = result.error or "Unknown error"
                state.errors.append(f"Step {index} ({step.name}): {error}")
                logger.error("Step failed", extra={**step_extra, "error": error})

                await self._handle_error(step, exc or StepFailed(error), state, step_extra)

                if not options.continue_on_error:
                    state.status = WorkflowStatus.FAILED
                    break

            if state.status is not WorkflowStatus.FAILED:
                state.status = WorkflowStatus.COMPLETED
        except Exception as e:
            logger.exception("Workflow execution failed", extra=log_extra)
            state.errors.append(f"Workflow error: {e}")
            state.status = WorkflowStatus.FAILED

        state.completed_at = datetime.now(UTC)
        result = build_result(definition.name, state, steps_completed, time.monotonic() - started)

        logger.info(
            "Workflow execution completed",
            extra={
                **log_extra,
                "status": result.status.value,
                "steps_completed": steps_completed,
                "total_steps": state.total_steps,
                "execution_time": result.execution_time,
            },
        )
        return result

    async def _run_step(
        self, step: WorkflowStep, state: WorkflowState, timeout: float | None
    ) -> tuple[StepResult, Exception | None] | None:
        """Evaluate the condition and run the action.

        Returns None when the step is skipped; otherwise the result and, if the
        action raised, the exception.
        """
        try:
            if step.condition is not None and not step.condition(state):
                return None
            if timeout is None:
                result = await step.action(state)
            else:
                result = await asyncio.wait_for(step.action(state), timeout=timeout)
        except TimeoutError as e:
            if timeout is not None:
                return StepResult.fail(f"Step timed out after {timeout}s"), e
            return StepResult.fail(str(e) or "TimeoutError"), e
        except Exception as e:
            return StepResult.fail(str(e) or type(e).__name__), e
        return result, None

    async def _handle_error(
        self,
        step: WorkflowStep,
        exc: Exception,
        state: WorkflowState,
        step_extra: dict[str, object],
    ) -> None:
        if step.on_error is None:
            return
        try:
            await step.on_error(exc, state)
        except Exception:
            logger.exception("Step error handler raised", extra=step_extra)


def build_result(
    name: str, state: WorkflowState, steps_completed: int, execution_time: float
) -> WorkflowResult:
    status = classify_outcome(len(state.errors), steps_completed)
    return WorkflowResult(
        workflow_id=state.workflow_id,
        workflow_name=name,
        session_id=state.session_id,
        success=state.status is WorkflowStatus.COMPLETED and not state.errors,
        status=status,
        run_status=state.status,
        message=result_message(
            name, status, steps_completed, state.total_steps, len(state.errors)
        ),
        results=list(state.results),
        errors=list(state.errors),
        execution_time=execution_time,
        steps_completed=steps_completed,
        total_steps=state.total_steps,
        data=dict(state.data),
    )
