"""Executor Agent - runs the simulated work for a step."""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any

from spectre.agents.exceptions import MissingHandlerError
from spectre.agents.models import StepExecutionResult
from spectre.events import EventManager
from spectre.logging import truncate_output
from spectre.state_store import StepType

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from spectre.state_store import ExecutionStep

    StepHandler = Callable[[ExecutionStep, str], str | None]

logger = logging.getLogger(__name__)

DEFAULT_SECONDS_PER_MINUTE = 0.01
DEFAULT_MAX_STEP_SECONDS = 5.0

_WORK_DESCRIPTIONS = {
    StepType.SETUP: "Prepared project scaffolding",
    StepType.PLANNING: "Produced design and architecture notes",
    StepType.DEVELOPMENT: "Generated application code",
    StepType.TESTING: "Ran test suite",
    StepType.DEPLOYMENT: "Deployed build artifacts",
    StepType.INTEGRATION: "Connected external services",
    StepType.INFRASTRUCTURE: "Provisioned infrastructure",
    StepType.ANALYSIS: "Analyzed requirements",
}


class ExecutorAgent:
    """Agent that executes one step through a per-type handler table.

    Default handlers simulate work by sleeping for a time proportional to the
    step's estimated duration. Handlers may be replaced per step type; the
    table must cover every StepType.
    """

    name = "executor"
    description = "Runs code generation and deployment logic"
    version = "1.0.0"

    def __init__(
        self,
        handlers: Mapping[StepType, StepHandler] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        seconds_per_minute: float = DEFAULT_SECONDS_PER_MINUTE,
        max_step_seconds: float = DEFAULT_MAX_STEP_SECONDS,
        event_manager: EventManager | None = None,
    ) -> None:
        """Initialize the Executor.

        Args:
            handlers: Overrides for the default per-type handlers. A handler
                receives the step and project ID and returns optional output;
                raising marks the step as failed.
            sleep: Sleep function used by the simulated work.
            seconds_per_minute: Wall-clock seconds per estimated step minute.
            max_step_seconds: Upper bound on simulated work for one step.
            event_manager: Telemetry sink.

        Raises:
            MissingHandlerError: If a step type would be left without a handler.
        """
        self.sleep = sleep
        self.seconds_per_minute = seconds_per_minute
        self.max_step_seconds = max_step_seconds
        self.event_manager = event_manager or EventManager()

        table: dict[StepType, StepHandler] = {
            step_type: self._simulate_work for step_type in StepType
        }
        if handlers:
            table.update({StepType(key): handler for key, handler in handlers.items()})
        missing = [step_type.value for step_type in StepType if table.get(step_type) is None]
        if missing:
            raise MissingHandlerError(f"No executor handler for step types: {', '.join(missing)}")
        self._handlers = table

        self._active = 0
        self._executed = 0
        self._counter_lock = threading.Lock()

    def health(self) -> dict[str, Any]:
        """Return executor health."""
        with self._counter_lock:
            return {
                "status": "healthy",
                "active_executions": self._active,
                "executed_steps": self._executed,
            }

    def simulated_seconds(self, step: ExecutionStep) -> float:
        """Wall-clock time the default handler spends on a step."""
        return min(step.estimated_duration * self.seconds_per_minute, self.max_step_seconds)

    def execute_step(self, step: ExecutionStep, project_id: str) -> StepExecutionResult:
        """Execute one step.

        Never mutates the step and never raises for handler errors.

        Args:
            step: The step to execute.
            project_id: Owning project ID (for telemetry).

        Returns:
            StepExecutionResult with success flag, timing and captured error.
        """
        logger.info("Executing step %s (%s)", step.id, step.step_type)
        self.event_manager.success(
            self.name,
            "step_execution_started",
            project_id=project_id,
            context=f"Executing step: {step.name}",
            metadata={"step_id": step.id, "step_type": step.step_type},
        )

        with self._counter_lock:
            self._active += 1
        started = time.monotonic()
        try:
            handler = self._handlers[StepType(step.step_type)]
            output = handler(step, project_id) or ""
        except Exception as e:
            duration = time.monotonic() - started
            error = str(e) or type(e).__name__
            logger.error("Step %s failed: %s", step.id, error)
            self.event_manager.failure(
                self.name,
                "step_execution_failed",
                error=error,
                project_id=project_id,
                context=step.name,
                metadata={"step_id": step.id},
            )
            return StepExecutionResult(
                success=False, step_id=step.id, duration_seconds=duration, error=error
            )
        finally:
            with self._counter_lock:
                self._active -= 1
                self._executed += 1

        duration = time.monotonic() - started
        logger.debug("Step %s output: %s", step.id, truncate_output(output, 500))
        self.event_manager.success(
            self.name,
            "step_execution_completed",
            project_id=project_id,
            context=f"Step completed: {step.name}",
            metadata={"step_id": step.id, "duration_seconds": round(duration, 3)},
        )
        return StepExecutionResult(
            success=True, step_id=step.id, duration_seconds=duration, output=output
        )

    def _simulate_work(self, step: ExecutionStep, project_id: str) -> str:
        seconds = self.simulated_seconds(step)
        if seconds > 0:
            self.sleep(seconds)
        summary = _WORK_DESCRIPTIONS[StepType(step.step_type)]
        return f"{summary} for '{step.name}' in {step.estimated_duration} simulated minutes"
