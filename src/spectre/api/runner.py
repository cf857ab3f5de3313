"""Background threads that drive plan executions started over HTTP."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spectre.orchestrator import Orchestrator
    from spectre.scheduler import PlanExecutionResult
    from spectre.state_store import ExecutionPlan

logger = logging.getLogger(__name__)

# Track running execution threads per project
_execution_threads: dict[str, threading.Thread] = {}
_results: dict[str, PlanExecutionResult] = {}
_lock = threading.Lock()


def run_execution_sync(orchestrator: Orchestrator, project_id: str, plan_id: str) -> None:
    """Drive a prepared plan to completion.

    This runs in a thread started by start_execution().
    """
    logger.info("Execution thread started for project %s (plan %s)", project_id, plan_id)
    try:
        result = orchestrator.run_prepared_plan(plan_id)
        with _lock:
            _results[project_id] = result
        logger.info(
            "Execution finished for project %s: success=%s, %d/%d steps",
            project_id,
            result.success,
            result.completed_steps,
            result.total_steps,
        )
    except Exception as e:
        logger.exception("Execution thread error for project %s: %s", project_id, e)
    finally:
        with _lock:
            if _execution_threads.get(project_id) is threading.current_thread():
                del _execution_threads[project_id]


def start_execution(orchestrator: Orchestrator, project_id: str) -> ExecutionPlan:
    """Validate and start executing a project's active plan in the background.

    Project, plan and agent checks run synchronously, so their errors reach
    the caller. Step execution happens on a daemon thread.

    Returns:
        The plan, now in EXECUTING status.
    """
    plan = orchestrator.prepare_execution(project_id)

    thread = threading.Thread(
        target=run_execution_sync,
        args=(orchestrator, project_id, plan.id),
        daemon=True,
        name=f"execution-{project_id[:8]}",
    )
    with _lock:
        _results.pop(project_id, None)
        _execution_threads[project_id] = thread
    thread.start()
    logger.info("Started execution thread for project %s", project_id)
    return plan


def is_executing(project_id: str) -> bool:
    """Check if an execution thread is running for a project."""
    with _lock:
        thread = _execution_threads.get(project_id)
    return thread is not None and thread.is_alive()


def wait_for_execution(project_id: str, timeout: float | None = None) -> PlanExecutionResult | None:
    """Wait for a project's execution thread to finish.

    Returns:
        The run's result, or None if it is still running after ``timeout``
        or no run was started.
    """
    with _lock:
        thread = _execution_threads.get(project_id)
    if thread is not None:
        thread.join(timeout)
        if thread.is_alive():
            return None
    with _lock:
        return _results.get(project_id)


def wait_for_all(timeout: float | None = None) -> None:
    """Wait for every execution thread (used on app shutdown)."""
    with _lock:
        threads = list(_execution_threads.values())
    for thread in threads:
        thread.join(timeout)
