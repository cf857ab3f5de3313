"""StepScheduler - dependency-ordered dispatch bookkeeping for one plan run."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from spectre.state_store import StepStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from spectre.state_store import ExecutionStep

logger = logging.getLogger(__name__)


class StepScheduler:
    """Tracks step statuses during a run and decides what may run next.

    A step is ready once it is pending and every dependency has completed.
    Ready steps come out in ascending ``order``. When a step fails, every
    pending step that depends on it (directly or transitively) is skipped.
    The scheduler only keeps bookkeeping; callers persist the changes.
    """

    def __init__(self, steps: Iterable[ExecutionStep]) -> None:
        """Initialize from plan steps.

        Args:
            steps: The plan's steps; their current statuses are the start state.
        """
        steps = list(steps)
        self._order = {step.id: step.order for step in steps}
        self._required = {step.id: step.required for step in steps}
        self._dependencies = {step.id: list(step.dependencies) for step in steps}
        self._status = {step.id: StepStatus(step.status) for step in steps}
        self._dependents: dict[str, list[str]] = {step.id: [] for step in steps}
        for step in steps:
            for dep in step.dependencies:
                if dep in self._dependents:
                    self._dependents[dep].append(step.id)

    def status(self, step_id: str) -> StepStatus:
        """Current status of a step."""
        return self._status[step_id]

    def ready(self) -> list[str]:
        """Pending steps whose dependencies have all completed, by order."""
        ready = [
            step_id
            for step_id, status in self._status.items()
            if status == StepStatus.PENDING and self._dependencies_met(step_id)
        ]
        return sorted(ready, key=lambda step_id: self._order[step_id])

    def _dependencies_met(self, step_id: str) -> bool:
        return all(
            self._status.get(dep) == StepStatus.COMPLETED for dep in self._dependencies[step_id]
        )

    def running(self) -> list[str]:
        """Steps currently in progress."""
        return [s for s, status in self._status.items() if status == StepStatus.IN_PROGRESS]

    def pending(self) -> list[str]:
        """Steps that have not started, by order."""
        pending = [s for s, status in self._status.items() if status == StepStatus.PENDING]
        return sorted(pending, key=lambda step_id: self._order[step_id])

    def count(self, status: StepStatus) -> int:
        """Number of steps with the given status."""
        return sum(1 for s in self._status.values() if s == status)

    def mark_running(self, step_id: str) -> None:
        """Mark a ready step as in progress."""
        self._status[step_id] = StepStatus.IN_PROGRESS

    def mark_completed(self, step_id: str) -> None:
        """Mark a step as completed."""
        self._status[step_id] = StepStatus.COMPLETED

    def mark_failed(self, step_id: str) -> list[str]:
        """Mark a step as failed and skip every pending descendant.

        Returns:
            IDs of the steps skipped because of this failure, by order.
        """
        self._status[step_id] = StepStatus.FAILED
        blocked = self.blocked_by(step_id)
        for blocked_id in blocked:
            self._status[blocked_id] = StepStatus.SKIPPED
        if blocked:
            logger.debug("Step %s failed; skipping %s", step_id, ", ".join(blocked))
        return blocked

    def blocked_by(self, step_id: str) -> list[str]:
        """Pending steps that can no longer run because ``step_id`` did not complete."""
        blocked: set[str] = set()
        queue = deque(self._dependents.get(step_id, []))
        while queue:
            current = queue.popleft()
            if current in blocked or self._status[current] != StepStatus.PENDING:
                continue
            blocked.add(current)
            queue.extend(self._dependents[current])
        return sorted(blocked, key=lambda s: self._order[s])

    def cancel(self) -> list[str]:
        """Skip every pending step.

        Returns:
            IDs of the skipped steps, by order.
        """
        cancelled = self.pending()
        for step_id in cancelled:
            self._status[step_id] = StepStatus.SKIPPED
        return cancelled

    @property
    def is_finished(self) -> bool:
        """No step is running and none can start."""
        return not self.running() and not self.ready()

    def all_required_completed(self) -> bool:
        """Whether every required step has completed."""
        return all(
            self._status[step_id] == StepStatus.COMPLETED
            for step_id, required in self._required.items()
            if required
        )
