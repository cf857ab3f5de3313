"""Planner Agent - turns a project template and requirements into an execution plan."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import TYPE_CHECKING, Any

from spectre.events import EventManager
from spectre.planning import InvalidStepError, PlanTransitionError, TemplateStore
from spectre.state_store import PLAN_TRANSITIONS, ExecutionStep, PlanStatus, StepType

if TYPE_CHECKING:
    from spectre.planning import StepTemplate
    from spectre.state_store import ExecutionPlan, StateStore

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "yes", "on", "1"}

COMPLEXITY_MULTIPLIERS = {
    "high": 1.5,
    "low": 0.8,
}

# Plans in these states still accept new steps.
_EDITABLE_STATUSES = frozenset({PlanStatus.DRAFT, PlanStatus.APPROVED})


def is_enabled(value: Any) -> bool:
    """Whether a requirement value switches an optional step on.

    ``True``, the strings true/yes/on/1 (any case) and non-zero numbers count
    as enabled. Everything else, including missing keys, does not.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, int | float):
        return value != 0
    return False


def complexity_multiplier(requirements: dict[str, Any]) -> float:
    """Duration multiplier for the ``complexity`` requirement."""
    complexity = requirements.get("complexity")
    if isinstance(complexity, str):
        return COMPLEXITY_MULTIPLIERS.get(complexity.strip().lower(), 1.0)
    return 1.0


def scale_duration(base: int, multiplier: float) -> int:
    """Scale a duration in minutes, rounding half up."""
    return math.floor(base * multiplier + 0.5)


class PlannerAgent:
    """Agent that builds and edits execution plans.

    Selects template steps according to the project's requirements, gives
    each step a fresh ID, keeps the dependency chain connected across
    excluded steps and persists the result as a DRAFT plan.
    """

    name = "planner"
    description = "Breaks tasks into detailed steps; updates plan as needed"
    version = "1.0.0"

    def __init__(
        self,
        state_store: StateStore,
        template_store: TemplateStore | None = None,
        event_manager: EventManager | None = None,
    ) -> None:
        """Initialize the Planner.

        Args:
            state_store: StateStore instance for plan persistence.
            template_store: Template lookup. Defaults to the built-in templates.
            event_manager: Telemetry sink.
        """
        self.state_store = state_store
        self.template_store = template_store or TemplateStore()
        self.event_manager = event_manager or EventManager()
        self._stamp_lock = threading.Lock()
        self._last_stamp = 0

    def health(self) -> dict[str, Any]:
        """Return planner health."""
        return {
            "status": "healthy",
            "plans": self.state_store.count_plans(),
            "templates": len(self.template_store),
        }

    # --- Plan creation ---

    def create_plan(
        self,
        project_id: str,
        project_type: str,
        requirements: dict[str, Any] | None = None,
    ) -> ExecutionPlan:
        """Create a DRAFT plan for a project.

        Args:
            project_id: Owning project ID.
            project_type: Project type used to pick the template.
            requirements: Requirement map (``cms``, ``monitoring``, ``complexity``...).

        Returns:
            The persisted plan with its steps.

        Raises:
            UnknownProjectTypeError: If there is no template for the type.
            ProjectNotFoundError: If the project doesn't exist.
        """
        requirements = dict(requirements or {})
        self.event_manager.success(
            self.name,
            "plan_creation_started",
            project_id=project_id,
            context=f"Creating execution plan for {project_type} project",
        )

        template = self.template_store.template_for(project_type)
        steps = self.build_steps(template, requirements)
        plan = self.state_store.create_plan(
            project_id=project_id,
            project_type=str(project_type),
            steps=steps,
            requirements=requirements,
        )

        logger.info(
            "Created plan %s for project %s with %d steps (%d minutes)",
            plan.id,
            project_id,
            len(plan.steps),
            plan.estimated_duration,
        )
        self.event_manager.success(
            self.name,
            "plan_created",
            project_id=project_id,
            context=f"Execution plan created with {len(plan.steps)} steps",
            metadata={"plan_id": plan.id, "estimated_duration": plan.estimated_duration},
        )
        return plan

    def build_steps(
        self, template: tuple[StepTemplate, ...], requirements: dict[str, Any]
    ) -> list[ExecutionStep]:
        """Turn template steps into fresh, unsaved ExecutionSteps.

        Args:
            template: Steps in ascending order.
            requirements: Requirement map that gates optional steps.

        Returns:
            Kept steps in template order with remapped dependencies.
        """
        stamp = self._next_stamp()
        multiplier = complexity_multiplier(requirements)

        # template ID -> new step IDs that stand in for it
        resolved: dict[str, list[str]] = {}
        steps: list[ExecutionStep] = []

        for item in template:
            dependencies: list[str] = []
            for dep in item.dependencies:
                for new_id in resolved[dep]:
                    if new_id not in dependencies:
                        dependencies.append(new_id)

            if not self._is_kept(item, requirements):
                # Dependents of an excluded step inherit its dependencies.
                resolved[item.id] = dependencies
                logger.debug("Excluded optional step %s", item.id)
                continue

            step_id = f"{item.id}_{stamp}"
            resolved[item.id] = [step_id]
            steps.append(
                ExecutionStep(
                    id=step_id,
                    name=item.name,
                    description=item.description,
                    step_type=item.step_type.value,
                    dependencies=dependencies,
                    estimated_duration=scale_duration(item.estimated_duration, multiplier),
                    required=item.required,
                    order=item.order,
                )
            )

        return steps

    @staticmethod
    def _is_kept(item: StepTemplate, requirements: dict[str, Any]) -> bool:
        if item.required:
            return True
        if item.requirement_key is None:
            return False
        return is_enabled(requirements.get(item.requirement_key))

    def _next_stamp(self) -> int:
        with self._stamp_lock:
            self._last_stamp = max(time.time_ns(), self._last_stamp + 1)
            return self._last_stamp

    # --- Plan edits ---

    def get_plan(self, plan_id: str) -> ExecutionPlan:
        """Get a plan by ID.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
        """
        return self.state_store.get_plan(plan_id)

    def list_project_plans(self, project_id: str) -> list[ExecutionPlan]:
        """All plans of a project, most recent first."""
        return self.state_store.list_plans(project_id=project_id)

    def approve_plan(self, plan_id: str) -> ExecutionPlan:
        """Move a DRAFT plan to APPROVED.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
            PlanTransitionError: If the plan is not a draft.
        """
        return self.update_plan(plan_id, status=PlanStatus.APPROVED)

    def update_plan(
        self,
        plan_id: str,
        status: PlanStatus | None = None,
        requirements: dict[str, Any] | None = None,
    ) -> ExecutionPlan:
        """Update a plan's status and/or requirement snapshot.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
            PlanTransitionError: If the status change is not a forward move.
        """
        plan = self.state_store.get_plan(plan_id)
        previous = plan.plan_status

        if status is not None and status != previous and status not in PLAN_TRANSITIONS[previous]:
            raise PlanTransitionError(
                f"Cannot move plan {plan_id} from {previous.value} to {status.value}"
            )

        updated = self.state_store.update_plan(
            plan_id,
            status=status if status != previous else None,
            requirements=requirements,
        )
        self._plan_updated(updated, previous)
        return updated

    def add_step(
        self,
        plan_id: str,
        name: str,
        step_type: str,
        order: int,
        step_id: str | None = None,
        description: str = "",
        dependencies: list[str] | None = None,
        estimated_duration: int = 0,
        required: bool = True,
    ) -> ExecutionPlan:
        """Add a custom step to a plan that has not started executing.

        Args:
            plan_id: Target plan.
            name: Step name.
            step_type: One of the StepType values.
            order: Rank; must be unused and greater than every dependency's order.
            step_id: Explicit step ID. Generated when omitted.
            description: Step description.
            dependencies: IDs of steps in the same plan.
            estimated_duration: Duration in minutes.
            required: Whether the step gates plan completion.

        Returns:
            The updated plan.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
            PlanTransitionError: If the plan is executing or finished.
            InvalidStepError: If the step breaks the plan's ordering rules.
        """
        plan = self.state_store.get_plan(plan_id)
        if plan.plan_status not in _EDITABLE_STATUSES:
            raise PlanTransitionError(
                f"Cannot add steps to plan {plan_id} in status {plan.status}"
            )

        if not name:
            raise InvalidStepError("Step name is required")
        try:
            step_type = StepType(step_type).value
        except ValueError:
            raise InvalidStepError(f"Unknown step type: {step_type}") from None
        if estimated_duration < 0:
            raise InvalidStepError("Estimated duration must not be negative")

        step_id = step_id or f"custom_{self._next_stamp()}"
        dependencies = list(dependencies or [])
        existing = {step.id: step for step in plan.steps}

        if step_id in existing:
            raise InvalidStepError(f"Step {step_id} already exists in plan {plan_id}")
        if any(step.order == order for step in plan.steps):
            raise InvalidStepError(f"Order {order} is already used in plan {plan_id}")
        for dep in dependencies:
            if dep not in existing:
                raise InvalidStepError(f"Unknown dependency: {dep}")
            if existing[dep].order >= order:
                raise InvalidStepError(
                    f"Step order {order} must be greater than dependency {dep} "
                    f"(order {existing[dep].order})"
                )

        step = ExecutionStep(
            id=step_id,
            name=name,
            description=description,
            step_type=step_type,
            dependencies=dependencies,
            estimated_duration=estimated_duration,
            required=required,
            order=order,
        )
        updated = self.state_store.add_step(plan_id, step)
        logger.info("Added step %s to plan %s", step_id, plan_id)
        self._plan_updated(updated, plan.plan_status)
        return updated

    def _plan_updated(self, plan: ExecutionPlan, previous: PlanStatus) -> None:
        self.event_manager.success(
            self.name,
            "plan_updated",
            project_id=plan.project_id,
            context=f"Plan {plan.id} updated",
            metadata={"plan_id": plan.id, "status": plan.status},
        )
        self.event_manager.emit_plan_updated(
            plan_id=plan.id,
            project_id=plan.project_id,
            status=plan.status,
            previous_status=previous.value,
        )
