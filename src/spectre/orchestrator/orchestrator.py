"""Orchestrator - Project and plan state machine management."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any

from spectre.agents import AgentRegistry, StepExecutionResult
from spectre.orchestrator.exceptions import (
    InvalidProjectError,
    InvalidTransitionError,
    OrchestratorShutdownError,
)
from spectre.orchestrator.models import SystemHealth
from spectre.scheduler import PlanExecutionResult, StepOutcome, StepScheduler
from spectre.state_store import (
    PLAN_TRANSITIONS,
    PROJECT_TRANSITIONS,
    PlanNotFoundError,
    PlanStatus,
    ProjectStatus,
    ProjectType,
    StepStatus,
)
from spectre.state_store.models import utcnow

if TYPE_CHECKING:
    from spectre.agents import Agent, QuestionSession, ValidationResult
    from spectre.events import EventManager, TelemetryEvent
    from spectre.state_store import ExecutionPlan, ExecutionStep, Project, StateStore

logger = logging.getLogger(__name__)

SOURCE = "orchestrator"

_STARTABLE = frozenset({ProjectStatus.PLANNING, ProjectStatus.STOPPED})
_PLANNABLE = frozenset({ProjectStatus.PLANNING, ProjectStatus.ACTIVE})
_EXECUTABLE_PLANS = frozenset({PlanStatus.DRAFT, PlanStatus.APPROVED})


class Orchestrator:
    """Owns the project and plan lifecycles and drives plan execution.

    The Orchestrator is the only component that changes project status and
    execution-time plan/step status. It:
    - Keeps the agent registry (planner, executor, reviewer, validator, questioner)
    - Creates, starts, stops and deletes projects
    - Asks the planner for plans and tracks each project's active plan
    - Dispatches ready steps to the executor, then the reviewer
    - Skips the descendants of failed steps and aggregates the outcome
    - Runs the validator on completed plans
    - Emits telemetry and state change events
    """

    def __init__(
        self,
        state_store: StateStore,
        event_manager: EventManager,
        registry: AgentRegistry | None = None,
        max_parallel_steps: int = 1,
    ) -> None:
        """Initialize the Orchestrator.

        Args:
            state_store: StateStore instance for persistence.
            event_manager: EventManager instance for telemetry and events.
            registry: Agent registry. A new empty one is created if omitted.
            max_parallel_steps: Steps of independent subtrees that may run at once.
        """
        if max_parallel_steps < 1:
            raise ValueError("max_parallel_steps must be at least 1")
        self.state_store = state_store
        self.event_manager = event_manager
        self.registry = registry if registry is not None else AgentRegistry(event_manager)
        self.max_parallel_steps = max_parallel_steps
        self._lock = threading.RLock()
        self._shutdown = False
        self._started_at = time.monotonic()
        # project ID -> ID of the plan its live run is driving
        self._executing: dict[str, str] = {}
        self._stop_requested: set[str] = set()  # plan IDs

    @property
    def is_shutdown(self) -> bool:
        """Whether shutdown() has been called."""
        return self._shutdown

    def _ensure_running(self) -> None:
        if self._shutdown:
            raise OrchestratorShutdownError("Orchestrator has been shut down")

    # --- Agents ---

    def register_agent(self, agent: Agent) -> None:
        """Register an agent, replacing any agent with the same name."""
        self._ensure_running()
        self.registry.register(agent)

    def get_agent(self, name: str) -> Agent | None:
        """Get a registered agent by name, or None."""
        self._ensure_running()
        return self.registry.get(name)

    def list_agents(self) -> list[Agent]:
        """Registered agents in registration order."""
        self._ensure_running()
        return self.registry.list()

    def _agent(self, name: str) -> Any:
        return self.registry.require(name)

    def _ensure_no_live_run(self, project_id: str, action: str) -> None:
        # A stopped run keeps the project until its in-flight steps drain.
        if project_id in self._executing:
            raise InvalidTransitionError(
                f"Cannot {action} project {project_id} while plan "
                f"{self._executing[project_id]} is still finishing"
            )

    # --- Projects ---

    def create_project(
        self,
        name: str,
        project_type: str,
        description: str = "",
        requirements: dict[str, Any] | None = None,
    ) -> Project:
        """Create a project in PLANNING status.

        Raises:
            InvalidProjectError: If the name is empty or the type is unsupported.
        """
        self._ensure_running()
        if not name or not name.strip():
            raise InvalidProjectError("Project name is required")
        if project_type not in {t.value for t in ProjectType}:
            raise InvalidProjectError(f"Unsupported project type: {project_type}")

        project = self.state_store.create_project(
            name=name.strip(),
            project_type=project_type,
            description=description,
            requirements=requirements,
        )
        logger.info("Created project %s (%s)", project.id, project.project_type)
        self.event_manager.success(
            SOURCE,
            "project_created",
            project_id=project.id,
            context=f"Project created: {project.name}",
            metadata={"project_type": project.project_type},
        )
        return project

    def get_project(self, project_id: str) -> Project:
        """Get a project by ID.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
        """
        self._ensure_running()
        return self.state_store.get_project(project_id)

    def list_projects(self, status: ProjectStatus | None = None) -> list[Project]:
        """List projects, oldest first."""
        self._ensure_running()
        return self.state_store.list_projects(status=status)

    def update_project(
        self,
        project_id: str,
        name: str | None = None,
        description: str | None = None,
        requirements: dict[str, Any] | None = None,
    ) -> Project:
        """Update a project's descriptive fields.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            InvalidProjectError: If the new name is empty.
        """
        self._ensure_running()
        if name is not None and not name.strip():
            raise InvalidProjectError("Project name must not be empty")
        project = self.state_store.update_project(
            project_id,
            name=name.strip() if name is not None else None,
            description=description,
            requirements=requirements,
        )
        self.event_manager.success(
            SOURCE, "project_updated", project_id=project_id, context="Project details updated"
        )
        return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project and its plans.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            InvalidTransitionError: If the project is executing.
        """
        self._ensure_running()
        with self._lock:
            project = self.state_store.get_project(project_id)
            if project.project_status == ProjectStatus.EXECUTING:
                raise InvalidTransitionError(f"Cannot delete project {project_id} while executing")
            self._ensure_no_live_run(project_id, "delete")
            self.state_store.delete_project(project_id)
        logger.info("Deleted project %s", project_id)
        self.event_manager.success(SOURCE, "project_deleted", project_id=project_id)

    def start_project(self, project_id: str) -> Project:
        """Move a PLANNING or STOPPED project to ACTIVE.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            InvalidTransitionError: From any other status, or while a stopped run
                is still finishing its in-flight steps.
        """
        self._ensure_running()
        with self._lock:
            project = self.state_store.get_project(project_id)
            if project.project_status not in _STARTABLE:
                raise InvalidTransitionError(
                    f"Cannot start project {project_id} in status {project.status}"
                )
            self._ensure_no_live_run(project_id, "start")
            project = self._set_project_status(project, ProjectStatus.ACTIVE)
        self.event_manager.success(
            SOURCE, "project_started", project_id=project_id, context="Project is active"
        )
        return project

    def stop_project(self, project_id: str) -> Project:
        """Stop a project.

        Stopping an executing project cancels its run: no further steps are
        dispatched, pending steps are skipped and the plan fails.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            InvalidTransitionError: If the project is already finished or stopped.
        """
        self._ensure_running()
        with self._lock:
            project = self.state_store.get_project(project_id)
            if ProjectStatus.STOPPED not in PROJECT_TRANSITIONS[project.project_status]:
                raise InvalidTransitionError(
                    f"Cannot stop project {project_id} in status {project.status}"
                )
            if project_id in self._executing:
                self._stop_requested.add(self._executing[project_id])
            project = self._set_project_status(project, ProjectStatus.STOPPED)
        self.event_manager.warning(
            SOURCE, "project_stopped", context="Project stopped", project_id=project_id
        )
        return project

    def apply_question_answers(self, project_id: str, answers: dict[str, list[str]]) -> Project:
        """Merge collected answers into the project's requirements under ``answers``.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
        """
        self._ensure_running()
        with self._lock:
            project = self.state_store.get_project(project_id)
            requirements = dict(project.requirements)
            merged = dict(requirements.get("answers") or {})
            merged.update({key: list(value) for key, value in answers.items()})
            requirements["answers"] = merged
            project = self.state_store.update_project(project_id, requirements=requirements)
        self.event_manager.success(
            SOURCE,
            "requirements_updated",
            project_id=project_id,
            context=f"Merged answers for {len(answers)} question patterns",
        )
        return project

    # --- Plans ---

    def generate_execution_plan(self, project_id: str) -> ExecutionPlan:
        """Ask the planner for a new plan and make it the project's active plan.

        Raises:
            AgentUnavailableError: If no planner is registered.
            ProjectNotFoundError: If the project doesn't exist.
            InvalidTransitionError: If the project is executing, stopped or finished.
            UnknownProjectTypeError: If there is no template for the project type.
        """
        self._ensure_running()
        planner = self._agent("planner")
        with self._lock:
            project = self.state_store.get_project(project_id)
            if project.project_status not in _PLANNABLE:
                raise InvalidTransitionError(
                    f"Cannot plan project {project_id} in status {project.status}"
                )
            self._ensure_no_live_run(project_id, "plan")
            plan = planner.create_plan(project.id, project.project_type, project.requirements)
            self.state_store.update_project(project_id, active_plan_id=plan.id)

        logger.info("Project %s active plan is now %s", project_id, plan.id)
        self.event_manager.success(
            SOURCE,
            "plan_generated",
            project_id=project_id,
            context=f"Execution plan generated with {len(plan.steps)} steps",
            metadata={"plan_id": plan.id, "estimated_duration": plan.estimated_duration},
        )
        return plan

    def get_active_plan(self, project_id: str) -> ExecutionPlan:
        """Get the project's active plan.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            PlanNotFoundError: If the project has no plan yet.
        """
        self._ensure_running()
        project = self.state_store.get_project(project_id)
        if project.active_plan_id is None:
            raise PlanNotFoundError(f"Project with id '{project_id}' has no execution plan")
        return self.state_store.get_plan(project.active_plan_id)

    def get_plan(self, plan_id: str) -> ExecutionPlan:
        """Get a plan by ID.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
        """
        self._ensure_running()
        return self.state_store.get_plan(plan_id)

    def list_plans(self, project_id: str | None = None) -> list[ExecutionPlan]:
        """List plans, most recent first."""
        self._ensure_running()
        if project_id is not None:
            self.state_store.get_project(project_id)
        return self.state_store.list_plans(project_id=project_id)

    def approve_plan(self, plan_id: str) -> ExecutionPlan:
        """Approve a DRAFT plan.

        Raises:
            PlanNotFoundError: If the plan doesn't exist.
            InvalidTransitionError: If the plan is not a draft.
        """
        self._ensure_running()
        with self._lock:
            plan = self.state_store.get_plan(plan_id)
            return self._set_plan_status(plan, PlanStatus.APPROVED)

    def add_plan_step(self, plan_id: str, **step: Any) -> ExecutionPlan:
        """Add a custom step to a plan through the planner.

        Raises:
            AgentUnavailableError: If no planner is registered.
            PlanNotFoundError: If the plan doesn't exist.
            InvalidStepError: If the step breaks the plan's ordering rules.
        """
        self._ensure_running()
        planner = self._agent("planner")
        with self._lock:
            return planner.add_step(plan_id, **step)

    # --- Execution ---

    def execute_project_plan(self, project_id: str) -> PlanExecutionResult:
        """Execute the project's active plan to completion.

        Step failures are reported in the result, never raised.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            PlanNotFoundError: If the project has no plan.
            AgentUnavailableError: If the executor or reviewer is missing.
            InvalidTransitionError: If the project is not active or the plan
                has already run.
        """
        plan = self.prepare_execution(project_id)
        return self.run_prepared_plan(plan.id)

    def prepare_execution(self, project_id: str) -> ExecutionPlan:
        """Check a project can execute and move it and its plan to EXECUTING.

        A DRAFT plan is approved first. Raises the same errors as
        ``execute_project_plan``.
        """
        self._ensure_running()
        with self._lock:
            project = self.state_store.get_project(project_id)
            plan = self.get_active_plan(project_id)
            self._agent("executor")
            self._agent("reviewer")

            if project.project_status != ProjectStatus.ACTIVE:
                raise InvalidTransitionError(
                    f"Project {project_id} must be active to execute (status {project.status})"
                )
            if plan.plan_status not in _EXECUTABLE_PLANS:
                raise InvalidTransitionError(
                    f"Plan {plan.id} cannot be executed in status {plan.status}"
                )
            self._ensure_no_live_run(project_id, "execute")

            if plan.plan_status == PlanStatus.DRAFT:
                plan = self._set_plan_status(plan, PlanStatus.APPROVED)
            self._set_project_status(project, ProjectStatus.EXECUTING)
            plan = self._set_plan_status(plan, PlanStatus.EXECUTING)
            self._executing[project_id] = plan.id
            self._stop_requested.discard(plan.id)

        self.event_manager.success(
            SOURCE,
            "execution_started",
            project_id=project_id,
            context=f"Executing plan with {len(plan.steps)} steps",
            metadata={"plan_id": plan.id},
        )
        return plan

    def run_prepared_plan(self, plan_id: str) -> PlanExecutionResult:
        """Drive an EXECUTING plan until no step can run.

        Args:
            plan_id: A plan moved to EXECUTING by ``prepare_execution``.

        Returns:
            PlanExecutionResult summarizing the run.
        """
        started = time.monotonic()
        plan = self.state_store.get_plan(plan_id)
        project_id = plan.project_id
        try:
            executor = self._agent("executor")
            reviewer = self._agent("reviewer")
            return self._drive(plan, executor, reviewer, started)
        finally:
            with self._lock:
                if self._executing.get(project_id) == plan_id:
                    del self._executing[project_id]
                self._stop_requested.discard(plan_id)

    def _drive(
        self, plan: ExecutionPlan, executor: Any, reviewer: Any, started: float
    ) -> PlanExecutionResult:
        project_id = plan.project_id
        steps = {step.id: step for step in plan.steps}
        scheduler = StepScheduler(plan.steps)
        errors: list[str] = []
        running: dict[Future[StepOutcome], str] = {}

        pool = ThreadPoolExecutor(
            max_workers=self.max_parallel_steps, thread_name_prefix=f"plan-{plan.id[:8]}"
        )
        try:
            while True:
                if self._shutdown:
                    break
                if plan.id not in self._stop_requested:
                    free = self.max_parallel_steps - len(running)
                    for step_id in scheduler.ready()[:free]:
                        step = steps[step_id]
                        if not self._record_step_started(plan, step):
                            break
                        scheduler.mark_running(step_id)
                        future = pool.submit(
                            self._perform_step, step, project_id, executor, reviewer
                        )
                        running[future] = step_id
                if not running:
                    break

                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in sorted(done, key=lambda f: steps[running[f]].order):
                    step_id = running.pop(future)
                    self._record_step_outcome(
                        plan, steps[step_id], future.result(), scheduler, errors
                    )
        finally:
            pool.shutdown(wait=not self._shutdown, cancel_futures=True)

        return self._finish_run(plan, scheduler, errors, started)

    def _perform_step(
        self, step: ExecutionStep, project_id: str, executor: Any, reviewer: Any
    ) -> StepOutcome:
        # Runs on a pool thread: agent calls only, no state writes.
        try:
            execution = executor.execute_step(step, project_id)
        except Exception as e:
            logger.exception("Executor raised for step %s", step.id)
            execution = StepExecutionResult(success=False, step_id=step.id, error=str(e))
        if not execution.success:
            return StepOutcome(step_id=step.id, execution=execution)

        try:
            review = reviewer.review_step(step, project_id)
        except Exception as e:
            logger.exception("Reviewer raised for step %s", step.id)
            execution = StepExecutionResult(
                success=False, step_id=step.id, error=f"Review error: {e}"
            )
            return StepOutcome(step_id=step.id, execution=execution)
        return StepOutcome(step_id=step.id, execution=execution, review=review)

    def _record_step_started(self, plan: ExecutionPlan, step: ExecutionStep) -> bool:
        with self._lock:
            if self._shutdown:
                return False
            self.state_store.update_step(
                step.id, status=StepStatus.IN_PROGRESS, started_at=utcnow()
            )
            self.event_manager.emit_step_updated(
                step.id, plan.id, plan.project_id, StepStatus.IN_PROGRESS.value
            )
        self.event_manager.debug(
            SOURCE,
            "step_started",
            context=f"Dispatched step: {step.name}",
            project_id=plan.project_id,
            metadata={"step_id": step.id},
        )
        return True

    def _record_step_outcome(
        self,
        plan: ExecutionPlan,
        step: ExecutionStep,
        outcome: StepOutcome,
        scheduler: StepScheduler,
        errors: list[str],
    ) -> None:
        details: dict[str, Any] = {
            "duration_seconds": round(outcome.execution.duration_seconds, 3),
        }
        if outcome.execution.output:
            details["output"] = outcome.execution.output
        if outcome.review is not None:
            details["review"] = {
                "score": outcome.review.score,
                "issues": outcome.review.issues,
                "feedback": outcome.review.feedback,
            }

        with self._lock:
            if self._shutdown:
                return
            if outcome.passed:
                scheduler.mark_completed(step.id)
                self._write_step(plan, step.id, StepStatus.COMPLETED, None, details)
                self.event_manager.success(
                    SOURCE,
                    "step_completed",
                    project_id=plan.project_id,
                    context=f"Step completed: {step.name}",
                    metadata={"step_id": step.id},
                )
                return

            error = outcome.error or "Step failed"
            errors.append(f"{step.name}: {error}")
            blocked = scheduler.mark_failed(step.id)
            self._write_step(plan, step.id, StepStatus.FAILED, error, details)
            self.event_manager.failure(
                SOURCE,
                "step_failed",
                error=error,
                project_id=plan.project_id,
                context=step.name,
                metadata={"step_id": step.id, "blocked": blocked},
            )
            for blocked_id in blocked:
                self._write_step(
                    plan,
                    blocked_id,
                    StepStatus.SKIPPED,
                    f"Blocked by failed dependency: {step.id}",
                )

    def _write_step(
        self,
        plan: ExecutionPlan,
        step_id: str,
        status: StepStatus,
        error: str | None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.state_store.update_step(
            step_id, status=status, completed_at=utcnow(), error=error, details=details
        )
        self.event_manager.emit_step_updated(step_id, plan.id, plan.project_id, status.value, error)

    def _finish_run(
        self,
        plan: ExecutionPlan,
        scheduler: StepScheduler,
        errors: list[str],
        started: float,
    ) -> PlanExecutionResult:
        project_id = plan.project_id
        total = len(plan.steps)

        with self._lock:
            if self._shutdown:
                errors.append("Orchestrator shut down during execution")
                logger.warning("Plan %s interrupted by shutdown", plan.id)
                return PlanExecutionResult(
                    success=False,
                    plan_id=plan.id,
                    completed_steps=scheduler.count(StepStatus.COMPLETED),
                    total_steps=total,
                    duration_seconds=time.monotonic() - started,
                    errors=errors,
                )

            stopped = plan.id in self._stop_requested
            if stopped:
                for step_id in scheduler.cancel():
                    self._write_step(plan, step_id, StepStatus.SKIPPED, "Project stopped")
                errors.append("Execution stopped")

            success = not stopped and scheduler.all_required_completed()
            current = self.state_store.get_plan(plan.id)
            self._set_plan_status(current, PlanStatus.COMPLETED if success else PlanStatus.FAILED)
            if not stopped:
                project = self.state_store.get_project(project_id)
                self._set_project_status(
                    project, ProjectStatus.COMPLETED if success else ProjectStatus.FAILED
                )

        result = PlanExecutionResult(
            success=success,
            plan_id=plan.id,
            completed_steps=scheduler.count(StepStatus.COMPLETED),
            total_steps=total,
            duration_seconds=time.monotonic() - started,
            errors=errors,
        )
        logger.info(
            "Plan %s finished: success=%s (%d/%d steps)",
            plan.id,
            success,
            result.completed_steps,
            total,
        )
        if success:
            self.event_manager.success(
                SOURCE,
                "execution_completed",
                project_id=project_id,
                context=f"Plan completed: {result.completed_steps}/{total} steps",
                metadata={"plan_id": plan.id},
            )
            self._run_validator(plan.id, project_id)
        else:
            self.event_manager.failure(
                SOURCE,
                "execution_failed",
                error="; ".join(errors) or "Required steps did not complete",
                project_id=project_id,
                context=f"Plan failed: {result.completed_steps}/{total} steps",
                metadata={"plan_id": plan.id},
            )
        return result

    def _run_validator(self, plan_id: str, project_id: str) -> None:
        validator = self.registry.get("validator")
        if validator is None:
            return
        try:
            self._validate_plan(validator, plan_id, project_id)
        except Exception as e:
            logger.exception("Validation of plan %s raised", plan_id)
            self.event_manager.failure(
                SOURCE, "validation_error", error=str(e), project_id=project_id
            )

    def _validate_plan(self, validator: Any, plan_id: str, project_id: str) -> ValidationResult:
        plan = self.state_store.get_plan(plan_id)
        result = validator.validate_project(plan, project_id)
        with self._lock:
            if not self._shutdown:
                self.state_store.update_plan(plan_id, validation=result.to_dict())
        return result

    def validate_project(self, project_id: str) -> ValidationResult:
        """Validate the project's active plan and store the result on it.

        Raises:
            AgentUnavailableError: If no validator is registered.
            ProjectNotFoundError: If the project doesn't exist.
            PlanNotFoundError: If the project has no plan.
        """
        self._ensure_running()
        validator = self._agent("validator")
        plan = self.get_active_plan(project_id)
        return self._validate_plan(validator, plan.id, project_id)

    # --- Questions ---

    def start_question_session(self, project_id: str) -> QuestionSession:
        """Start a requirements interview for a project.

        Raises:
            AgentUnavailableError: If no questioner is registered.
            ProjectNotFoundError: If the project doesn't exist.
        """
        self._ensure_running()
        questioner = self._agent("questioner")
        project = self.state_store.get_project(project_id)
        return questioner.start_session(project.id, project.project_type)

    def next_question(self, session_id: str) -> str | None:
        """Next unanswered question of a session, or None when done."""
        self._ensure_running()
        return self._agent("questioner").next_question(session_id)

    def submit_answer(self, session_id: str, answer: str) -> QuestionSession:
        """Record an answer to a session's current question."""
        self._ensure_running()
        return self._agent("questioner").submit_answer(session_id, answer)

    def complete_question_session(self, session_id: str) -> Project:
        """Finish a session and merge its answers into the project's requirements."""
        self._ensure_running()
        questioner = self._agent("questioner")
        session = questioner.get_session(session_id)
        answers = questioner.complete_session(session_id)
        return self.apply_question_answers(session.project_id, answers)

    # --- Observability ---

    def get_project_logs(self, project_id: str, limit: int = 50) -> list[TelemetryEvent]:
        """Most recent telemetry records for a project, oldest first.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
        """
        self._ensure_running()
        self.state_store.get_project(project_id)
        return self.event_manager.get_logs(project_id=project_id, limit=limit)

    def get_system_health(self) -> SystemHealth:
        """Snapshot of orchestrator health. Available after shutdown."""
        uptime = time.monotonic() - self._started_at
        with self._lock:
            if self._shutdown:
                return SystemHealth(status="shutdown", uptime_seconds=uptime)
            return SystemHealth(
                status="healthy",
                agents=self.registry.names(),
                project_count=self.state_store.count_projects(),
                plan_count=self.state_store.count_plans(),
                active_executions=len(self._executing),
                uptime_seconds=uptime,
            )

    def shutdown(self) -> None:
        """Stop accepting work, release agents and close the store. Idempotent."""
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
            in_flight = len(self._executing)
            self.registry.clear()
            self.state_store.close()
        logger.info("Orchestrator shut down (%d executions interrupted)", in_flight)
        self.event_manager.warning(
            SOURCE, "shutdown", context=f"Orchestrator shut down; {in_flight} runs interrupted"
        )

    # --- Status helpers ---

    def _set_project_status(self, project: Project, status: ProjectStatus) -> Project:
        previous = project.project_status
        if status not in PROJECT_TRANSITIONS[previous]:
            raise InvalidTransitionError(
                f"Cannot move project {project.id} from {previous.value} to {status.value}"
            )
        updated = self.state_store.update_project(project.id, status=status)
        logger.info(
            "Project %s transitioned from %s to %s", project.id, previous.value, status.value
        )
        self.event_manager.emit_project_updated(project.id, status.value, previous.value)
        return updated

    def _set_plan_status(self, plan: ExecutionPlan, status: PlanStatus) -> ExecutionPlan:
        previous = plan.plan_status
        if status not in PLAN_TRANSITIONS[previous]:
            raise InvalidTransitionError(
                f"Cannot move plan {plan.id} from {previous.value} to {status.value}"
            )
        updated = self.state_store.update_plan(plan.id, status=status)
        logger.info("Plan %s transitioned from %s to %s", plan.id, previous.value, status.value)
        self.event_manager.emit_plan_updated(
            plan.id, plan.project_id, status.value, previous.value
        )
        return updated
