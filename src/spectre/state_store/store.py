"""StateStore - Main API for State Store operations."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from spectre.state_store.database import MEMORY_PATH, Database
from spectre.state_store.exceptions import (
    PlanNotFoundError,
    ProjectNotFoundError,
    StepExistsError,
    StepNotFoundError,
    StoreClosedError,
)
from spectre.state_store.models import (
    ExecutionPlan,
    ExecutionStep,
    PlanStatus,
    Project,
    ProjectStatus,
    StepStatus,
    utcnow,
)

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from sqlalchemy.orm import Session

_UNSET: Any = object()


class StateStore:
    """Main API for State Store operations.

    Provides CRUD operations for Projects, Execution Plans and their Steps.
    Every call runs in its own short session; access is serialized so one
    store can be shared between the API thread and execution threads.
    Returned objects are detached snapshots.
    """

    def __init__(self, db_path: str = MEMORY_PATH) -> None:
        """Initialize State Store with SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()
        self._lock = threading.RLock()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def close(self) -> None:
        """Close the database connection. Idempotent."""
        with self._lock:
            self._closed = True
            self._db.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            if self._closed:
                raise StoreClosedError("State store is closed")
            session = self._db.get_session()
            try:
                yield session
            finally:
                session.close()

    # --- Project Operations ---

    def create_project(
        self,
        name: str,
        project_type: str,
        description: str = "",
        requirements: dict[str, Any] | None = None,
    ) -> Project:
        """Create a new project in PLANNING status.

        Args:
            name: Human-readable project name
            project_type: One of the ProjectType values
            description: Free-form description
            requirements: Requirement map used for plan generation

        Returns:
            Created Project object with generated ID
        """
        with self._session() as session:
            project = Project(
                name=name,
                project_type=project_type,
                description=description,
                requirements=requirements,
            )
            session.add(project)
            session.commit()
            return project

    def get_project(self, project_id: str) -> Project:
        """Get project by ID.

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        with self._session() as session:
            return self._require_project(session, project_id)

    def list_projects(self, status: ProjectStatus | None = None) -> list[Project]:
        """List projects, oldest first.

        Args:
            status: Filter by project status (optional)
        """
        with self._session() as session:
            stmt = select(Project)
            if status is not None:
                stmt = stmt.where(Project.status == status.value)
            stmt = stmt.order_by(Project.created_at)
            return list(session.execute(stmt).scalars().all())

    def count_projects(self) -> int:
        """Number of stored projects."""
        with self._session() as session:
            return session.execute(select(func.count(Project.id))).scalar_one()

    def update_project(
        self,
        project_id: str,
        name: str | None = None,
        description: str | None = None,
        requirements: dict[str, Any] | None = None,
        status: ProjectStatus | None = None,
        active_plan_id: str | None = None,
    ) -> Project:
        """Update project fields. Only provided fields are updated.

        Status values are written as given; transition rules belong to the
        orchestrator.

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        with self._session() as session:
            project = self._require_project(session, project_id)

            if name is not None:
                project.name = name
            if description is not None:
                project.description = description
            if requirements is not None:
                project.requirements = dict(requirements)
            if status is not None:
                project.status = status.value
            if active_plan_id is not None:
                project.active_plan_id = active_plan_id
            project.updated_at = utcnow()

            session.commit()
            return project

    def delete_project(self, project_id: str) -> None:
        """Delete a project together with its plans.

        Raises:
            ProjectNotFoundError: If project doesn't exist
        """
        with self._session() as session:
            project = self._require_project(session, project_id)
            session.delete(project)
            session.commit()

    # --- Plan Operations ---

    def create_plan(
        self,
        project_id: str,
        project_type: str,
        steps: list[ExecutionStep],
        requirements: dict[str, Any] | None = None,
    ) -> ExecutionPlan:
        """Persist a new DRAFT plan with its steps.

        The estimated duration is the sum of the step durations.

        Raises:
            ProjectNotFoundError: If project doesn't exist
            StepExistsError: If a step ID is already taken
        """
        with self._session() as session:
            self._require_project(session, project_id)
            for step in steps:
                if session.get(ExecutionStep, step.id) is not None:
                    raise StepExistsError(f"Step with id '{step.id}' already exists")

            plan = ExecutionPlan(
                project_id=project_id,
                project_type=project_type,
                estimated_duration=sum(step.estimated_duration for step in steps),
                requirements=requirements,
            )
            plan.steps.extend(steps)
            session.add(plan)
            session.commit()
            return plan

    def get_plan(self, plan_id: str) -> ExecutionPlan:
        """Get plan by ID, steps loaded in order.

        Raises:
            PlanNotFoundError: If plan doesn't exist
        """
        with self._session() as session:
            return self._require_plan(session, plan_id)

    def list_plans(self, project_id: str | None = None) -> list[ExecutionPlan]:
        """List plans, most recent first.

        Args:
            project_id: Filter by project ID (optional)
        """
        with self._session() as session:
            stmt = select(ExecutionPlan)
            if project_id is not None:
                stmt = stmt.where(ExecutionPlan.project_id == project_id)
            stmt = stmt.order_by(ExecutionPlan.created_at.desc())
            return list(session.execute(stmt).scalars().all())

    def count_plans(self) -> int:
        """Number of stored plans."""
        with self._session() as session:
            return session.execute(select(func.count(ExecutionPlan.id))).scalar_one()

    def update_plan(
        self,
        plan_id: str,
        status: PlanStatus | None = None,
        requirements: dict[str, Any] | None = None,
        validation: dict[str, Any] | None = None,
    ) -> ExecutionPlan:
        """Update plan fields. Only provided fields are updated.

        Raises:
            PlanNotFoundError: If plan doesn't exist
        """
        with self._session() as session:
            plan = self._require_plan(session, plan_id)

            if status is not None:
                plan.status = status.value
            if requirements is not None:
                plan.requirements = dict(requirements)
            if validation is not None:
                plan.validation = dict(validation)
            plan.updated_at = utcnow()

            session.commit()
            return plan

    def add_step(self, plan_id: str, step: ExecutionStep) -> ExecutionPlan:
        """Append a step to a plan and recompute its estimated duration.

        Raises:
            PlanNotFoundError: If plan doesn't exist
            StepExistsError: If the step ID is already taken
        """
        with self._session() as session:
            plan = self._require_plan(session, plan_id)
            if session.get(ExecutionStep, step.id) is not None:
                raise StepExistsError(f"Step with id '{step.id}' already exists")

            plan.steps.append(step)
            plan.steps.sort(key=lambda s: s.order)
            plan.estimated_duration = sum(s.estimated_duration for s in plan.steps)
            plan.updated_at = utcnow()

            session.commit()
            return plan

    # --- Step Operations ---

    def get_step(self, step_id: str) -> ExecutionStep:
        """Get step by ID.

        Raises:
            StepNotFoundError: If step doesn't exist
        """
        with self._session() as session:
            step = session.get(ExecutionStep, step_id)
            if step is None:
                raise StepNotFoundError(f"Step with id '{step_id}' not found")
            return step

    def update_step(
        self,
        step_id: str,
        status: StepStatus | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        error: str | None = _UNSET,
        details: dict[str, Any] | None = None,
    ) -> ExecutionStep:
        """Update step runtime fields. Only provided fields are updated.

        Pass ``error=None`` explicitly to clear a previous error.

        Raises:
            StepNotFoundError: If step doesn't exist
        """
        with self._session() as session:
            step = session.get(ExecutionStep, step_id)
            if step is None:
                raise StepNotFoundError(f"Step with id '{step_id}' not found")

            if status is not None:
                step.status = status.value
            if started_at is not None:
                step.started_at = started_at
            if completed_at is not None:
                step.completed_at = completed_at
            if error is not _UNSET:
                step.error = error
            if details is not None:
                step.details = {**step.details, **details}

            session.commit()
            return step

    # --- Helpers ---

    @staticmethod
    def _require_project(session: Session, project_id: str) -> Project:
        project = session.get(Project, project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project with id '{project_id}' not found")
        return project

    @staticmethod
    def _require_plan(session: Session, plan_id: str) -> ExecutionPlan:
        plan = session.get(ExecutionPlan, plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan with id '{plan_id}' not found")
        return plan
