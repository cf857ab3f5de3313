"""Unit tests for StateStore plan and step operations."""

import pytest

from spectre.state_store import (
    ExecutionStep,
    PlanNotFoundError,
    PlanStatus,
    ProjectNotFoundError,
    StateStore,
    StepExistsError,
    StepNotFoundError,
    StepStatus,
)
from spectre.state_store.models import utcnow


def make_steps(prefix: str = "s") -> list[ExecutionStep]:
    return [
        ExecutionStep(
            id=f"{prefix}1", name="Setup", step_type="setup", order=1, estimated_duration=30
        ),
        ExecutionStep(
            id=f"{prefix}2",
            name="Build",
            step_type="development",
            order=2,
            dependencies=[f"{prefix}1"],
            estimated_duration=45,
        ),
    ]


@pytest.fixture
def project_id(store: StateStore) -> str:
    return store.create_project(name="Acme", project_type="website").id


@pytest.mark.unit
class TestCreatePlan:
    """Tests for create_plan."""

    def test_create_plan_with_steps(self, store: StateStore, project_id: str) -> None:
        plan = store.create_plan(project_id, "website", make_steps(), requirements={"cms": False})

        fetched = store.get_plan(plan.id)
        assert fetched.status == PlanStatus.DRAFT
        assert fetched.estimated_duration == 75
        assert fetched.requirements == {"cms": False}
        assert [s.id for s in fetched.steps] == ["s1", "s2"]
        assert fetched.steps[1].dependencies == ["s1"]

    def test_duplicate_step_id_rejected(self, store: StateStore, project_id: str) -> None:
        store.create_plan(project_id, "website", make_steps())

        with pytest.raises(StepExistsError):
            store.create_plan(project_id, "website", make_steps())

    def test_unknown_project(self, store: StateStore) -> None:
        with pytest.raises(ProjectNotFoundError):
            store.create_plan("nonexistent-id", "website", make_steps())


@pytest.mark.unit
class TestListPlans:
    """Tests for list_plans and count_plans."""

    def test_filter_by_project(self, store: StateStore, project_id: str) -> None:
        other = store.create_project(name="Other", project_type="automation").id
        mine = store.create_plan(project_id, "website", make_steps("a"))
        store.create_plan(other, "automation", make_steps("b"))

        assert [p.id for p in store.list_plans(project_id=project_id)] == [mine.id]
        assert store.count_plans() == 2

    def test_get_plan_not_found(self, store: StateStore) -> None:
        with pytest.raises(PlanNotFoundError):
            store.get_plan("nonexistent-id")


@pytest.mark.unit
class TestUpdatePlan:
    """Tests for update_plan."""

    def test_status_and_validation(self, store: StateStore, project_id: str) -> None:
        plan = store.create_plan(project_id, "website", make_steps())

        updated = store.update_plan(
            plan.id, status=PlanStatus.APPROVED, validation={"valid": True, "score": 90}
        )

        assert updated.status == PlanStatus.APPROVED
        assert store.get_plan(plan.id).validation == {"valid": True, "score": 90}


@pytest.mark.unit
class TestAddStep:
    """Tests for add_step."""

    def test_add_step_sorts_and_recomputes(self, store: StateStore, project_id: str) -> None:
        plan = store.create_plan(project_id, "website", make_steps())
        step = ExecutionStep(
            id="custom_1", name="Docs", step_type="analysis", order=3, estimated_duration=25
        )

        updated = store.add_step(plan.id, step)

        assert [s.id for s in updated.steps] == ["s1", "s2", "custom_1"]
        assert updated.estimated_duration == 100

    def test_add_existing_step_id(self, store: StateStore, project_id: str) -> None:
        plan = store.create_plan(project_id, "website", make_steps())

        with pytest.raises(StepExistsError):
            store.add_step(plan.id, ExecutionStep(id="s1", name="x", step_type="setup", order=9))


@pytest.mark.unit
class TestUpdateStep:
    """Tests for step runtime updates."""

    def test_update_runtime_fields(self, store: StateStore, project_id: str) -> None:
        store.create_plan(project_id, "website", make_steps())
        now = utcnow()

        store.update_step("s1", status=StepStatus.IN_PROGRESS, started_at=now)
        store.update_step("s1", details={"duration_seconds": 0.5})
        step = store.update_step(
            "s1", status=StepStatus.FAILED, completed_at=now, error="boom", details={"x": 1}
        )

        assert step.status == StepStatus.FAILED
        assert step.started_at is not None
        assert step.error == "boom"
        assert step.details == {"duration_seconds": 0.5, "x": 1}

    def test_error_cleared_only_when_passed(self, store: StateStore, project_id: str) -> None:
        store.create_plan(project_id, "website", make_steps())
        store.update_step("s1", error="boom")

        assert store.update_step("s1", status=StepStatus.PENDING).error == "boom"
        assert store.update_step("s1", error=None).error is None

    def test_step_not_found(self, store: StateStore) -> None:
        with pytest.raises(StepNotFoundError):
            store.get_step("missing")
        with pytest.raises(StepNotFoundError):
            store.update_step("missing", status=StepStatus.COMPLETED)
