"""Unit tests for PlannerAgent."""

import pytest

from spectre.agents import PlannerAgent
from spectre.agents.planner import complexity_multiplier, is_enabled, scale_duration
from spectre.events import EventManager
from spectre.planning import (
    InvalidStepError,
    PlanTransitionError,
    UnknownProjectTypeError,
)
from spectre.state_store import PlanStatus, ProjectNotFoundError, StateStore, StepStatus


@pytest.fixture
def planner(store: StateStore, event_manager: EventManager) -> PlannerAgent:
    """Create a PlannerAgent with the built-in templates."""
    return PlannerAgent(store, event_manager=event_manager)


def template_ids(plan) -> list[str]:
    return [step.id.rsplit("_", 1)[0] for step in plan.steps]


def by_template_id(plan) -> dict:
    return {step.id.rsplit("_", 1)[0]: step for step in plan.steps}


@pytest.mark.unit
class TestRequirementHelpers:
    """Tests for requirement parsing helpers."""

    @pytest.mark.parametrize("value", [True, "true", "YES", " on ", "1", 1, 2.5])
    def test_enabled_values(self, value: object) -> None:
        assert is_enabled(value) is True

    @pytest.mark.parametrize("value", [False, None, "", "no", "off", "0", 0, [], {}])
    def test_disabled_values(self, value: object) -> None:
        assert is_enabled(value) is False

    def test_complexity_multiplier(self) -> None:
        assert complexity_multiplier({"complexity": "high"}) == 1.5
        assert complexity_multiplier({"complexity": "Low"}) == 0.8
        assert complexity_multiplier({"complexity": "medium"}) == 1.0
        assert complexity_multiplier({}) == 1.0
        assert complexity_multiplier({"complexity": 3}) == 1.0

    def test_scale_duration_rounds_half_up(self) -> None:
        assert scale_duration(45, 1.5) == 68
        assert scale_duration(45, 0.8) == 36
        assert scale_duration(30, 1.0) == 30


@pytest.mark.unit
class TestCreatePlan:
    """Tests for plan creation."""

    def test_website_default_excludes_cms(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})

        assert plan.status == PlanStatus.DRAFT
        assert len(plan.steps) == 9
        assert "setup_cms" not in template_ids(plan)
        assert plan.estimated_duration == 915
        assert all(step.status == StepStatus.PENDING for step in plan.steps)

    def test_website_with_cms(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {"cms": "yes"})

        steps = by_template_id(plan)
        assert len(plan.steps) == 10
        assert steps["setup_cms"].dependencies == [steps["create_backend"].id]
        assert plan.estimated_duration == 1035

    def test_step_ids_share_a_stamp(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})

        stamps = {step.id.rsplit("_", 1)[1] for step in plan.steps}
        assert len(stamps) == 1
        steps = by_template_id(plan)
        assert steps["setup_project"].dependencies == [steps["setup_repo"].id]

    def test_two_plans_never_share_step_ids(self, planner: PlannerAgent, project) -> None:
        first = planner.create_plan(project.id, "website", {})
        second = planner.create_plan(project.id, "website", {})

        assert not {s.id for s in first.steps} & {s.id for s in second.steps}

    def test_excluded_step_dependents_are_rewired(
        self, planner: PlannerAgent, store: StateStore
    ) -> None:
        project = store.create_project(name="Ops", project_type="automation")

        plan = planner.create_plan(project.id, "automation", {"monitoring": False})

        steps = by_template_id(plan)
        assert "setup_monitoring" not in steps
        assert steps["testing_automation"].dependencies == [steps["create_workflow"].id]
        assert plan.estimated_duration == 630

    def test_automation_with_monitoring(self, planner: PlannerAgent, store: StateStore) -> None:
        project = store.create_project(name="Ops", project_type="automation")

        plan = planner.create_plan(project.id, "automation", {"monitoring": True})

        steps = by_template_id(plan)
        assert steps["testing_automation"].dependencies == [steps["setup_monitoring"].id]
        assert len(plan.steps) == 7

    def test_high_complexity_scales_durations(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {"complexity": "high"})

        steps = by_template_id(plan)
        assert steps["setup_repo"].estimated_duration == 45
        assert steps["setup_project"].estimated_duration == 68
        assert plan.estimated_duration == sum(s.estimated_duration for s in plan.steps)

    def test_dependencies_point_to_earlier_steps(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {"cms": True})

        orders = {step.id: step.order for step in plan.steps}
        for step in plan.steps:
            for dep in step.dependencies:
                assert orders[dep] < step.order

    def test_requirements_snapshot(self, planner: PlannerAgent, project) -> None:
        requirements = {"cms": True}
        plan = planner.create_plan(project.id, "website", requirements)
        requirements["cms"] = False

        assert planner.get_plan(plan.id).requirements == {"cms": True}

    def test_unknown_project_type(self, planner: PlannerAgent, project) -> None:
        with pytest.raises(UnknownProjectTypeError, match="No template found"):
            planner.create_plan(project.id, "mobile_app", {})

    def test_unknown_project(self, planner: PlannerAgent) -> None:
        with pytest.raises(ProjectNotFoundError):
            planner.create_plan("nonexistent-id", "website", {})

    def test_emits_telemetry(
        self, planner: PlannerAgent, project, event_manager: EventManager
    ) -> None:
        planner.create_plan(project.id, "website", {})

        actions = [r.action for r in event_manager.get_logs(project.id)]
        assert actions == ["plan_creation_started", "plan_created"]


@pytest.mark.unit
class TestUpdatePlan:
    """Tests for plan status updates."""

    def test_approve_draft(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})

        approved = planner.approve_plan(plan.id)

        assert approved.status == PlanStatus.APPROVED

    def test_cannot_move_backwards(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})
        planner.approve_plan(plan.id)

        with pytest.raises(PlanTransitionError):
            planner.update_plan(plan.id, status=PlanStatus.DRAFT)

    def test_cannot_skip_to_completed(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})

        with pytest.raises(PlanTransitionError):
            planner.update_plan(plan.id, status=PlanStatus.COMPLETED)

    def test_update_requirements_only(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})

        updated = planner.update_plan(plan.id, requirements={"cms": True})

        assert updated.status == PlanStatus.DRAFT
        assert updated.requirements == {"cms": True}

    def test_list_project_plans(self, planner: PlannerAgent, project) -> None:
        plan = planner.create_plan(project.id, "website", {})

        assert [p.id for p in planner.list_project_plans(project.id)] == [plan.id]


@pytest.mark.unit
class TestAddStep:
    """Tests for adding custom steps."""

    @pytest.fixture
    def plan(self, planner: PlannerAgent, project):
        return planner.create_plan(project.id, "website", {})

    def test_add_step_after_last(self, planner: PlannerAgent, plan) -> None:
        last = plan.steps[-1]

        updated = planner.add_step(
            plan.id,
            name="Write Docs",
            step_type="analysis",
            order=11,
            step_id="docs",
            dependencies=[last.id],
            estimated_duration=30,
        )

        assert updated.steps[-1].id == "docs"
        assert updated.estimated_duration == plan.estimated_duration + 30

    def test_generated_id(self, planner: PlannerAgent, plan) -> None:
        updated = planner.add_step(plan.id, name="Audit", step_type="testing", order=20)

        assert updated.steps[-1].id.startswith("custom_")

    def test_unknown_step_type(self, planner: PlannerAgent, plan) -> None:
        with pytest.raises(InvalidStepError, match="Unknown step type"):
            planner.add_step(plan.id, name="X", step_type="marketing", order=11)

    def test_duplicate_order(self, planner: PlannerAgent, plan) -> None:
        with pytest.raises(InvalidStepError, match="already used"):
            planner.add_step(plan.id, name="X", step_type="setup", order=1)

    def test_duplicate_id(self, planner: PlannerAgent, plan) -> None:
        with pytest.raises(InvalidStepError, match="already exists"):
            planner.add_step(
                plan.id, name="X", step_type="setup", order=11, step_id=plan.steps[0].id
            )

    def test_unknown_dependency(self, planner: PlannerAgent, plan) -> None:
        with pytest.raises(InvalidStepError, match="Unknown dependency"):
            planner.add_step(plan.id, name="X", step_type="setup", order=11, dependencies=["a"])

    def test_dependency_must_come_first(self, planner: PlannerAgent, plan) -> None:
        last = plan.steps[-1]

        with pytest.raises(InvalidStepError, match="must be greater"):
            planner.add_step(
                plan.id, name="X", step_type="setup", order=0, dependencies=[last.id]
            )

    def test_executing_plan_rejects_steps(
        self, planner: PlannerAgent, store: StateStore, plan
    ) -> None:
        store.update_plan(plan.id, status=PlanStatus.EXECUTING)

        with pytest.raises(PlanTransitionError):
            planner.add_step(plan.id, name="X", step_type="setup", order=11)


@pytest.mark.unit
class TestHealth:
    """Tests for health."""

    def test_health(self, planner: PlannerAgent, project) -> None:
        planner.create_plan(project.id, "website", {})

        assert planner.health() == {"status": "healthy", "plans": 1, "templates": 2}
