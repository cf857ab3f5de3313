"""Unit tests for ExecutorAgent."""

import pytest

from spectre.agents import ExecutorAgent, MissingHandlerError
from spectre.events import EventManager
from spectre.state_store import ExecutionStep, StepStatus, StepType


def make_step(step_type: str = "development", duration: int = 120) -> ExecutionStep:
    return ExecutionStep(
        id="create_backend_1",
        name="Create Backend API",
        step_type=step_type,
        order=5,
        estimated_duration=duration,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def executor(sleeps: list[float], event_manager: EventManager) -> ExecutorAgent:
    """Create an ExecutorAgent that records sleeps instead of sleeping."""
    return ExecutorAgent(
        sleep=sleeps.append,
        seconds_per_minute=0.01,
        max_step_seconds=1.0,
        event_manager=event_manager,
    )


@pytest.mark.unit
class TestExecuteStep:
    """Tests for execute_step."""

    def test_success(self, executor: ExecutorAgent, sleeps: list[float]) -> None:
        step = make_step(duration=60)

        result = executor.execute_step(step, "p1")

        assert result.success is True
        assert result.step_id == step.id
        assert result.error is None
        assert "Create Backend API" in result.output
        assert sleeps == [pytest.approx(0.6)]

    def test_simulated_time_is_capped(self, executor: ExecutorAgent, sleeps: list[float]) -> None:
        executor.execute_step(make_step(duration=600), "p1")

        assert sleeps == [1.0]

    def test_zero_duration_does_not_sleep(
        self, executor: ExecutorAgent, sleeps: list[float]
    ) -> None:
        executor.execute_step(make_step(duration=0), "p1")

        assert sleeps == []

    def test_does_not_mutate_step(self, executor: ExecutorAgent) -> None:
        step = make_step()

        executor.execute_step(step, "p1")

        assert step.status == StepStatus.PENDING
        assert step.error is None

    def test_handler_error_becomes_failed_result(self, event_manager: EventManager) -> None:
        def broken(step, project_id):
            raise RuntimeError("compiler crashed")

        executor = ExecutorAgent(
            handlers={StepType.DEVELOPMENT: broken}, event_manager=event_manager
        )

        result = executor.execute_step(make_step(), "p1")

        assert result.success is False
        assert result.error == "compiler crashed"
        actions = [r.action for r in event_manager.get_logs("p1")]
        assert actions == ["step_execution_started", "step_execution_failed"]

    def test_empty_error_message_uses_type_name(self) -> None:
        def broken(step, project_id):
            raise ValueError

        executor = ExecutorAgent(handlers={"development": broken})

        assert executor.execute_step(make_step(), "p1").error == "ValueError"

    def test_custom_handler_output(self) -> None:
        executor = ExecutorAgent(handlers={StepType.TESTING: lambda step, pid: "42 passed"})

        result = executor.execute_step(make_step("testing"), "p1")

        assert result.output == "42 passed"

    def test_emits_completion(self, executor: ExecutorAgent, event_manager: EventManager) -> None:
        executor.execute_step(make_step(), "p1")

        actions = [r.action for r in event_manager.get_logs("p1")]
        assert actions == ["step_execution_started", "step_execution_completed"]


@pytest.mark.unit
class TestHandlerTable:
    """Tests for dispatch table coverage."""

    def test_missing_handler_rejected(self) -> None:
        with pytest.raises(MissingHandlerError, match="setup"):
            ExecutorAgent(handlers={StepType.SETUP: None})

    @pytest.mark.parametrize("step_type", [t.value for t in StepType])
    def test_every_step_type_runs(self, executor: ExecutorAgent, step_type: str) -> None:
        assert executor.execute_step(make_step(step_type), "p1").success is True


@pytest.mark.unit
class TestHealth:
    """Tests for health."""

    def test_counts_executions(self, executor: ExecutorAgent) -> None:
        executor.execute_step(make_step(), "p1")

        health = executor.health()
        assert health["status"] == "healthy"
        assert health["executed_steps"] == 1
        assert health["active_executions"] == 0
