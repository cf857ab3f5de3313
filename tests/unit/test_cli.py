"""Unit tests for the spectre command line."""

import pytest
from click.testing import CliRunner

from spectre.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.mark.unit
class TestTemplates:
    """Tests for `spectre templates`."""

    def test_lists_website_steps(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["templates", "website"])

        assert result.exit_code == 0
        assert " 1. setup_repo (setup, 30 min)" in result.output
        assert "setup_cms (integration, 120 min) after create_backend  [optional: cms]" in (
            result.output
        )

    def test_lists_every_type(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["templates"])

        assert "website:" in result.output
        assert "automation:" in result.output

    def test_unknown_type(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["templates", "mobile_app"])

        assert result.exit_code == 1


@pytest.mark.unit
class TestPlanPreview:
    """Tests for `spectre plan`."""

    def test_automation_defaults(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["plan", "automation"])

        assert result.exit_code == 0
        assert "Total: 6 steps, 630 min" in result.output

    def test_requirements_enable_optional_steps(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["plan", "website", "-r", "cms=yes"])

        assert "Setup Content Management" in result.output
        assert "Total: 10 steps, 1035 min" in result.output

    def test_malformed_requirement(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["plan", "website", "-r", "cms"])

        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_unknown_type(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["plan", "mobile_app"])

        assert result.exit_code == 1


@pytest.mark.unit
class TestServe:
    """Tests for `spectre serve` option handling."""

    def test_invalid_port_rejected(self, runner: CliRunner) -> None:
        result = runner.invoke(main, ["serve", "--port", "70000"])

        assert result.exit_code == 1
        assert "Invalid port" in result.output
