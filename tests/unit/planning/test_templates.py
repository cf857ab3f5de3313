"""Unit tests for the plan template store."""

import pytest

from spectre.planning import (
    AUTOMATION_TEMPLATE,
    WEBSITE_TEMPLATE,
    InvalidTemplateError,
    StepTemplate,
    TemplateStore,
    UnknownProjectTypeError,
    validate_template,
)
from spectre.state_store import StepType


def tmpl(step_id: str, order: int, *deps: str, required: bool = True) -> StepTemplate:
    return StepTemplate(
        id=step_id,
        name=step_id.title(),
        description="",
        step_type=StepType.SETUP,
        dependencies=deps,
        estimated_duration=10,
        required=required,
        order=order,
    )


@pytest.mark.unit
class TestBuiltInTemplates:
    """Tests for the website and automation templates."""

    def test_website_template(self) -> None:
        store = TemplateStore()
        steps = store.template_for("website")

        assert len(steps) == 10
        assert steps[0].id == "setup_repo"
        assert steps[-1].id == "deployment"
        assert [s.order for s in steps] == list(range(1, 11))
        optional = [s for s in steps if not s.required]
        assert [(s.id, s.requirement_key) for s in optional] == [("setup_cms", "cms")]

    def test_automation_template(self) -> None:
        steps = TemplateStore().template_for("automation")

        assert len(steps) == 7
        assert steps[0].step_type == StepType.ANALYSIS
        monitoring = next(s for s in steps if s.id == "setup_monitoring")
        assert monitoring.required is False
        assert monitoring.requirement_key == "monitoring"

    def test_builtin_templates_are_valid(self) -> None:
        validate_template("website", WEBSITE_TEMPLATE)
        validate_template("automation", AUTOMATION_TEMPLATE)

    def test_project_types(self) -> None:
        store = TemplateStore()

        assert sorted(store.project_types) == ["automation", "website"]
        assert len(store) == 2


@pytest.mark.unit
class TestTemplateFor:
    """Tests for template lookups."""

    def test_unknown_type(self) -> None:
        with pytest.raises(UnknownProjectTypeError, match="mobile_app"):
            TemplateStore().template_for("mobile_app")

    def test_custom_templates_sorted_by_order(self) -> None:
        store = TemplateStore({"docs": (tmpl("b", 2, "a"), tmpl("a", 1))})

        assert [s.id for s in store.template_for("docs")] == ["a", "b"]


@pytest.mark.unit
class TestValidateTemplate:
    """Tests for structural checks."""

    def test_duplicate_ids(self) -> None:
        with pytest.raises(InvalidTemplateError, match="duplicate step IDs"):
            validate_template("x", (tmpl("a", 1), tmpl("a", 2)))

    def test_duplicate_orders(self) -> None:
        with pytest.raises(InvalidTemplateError, match="duplicate step orders"):
            validate_template("x", (tmpl("a", 1), tmpl("b", 1)))

    def test_unknown_dependency(self) -> None:
        with pytest.raises(InvalidTemplateError, match="unknown step 'ghost'"):
            validate_template("x", (tmpl("a", 1, "ghost"),))

    def test_dependency_ordered_after_dependent(self) -> None:
        with pytest.raises(InvalidTemplateError, match="ordered before"):
            validate_template("x", (tmpl("a", 2), tmpl("b", 1, "a")))

    def test_self_dependency(self) -> None:
        with pytest.raises(InvalidTemplateError):
            validate_template("x", (tmpl("a", 1, "a"),))

    def test_store_rejects_invalid_template(self) -> None:
        with pytest.raises(InvalidTemplateError):
            TemplateStore({"x": (tmpl("a", 1), tmpl("a", 2))})
