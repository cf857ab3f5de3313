"""Plan templates - the fixed step blueprints per project type.

Templates are process-wide read-only data. A TemplateStore validates them once
when it is built and never changes them afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from types import MappingProxyType

from spectre.planning.exceptions import InvalidTemplateError, UnknownProjectTypeError
from spectre.state_store.models import ProjectType, StepType


@dataclass(frozen=True)
class StepTemplate:
    """Blueprint for one plan step.

    Attributes:
        id: Stable template ID; generated step IDs are derived from it.
        name: Human-readable step name.
        description: What the step does.
        step_type: Step type used for executor/reviewer dispatch.
        dependencies: Template IDs that must complete first.
        estimated_duration: Base duration in minutes.
        required: Required steps are always planned.
        order: Rank within the template; ascending order is topological.
        requirement_key: Requirement map key that enables an optional step.
    """

    id: str
    name: str
    description: str
    step_type: StepType
    dependencies: tuple[str, ...]
    estimated_duration: int
    required: bool
    order: int
    requirement_key: str | None = None


WEBSITE_TEMPLATE: tuple[StepTemplate, ...] = (
    StepTemplate(
        id="setup_repo",
        name="Setup GitHub Repository",
        description="Create and configure GitHub repository for the project",
        step_type=StepType.SETUP,
        dependencies=(),
        estimated_duration=30,
        required=True,
        order=1,
    ),
    StepTemplate(
        id="setup_project",
        name="Initialize Project Structure",
        description="Create basic project structure and configuration files",
        step_type=StepType.SETUP,
        dependencies=("setup_repo",),
        estimated_duration=45,
        required=True,
        order=2,
    ),
    StepTemplate(
        id="design_architecture",
        name="Design System Architecture",
        description="Plan the overall system architecture and component structure",
        step_type=StepType.PLANNING,
        dependencies=("setup_project",),
        estimated_duration=60,
        required=True,
        order=3,
    ),
    StepTemplate(
        id="setup_database",
        name="Setup Database",
        description="Configure database schema and connections",
        step_type=StepType.INFRASTRUCTURE,
        dependencies=("design_architecture",),
        estimated_duration=90,
        required=True,
        order=4,
    ),
    StepTemplate(
        id="create_backend",
        name="Create Backend API",
        description="Develop backend API endpoints and business logic",
        step_type=StepType.DEVELOPMENT,
        dependencies=("setup_database",),
        estimated_duration=180,
        required=True,
        order=5,
    ),
    StepTemplate(
        id="create_frontend",
        name="Create Frontend Interface",
        description="Develop user interface and frontend components",
        step_type=StepType.DEVELOPMENT,
        dependencies=("create_backend",),
        estimated_duration=240,
        required=True,
        order=6,
    ),
    StepTemplate(
        id="setup_cms",
        name="Setup Content Management",
        description="Configure CMS integration and content management",
        step_type=StepType.INTEGRATION,
        dependencies=("create_backend",),
        estimated_duration=120,
        required=False,
        order=7,
        requirement_key="cms",
    ),
    StepTemplate(
        id="setup_deployment",
        name="Setup Deployment Pipeline",
        description="Configure CI/CD and deployment infrastructure",
        step_type=StepType.DEPLOYMENT,
        dependencies=("create_frontend",),
        estimated_duration=90,
        required=True,
        order=8,
    ),
    StepTemplate(
        id="testing",
        name="Testing and Quality Assurance",
        description="Perform comprehensive testing and quality checks",
        step_type=StepType.TESTING,
        dependencies=("setup_deployment",),
        estimated_duration=120,
        required=True,
        order=9,
    ),
    StepTemplate(
        id="deployment",
        name="Deploy to Production",
        description="Deploy the application to production environment",
        step_type=StepType.DEPLOYMENT,
        dependencies=("testing",),
        estimated_duration=60,
        required=True,
        order=10,
    ),
)

AUTOMATION_TEMPLATE: tuple[StepTemplate, ...] = (
    StepTemplate(
        id="analyze_requirements",
        name="Analyze Automation Requirements",
        description="Understand the process to be automated and its requirements",
        step_type=StepType.ANALYSIS,
        dependencies=(),
        estimated_duration=60,
        required=True,
        order=1,
    ),
    StepTemplate(
        id="design_workflow",
        name="Design Workflow",
        description="Design the automation workflow and decision logic",
        step_type=StepType.PLANNING,
        dependencies=("analyze_requirements",),
        estimated_duration=90,
        required=True,
        order=2,
    ),
    StepTemplate(
        id="setup_integrations",
        name="Setup Integrations",
        description="Configure integrations with external systems and APIs",
        step_type=StepType.INTEGRATION,
        dependencies=("design_workflow",),
        estimated_duration=120,
        required=True,
        order=3,
    ),
    StepTemplate(
        id="create_workflow",
        name="Create Automation Workflow",
        description="Build the automation workflow using n8n or similar tool",
        step_type=StepType.DEVELOPMENT,
        dependencies=("setup_integrations",),
        estimated_duration=180,
        required=True,
        order=4,
    ),
    StepTemplate(
        id="setup_monitoring",
        name="Setup Monitoring and Alerts",
        description="Configure monitoring, logging, and alerting systems",
        step_type=StepType.INFRASTRUCTURE,
        dependencies=("create_workflow",),
        estimated_duration=90,
        required=False,
        order=5,
        requirement_key="monitoring",
    ),
    StepTemplate(
        id="testing_automation",
        name="Test Automation",
        description="Test the automation workflow with various scenarios",
        step_type=StepType.TESTING,
        dependencies=("setup_monitoring",),
        estimated_duration=120,
        required=True,
        order=6,
    ),
    StepTemplate(
        id="deploy_automation",
        name="Deploy Automation",
        description="Deploy the automation to production environment",
        step_type=StepType.DEPLOYMENT,
        dependencies=("testing_automation",),
        estimated_duration=60,
        required=True,
        order=7,
    ),
)

DEFAULT_TEMPLATES: Mapping[str, tuple[StepTemplate, ...]] = MappingProxyType(
    {
        ProjectType.WEBSITE.value: WEBSITE_TEMPLATE,
        ProjectType.AUTOMATION.value: AUTOMATION_TEMPLATE,
    }
)


def validate_template(project_type: str, steps: tuple[StepTemplate, ...]) -> None:
    """Check a template's structural invariants.

    Raises:
        InvalidTemplateError: On duplicate IDs or orders, unknown dependencies,
            cycles, or an order that is not topological.
    """
    ids = [step.id for step in steps]
    if len(set(ids)) != len(ids):
        raise InvalidTemplateError(f"Template '{project_type}' has duplicate step IDs")

    orders = [step.order for step in steps]
    if len(set(orders)) != len(orders):
        raise InvalidTemplateError(f"Template '{project_type}' has duplicate step orders")

    by_id = {step.id: step for step in steps}
    graph: dict[str, set[str]] = {}
    for step in steps:
        for dep in step.dependencies:
            if dep not in by_id:
                raise InvalidTemplateError(
                    f"Template '{project_type}' step '{step.id}' depends on unknown step '{dep}'"
                )
            if by_id[dep].order >= step.order:
                raise InvalidTemplateError(
                    f"Template '{project_type}' step '{step.id}' is ordered before "
                    f"its dependency '{dep}'"
                )
        graph[step.id] = set(step.dependencies)

    try:
        tuple(TopologicalSorter(graph).static_order())
    except CycleError as e:
        raise InvalidTemplateError(f"Template '{project_type}' has a dependency cycle") from e


class TemplateStore:
    """Read-only lookup of step templates by project type."""

    def __init__(self, templates: Mapping[str, tuple[StepTemplate, ...]] | None = None) -> None:
        """Load and validate templates.

        Args:
            templates: Mapping of project type to ordered step templates.
                Defaults to the built-in website and automation templates.

        Raises:
            InvalidTemplateError: If any template is malformed.
        """
        source = DEFAULT_TEMPLATES if templates is None else templates
        loaded: dict[str, tuple[StepTemplate, ...]] = {}
        for project_type, steps in source.items():
            steps = tuple(sorted(steps, key=lambda s: s.order))
            validate_template(project_type, steps)
            loaded[str(project_type)] = steps
        self._templates = MappingProxyType(loaded)

    @property
    def project_types(self) -> list[str]:
        """Project types that have a template."""
        return list(self._templates)

    def template_for(self, project_type: str) -> tuple[StepTemplate, ...]:
        """Get the ordered step blueprint for a project type.

        Raises:
            UnknownProjectTypeError: If no template exists for the type.
        """
        try:
            return self._templates[str(project_type)]
        except KeyError:
            raise UnknownProjectTypeError(
                f"No template found for project type: {project_type}"
            ) from None

    def __len__(self) -> int:
        return len(self._templates)
