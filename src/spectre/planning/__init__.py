"""Planning - Step templates and plan composition rules."""

from spectre.planning.exceptions import (
    InvalidStepError,
    InvalidTemplateError,
    PlanningError,
    PlanTransitionError,
    UnknownProjectTypeError,
)
from spectre.planning.templates import (
    AUTOMATION_TEMPLATE,
    DEFAULT_TEMPLATES,
    WEBSITE_TEMPLATE,
    StepTemplate,
    TemplateStore,
    validate_template,
)

__all__ = [
    "AUTOMATION_TEMPLATE",
    "DEFAULT_TEMPLATES",
    "WEBSITE_TEMPLATE",
    "InvalidStepError",
    "InvalidTemplateError",
    "PlanTransitionError",
    "PlanningError",
    "StepTemplate",
    "TemplateStore",
    "UnknownProjectTypeError",
    "validate_template",
]
