"""Agents package for Spectre.

Contains the registry and the default agent implementations that plan,
execute, review and validate project work.
"""

from spectre.agents.base import Agent
from spectre.agents.exceptions import (
    AgentError,
    InvalidPatternError,
    MissingHandlerError,
    SessionNotFoundError,
    SessionStateError,
)
from spectre.agents.executor import ExecutorAgent
from spectre.agents.models import (
    QuestionPattern,
    QuestionSession,
    ReviewResult,
    SessionStatus,
    StepExecutionResult,
    ValidationResult,
)
from spectre.agents.planner import PlannerAgent
from spectre.agents.questioner import QuestionerAgent
from spectre.agents.registry import AgentRegistry
from spectre.agents.reviewer import ReviewerAgent
from spectre.agents.validator import ValidatorAgent

__all__ = [
    "Agent",
    "AgentError",
    "AgentRegistry",
    "ExecutorAgent",
    "InvalidPatternError",
    "MissingHandlerError",
    "PlannerAgent",
    "QuestionPattern",
    "QuestionSession",
    "QuestionerAgent",
    "ReviewResult",
    "ReviewerAgent",
    "SessionNotFoundError",
    "SessionStateError",
    "SessionStatus",
    "StepExecutionResult",
    "ValidationResult",
    "ValidatorAgent",
]
