"""Orchestrator package - Project and plan state machine management."""

from spectre.orchestrator.exceptions import (
    InvalidProjectError,
    InvalidTransitionError,
    OrchestratorError,
    OrchestratorShutdownError,
)
from spectre.orchestrator.models import SystemHealth
from spectre.orchestrator.orchestrator import Orchestrator

__all__ = [
    "InvalidProjectError",
    "InvalidTransitionError",
    "Orchestrator",
    "OrchestratorError",
    "OrchestratorShutdownError",
    "SystemHealth",
]
