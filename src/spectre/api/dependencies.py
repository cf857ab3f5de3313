"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from spectre.events import EventManager
from spectre.orchestrator import Orchestrator

# Global Orchestrator instance (initialized on app startup)
_orchestrator: Orchestrator | None = None


def init_orchestrator(orchestrator: Orchestrator) -> None:
    """Initialize the global Orchestrator instance."""
    global _orchestrator  # noqa: PLW0603
    _orchestrator = orchestrator


def close_orchestrator() -> None:
    """Shut down and release the global Orchestrator instance."""
    global _orchestrator  # noqa: PLW0603
    if _orchestrator is not None:
        _orchestrator.shutdown()
        _orchestrator = None


def get_orchestrator() -> Generator[Orchestrator, None, None]:
    """Dependency that provides the Orchestrator instance."""
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized. Call init_orchestrator() first.")
    yield _orchestrator


# Type alias for dependency injection
OrchestratorDep = Annotated[Orchestrator, Depends(get_orchestrator)]

# Global EventManager instance
_event_manager: EventManager | None = None


def init_event_manager() -> EventManager:
    """Initialize the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = EventManager()
    return _event_manager


def close_event_manager() -> None:
    """Release the global EventManager instance."""
    global _event_manager  # noqa: PLW0603
    _event_manager = None


def get_event_manager() -> Generator[EventManager, None, None]:
    """Dependency that provides the EventManager instance."""
    if _event_manager is None:
        raise RuntimeError("EventManager not initialized. Call init_event_manager() first.")
    yield _event_manager


# Type alias for dependency injection
EventManagerDep = Annotated[EventManager, Depends(get_event_manager)]
