"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spectre import __version__
from spectre.agents import (
    AgentRegistry,
    ExecutorAgent,
    PlannerAgent,
    QuestionerAgent,
    ReviewerAgent,
    ValidatorAgent,
)
from spectre.api.dependencies import (
    close_event_manager,
    close_orchestrator,
    init_event_manager,
    init_orchestrator,
)
from spectre.api.models import error_response
from spectre.api.routes import control, events, plans, projects, questions, system
from spectre.api.runner import wait_for_all
from spectre.config import Settings
from spectre.exceptions import (
    AgentUnavailableError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    SpectreError,
)
from spectre.orchestrator import Orchestrator, OrchestratorShutdownError
from spectre.state_store import StateStore, StoreClosedError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

SHUTDOWN_JOIN_SECONDS = 5.0


def build_orchestrator(settings: Settings) -> Orchestrator:
    """Construct the store, telemetry sink, orchestrator and the default agents."""
    store = StateStore(settings.db_path)
    event_manager = init_event_manager()
    registry = AgentRegistry(event_manager)
    orchestrator = Orchestrator(
        state_store=store,
        event_manager=event_manager,
        registry=registry,
        max_parallel_steps=settings.max_parallel_steps,
    )

    orchestrator.register_agent(PlannerAgent(store, event_manager=event_manager))
    orchestrator.register_agent(
        ExecutorAgent(
            seconds_per_minute=settings.seconds_per_minute,
            max_step_seconds=settings.max_step_seconds,
            event_manager=event_manager,
        )
    )
    orchestrator.register_agent(
        ReviewerAgent(seed=settings.review_seed, event_manager=event_manager)
    )
    orchestrator.register_agent(ValidatorAgent(event_manager=event_manager))
    orchestrator.register_agent(QuestionerAgent(event_manager=event_manager))
    return orchestrator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    settings: Settings = app.state.settings
    orchestrator = build_orchestrator(settings)
    init_orchestrator(orchestrator)
    logger.info("Spectre API started (db=%s)", settings.db_path)

    yield
    # Shutdown
    close_orchestrator()
    wait_for_all(SHUTDOWN_JOIN_SECONDS)
    close_event_manager()
    logger.info("Spectre API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()
    app = FastAPI(
        title="Spectre API",
        description="REST API for Spectre - Project Delivery Orchestration",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_response(str(exc), "Not found"),
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(_request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response(str(exc), "Invalid input"),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response(details, "Invalid input"),
        )

    @app.exception_handler(InvalidStateError)
    async def invalid_state_handler(_request: Request, exc: InvalidStateError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_response(str(exc), "Invalid state"),
        )

    @app.exception_handler(AgentUnavailableError)
    async def agent_unavailable_handler(
        _request: Request, exc: AgentUnavailableError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_response(str(exc), f"Agent unavailable: {exc.agent_name}"),
        )

    @app.exception_handler(OrchestratorShutdownError)
    async def shutdown_handler(_request: Request, exc: OrchestratorShutdownError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_response(str(exc), "Service shutting down"),
        )

    @app.exception_handler(StoreClosedError)
    async def store_closed_handler(_request: Request, exc: StoreClosedError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_response(str(exc), "Service shutting down"),
        )

    @app.exception_handler(SpectreError)
    async def spectre_error_handler(_request: Request, exc: SpectreError) -> JSONResponse:
        logger.error("Unhandled Spectre error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(str(exc) if settings.debug_mode else "Internal server error"),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response(str(exc) if settings.debug_mode else "Internal server error"),
        )

    # Include routers
    app.include_router(projects.router, prefix="/api/v1")
    app.include_router(control.router, prefix="/api/v1")
    app.include_router(plans.router, prefix="/api/v1")
    app.include_router(questions.router, prefix="/api/v1")
    app.include_router(system.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")

    return app
