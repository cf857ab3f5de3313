"""Command line entry point for Spectre.

- serve: run the HTTP API
- templates: show the step blueprint of a project type
- plan: preview the plan a project would get, without persisting anything
"""

from __future__ import annotations

import dataclasses
import sys

import click

from spectre import __version__
from spectre.agents import PlannerAgent
from spectre.config import ConfigError, Settings
from spectre.logging import setup_logging
from spectre.planning import TemplateStore, UnknownProjectTypeError
from spectre.state_store import StateStore


def parse_requirements(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ``key=value`` options into a requirement map.

    Raises:
        click.BadParameter: If an item has no ``=``.
    """
    requirements: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--require")
        requirements[key.strip()] = value.strip()
    return requirements


@click.group()
@click.version_option(__version__)
def main() -> None:
    """Spectre - project delivery orchestration."""
    pass


@main.command()
@click.option("--host", default=None, help="Bind address (default: SPECTRE_HOST or 127.0.0.1)")
@click.option("--port", type=int, default=None, help="Bind port (default: SPECTRE_PORT or 8000)")
@click.option("--db", "db_path", default=None, help="SQLite path (default: SPECTRE_DB_PATH)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level (default: SPECTRE_LOG_LEVEL or INFO)",
)
@click.option("--debug", is_flag=True, default=False, help="Include error details in responses")
def serve(
    host: str | None,
    port: int | None,
    db_path: str | None,
    log_level: str | None,
    debug: bool,
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from spectre.api import create_app

    overrides = {
        "host": host,
        "port": port,
        "db_path": db_path,
        "log_level": log_level.upper() if log_level else None,
    }
    try:
        settings = Settings.from_env()
        settings = dataclasses.replace(
            settings,
            debug_mode=debug or settings.debug_mode,
            **{key: value for key, value in overrides.items() if value is not None},
        )
        settings.validate()
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    setup_logging(settings.log_dir, level=settings.log_level)
    click.echo(f"Serving Spectre API on http://{settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


@main.command()
@click.argument("project_type", required=False)
def templates(project_type: str | None) -> None:
    """List template steps for PROJECT_TYPE, or every project type."""
    store = TemplateStore()
    types = [project_type] if project_type else store.project_types

    for name in types:
        try:
            steps = store.template_for(name)
        except UnknownProjectTypeError as e:
            click.echo(str(e), err=True)
            sys.exit(1)

        click.echo(f"{name}:")
        for step in steps:
            flag = "" if step.required else f"  [optional: {step.requirement_key}]"
            after = f" after {', '.join(step.dependencies)}" if step.dependencies else ""
            click.echo(
                f"  {step.order:>2}. {step.id} ({step.step_type.value}, "
                f"{step.estimated_duration} min){after}{flag}"
            )


@main.command()
@click.argument("project_type")
@click.option(
    "-r",
    "--require",
    "pairs",
    multiple=True,
    help="Requirement as key=value, e.g. -r cms=yes -r complexity=high",
)
def plan(project_type: str, pairs: tuple[str, ...]) -> None:
    """Preview the execution plan for a PROJECT_TYPE."""
    requirements = parse_requirements(pairs)
    store = StateStore()
    try:
        planner = PlannerAgent(store)
        project = store.create_project(name="preview", project_type=project_type)
        try:
            preview = planner.create_plan(project.id, project_type, requirements)
        except UnknownProjectTypeError as e:
            click.echo(str(e), err=True)
            sys.exit(1)

        for step in preview.steps:
            click.echo(f"{step.order:>2}. {step.name} ({step.estimated_duration} min)")
        click.echo(f"Total: {len(preview.steps)} steps, {preview.estimated_duration} min")
    finally:
        store.close()
