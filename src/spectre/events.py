"""Telemetry sink and Server-Sent Events fan-out.

The EventManager is the structured logging collaborator for the core: every
agent and the orchestrator report ``{timestamp, level, kind, source, action,
project_id, context, metadata}`` records to it. Records are kept in a bounded
buffer (for project log queries), mirrored to ``logging``, and pushed to SSE
subscribers. Recording is fire-and-forget and never raises.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4

from spectre.logging import sanitize_for_log

logger = logging.getLogger("spectre.telemetry")

DEFAULT_BUFFER_SIZE = 5000

_LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


class EventType(StrEnum):
    """Types of events that can be streamed."""

    PROJECT_UPDATED = "project_updated"
    PLAN_UPDATED = "plan_updated"
    STEP_UPDATED = "step_updated"
    LOG = "log"
    HEARTBEAT = "heartbeat"


class OutcomeKind(StrEnum):
    """Outcome classification of a telemetry record."""

    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"
    DEBUG = "debug"


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class TelemetryEvent:
    """A structured telemetry record."""

    level: str
    kind: OutcomeKind
    source: str
    action: str
    project_id: str | None = None
    context: str | None = None
    error: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: str = field(default_factory=_utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass
class Event:
    """An event to be sent via SSE."""

    event_type: EventType
    data: dict[str, Any]
    project_id: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data, default=str)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    project_id: str | None = None  # None means subscribe to all projects
    loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def create(cls, project_id: str | None = None) -> Subscriber:
        """Create a new subscriber bound to the running event loop, if any."""
        return cls(
            id=str(uuid4()), queue=asyncio.Queue(), project_id=project_id, loop=_running_loop()
        )

    def deliver(self, event: Event) -> None:
        """Queue an event, waking the subscriber's loop when called from another thread."""
        if self.loop is None or self.loop.is_closed() or _running_loop() is self.loop:
            self.queue.put_nowait(event)
        else:
            self.loop.call_soon_threadsafe(self.queue.put_nowait, event)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class EventManager:
    """Telemetry buffer plus SSE subscriber registry."""

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE, heartbeat_interval: int = 30):
        self._subscribers: dict[str, Subscriber] = {}
        self._records: deque[TelemetryEvent] = deque(maxlen=buffer_size)
        self._lock = threading.Lock()
        self.heartbeat_interval = heartbeat_interval

    # --- Subscribers ---

    def subscribe(self, project_id: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            project_id: Optional project ID to filter events. None means all projects.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(project_id)
        with self._lock:
            self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        with self._lock:
            self._subscribers.pop(subscriber_id, None)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    def emit_sync(self, event: Event) -> None:
        """Push an event to all matching subscribers without blocking."""
        with self._lock:
            subscribers = list(self._subscribers.values())
        for subscriber in subscribers:
            if subscriber.project_id is None or subscriber.project_id == event.project_id:
                subscriber.deliver(event)

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            project_id=None,  # Heartbeat goes to all subscribers
            data={"timestamp": _utc_timestamp()},
        )

    # --- Telemetry ---

    def record(self, event: TelemetryEvent) -> None:
        """Store a telemetry record, mirror it to logging and stream it.

        Credentials in ``error`` and ``context`` are masked first. Never raises:
        a broken subscriber or formatter must not fail the caller.
        """
        try:
            if event.error:
                event.error = sanitize_for_log(event.error)
            if event.context:
                event.context = sanitize_for_log(event.context)
            with self._lock:
                self._records.append(event)
            logger.log(
                _LOG_LEVELS.get(event.level, logging.INFO),
                "[%s] %s project=%s %s%s",
                event.source,
                event.action,
                event.project_id or "-",
                event.context or "",
                f" error={event.error}" if event.error else "",
            )
            self.emit_sync(
                Event(event_type=EventType.LOG, project_id=event.project_id, data=event.to_dict())
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("Dropped telemetry event %s.%s: %s", event.source, event.action, e)

    def success(
        self,
        source: str,
        action: str,
        project_id: str | None = None,
        context: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Record a successful action."""
        self.record(
            TelemetryEvent(
                level="info",
                kind=OutcomeKind.SUCCESS,
                source=source,
                action=action,
                project_id=project_id,
                context=context,
                metadata=metadata,
            )
        )

    def failure(
        self,
        source: str,
        action: str,
        error: str,
        project_id: str | None = None,
        context: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Record a failed action."""
        self.record(
            TelemetryEvent(
                level="error",
                kind=OutcomeKind.FAILURE,
                source=source,
                action=action,
                error=error,
                project_id=project_id,
                context=context,
                metadata=metadata,
            )
        )

    def warning(
        self,
        source: str,
        action: str,
        context: str,
        project_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Record a warning."""
        self.record(
            TelemetryEvent(
                level="warn",
                kind=OutcomeKind.WARNING,
                source=source,
                action=action,
                project_id=project_id,
                context=context,
                metadata=metadata,
            )
        )

    def debug(
        self,
        source: str,
        action: str,
        context: str,
        project_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Record debug information."""
        self.record(
            TelemetryEvent(
                level="debug",
                kind=OutcomeKind.DEBUG,
                source=source,
                action=action,
                project_id=project_id,
                context=context,
                metadata=metadata,
            )
        )

    def get_logs(self, project_id: str | None = None, limit: int = 50) -> list[TelemetryEvent]:
        """Return the most recent records, oldest first.

        Args:
            project_id: Only return records for this project (None = all).
            limit: Maximum number of records.

        Returns:
            Up to ``limit`` records in chronological order.
        """
        if limit <= 0:
            return []
        with self._lock:
            records = [r for r in self._records if project_id is None or r.project_id == project_id]
        return records[-limit:]

    def clear(self) -> None:
        """Drop all buffered records."""
        with self._lock:
            self._records.clear()

    # --- State change notifications ---

    def emit_project_updated(self, project_id: str, status: str, previous_status: str) -> None:
        """Emit a project_updated event."""
        self.emit_sync(
            Event(
                event_type=EventType.PROJECT_UPDATED,
                project_id=project_id,
                data={
                    "project_id": project_id,
                    "status": status,
                    "previous_status": previous_status,
                },
            )
        )

    def emit_plan_updated(
        self, plan_id: str, project_id: str, status: str, previous_status: str
    ) -> None:
        """Emit a plan_updated event."""
        self.emit_sync(
            Event(
                event_type=EventType.PLAN_UPDATED,
                project_id=project_id,
                data={
                    "plan_id": plan_id,
                    "status": status,
                    "previous_status": previous_status,
                },
            )
        )

    def emit_step_updated(
        self, step_id: str, plan_id: str, project_id: str, status: str, error: str | None = None
    ) -> None:
        """Emit a step_updated event."""
        self.emit_sync(
            Event(
                event_type=EventType.STEP_UPDATED,
                project_id=project_id,
                data={
                    "step_id": step_id,
                    "plan_id": plan_id,
                    "status": status,
                    "error": error,
                },
            )
        )
