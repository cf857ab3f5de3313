"""Questioner Agent - collects project requirements through question sessions."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Any

from spectre.agents.exceptions import (
    InvalidPatternError,
    SessionNotFoundError,
    SessionStateError,
)
from spectre.agents.models import QuestionPattern, QuestionSession, SessionStatus
from spectre.events import EventManager
from spectre.state_store.models import ProjectType, generate_uuid

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS: tuple[QuestionPattern, ...] = (
    QuestionPattern(
        id="website_basic",
        project_type=ProjectType.WEBSITE.value,
        questions=(
            "What is the primary purpose of this website?",
            "Who is your target audience?",
            "What are the main features you want?",
            "Do you have any design preferences or brand guidelines?",
            "What content management needs do you have?",
            "Do you need user authentication?",
            "What integrations are required?",
            "What is your timeline for completion?",
            "Do you have a budget range?",
            "What is your preferred tech stack?",
        ),
        required=True,
        order=1,
    ),
    QuestionPattern(
        id="automation_basic",
        project_type=ProjectType.AUTOMATION.value,
        questions=(
            "What process are you looking to automate?",
            "What triggers should start the automation?",
            "What actions should the automation perform?",
            "What systems or tools need to be integrated?",
            "How often should this automation run?",
            "What data needs to be processed?",
            "Are there any error handling requirements?",
            "What notifications or alerts are needed?",
            "What is the expected volume of operations?",
            "Do you need reporting or analytics?",
        ),
        required=True,
        order=1,
    ),
    QuestionPattern(
        id="website_advanced",
        project_type=ProjectType.WEBSITE.value,
        questions=(
            "What SEO requirements do you have?",
            "Do you need analytics integration?",
            "What security requirements are needed?",
            "Do you need multi-language support?",
            "What performance requirements do you have?",
            "Do you need mobile responsiveness?",
            "What backup and recovery needs exist?",
            "Do you need API endpoints?",
            "What third-party integrations?",
            "What compliance requirements exist?",
        ),
        required=False,
        order=2,
    ),
    QuestionPattern(
        id="automation_advanced",
        project_type=ProjectType.AUTOMATION.value,
        questions=(
            "What error recovery mechanisms are needed?",
            "Do you need audit logging?",
            "What performance requirements exist?",
            "Do you need conditional logic?",
            "What data validation is required?",
            "Do you need retry mechanisms?",
            "What monitoring and alerting?",
            "Do you need data transformation?",
            "What compliance requirements exist?",
            "Do you need user approval workflows?",
        ),
        required=False,
        order=2,
    ),
)


class QuestionerAgent:
    """Agent that interviews users for project requirements.

    Sessions live in memory. Each session walks the project type's patterns
    in order; a pattern is finished once every one of its questions has an
    answer.
    """

    name = "questioner"
    description = "Asks context-relevant questions using learned patterns"
    version = "1.0.0"

    def __init__(
        self,
        patterns: tuple[QuestionPattern, ...] = DEFAULT_PATTERNS,
        event_manager: EventManager | None = None,
    ) -> None:
        self.event_manager = event_manager or EventManager()
        self._patterns: dict[str, QuestionPattern] = {}
        self._sessions: dict[str, QuestionSession] = {}
        self._lock = threading.RLock()
        for pattern in patterns:
            self._validate_pattern(pattern)
            self._patterns[pattern.id] = pattern

    def health(self) -> dict[str, Any]:
        """Return questioner health."""
        with self._lock:
            active = sum(1 for s in self._sessions.values() if s.status == SessionStatus.ACTIVE)
            return {
                "status": "healthy",
                "patterns": len(self._patterns),
                "active_sessions": active,
            }

    # --- Patterns ---

    def add_pattern(self, pattern: QuestionPattern) -> None:
        """Add or replace a question pattern.

        Raises:
            InvalidPatternError: If the pattern has no ID or no questions.
        """
        self._validate_pattern(pattern)
        with self._lock:
            self._patterns[pattern.id] = pattern
        self.event_manager.success(
            self.name, "pattern_added", context=f"Added new question pattern: {pattern.id}"
        )

    def list_patterns(self, project_type: str | None = None) -> list[QuestionPattern]:
        """List patterns, optionally only those for one project type, in order."""
        with self._lock:
            patterns = list(self._patterns.values())
        if project_type is not None:
            patterns = [p for p in patterns if p.project_type == project_type]
        return sorted(patterns, key=lambda p: p.order)

    @staticmethod
    def _validate_pattern(pattern: QuestionPattern) -> None:
        if not pattern.id:
            raise InvalidPatternError("Pattern ID is required")
        if not pattern.questions:
            raise InvalidPatternError(f"Pattern {pattern.id} has no questions")

    # --- Sessions ---

    def start_session(self, project_id: str, project_type: str) -> QuestionSession:
        """Start a question session for a project.

        Args:
            project_id: Project the answers belong to.
            project_type: Selects which patterns are asked.

        Returns:
            The new active session.
        """
        session = QuestionSession(
            id=f"session_{generate_uuid()}",
            project_id=project_id,
            project_type=str(project_type),
            patterns=self.list_patterns(str(project_type)),
        )
        with self._lock:
            self._sessions[session.id] = session

        logger.info(
            "Started question session %s for project %s (%d patterns)",
            session.id,
            project_id,
            len(session.patterns),
        )
        self.event_manager.success(
            self.name,
            "session_started",
            project_id=project_id,
            context=f"Question session ready with {len(session.patterns)} patterns",
            metadata={"session_id": session.id},
        )
        return session

    def get_session(self, session_id: str) -> QuestionSession:
        """Get a session by ID.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def next_question(self, session_id: str) -> str | None:
        """Get the next unanswered question, or None when all are answered.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            SessionStateError: If the session is no longer active.
        """
        with self._lock:
            session = self._active_session(session_id)
            pattern = self._current_pattern(session)
            if pattern is None:
                return None
            return pattern.questions[len(session.answers.get(pattern.id, []))]

    def submit_answer(self, session_id: str, answer: str) -> QuestionSession:
        """Record an answer to the current question.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            SessionStateError: If the session is finished or every question is answered.
        """
        with self._lock:
            session = self._active_session(session_id)
            pattern = self._current_pattern(session)
            if pattern is None:
                raise SessionStateError(f"Session {session_id} has no remaining questions")

            answers = session.answers.setdefault(pattern.id, [])
            answers.append(answer)
            session.updated_at = datetime.now(UTC)
            if len(answers) >= len(pattern.questions):
                session.current_pattern += 1
                self.event_manager.success(
                    self.name,
                    "pattern_completed",
                    project_id=session.project_id,
                    context=f"Pattern {pattern.id} completed",
                )
            return session

    def complete_session(self, session_id: str) -> dict[str, list[str]]:
        """Finish a session and return its answers by pattern ID.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            SessionStateError: If the session is no longer active.
        """
        with self._lock:
            session = self._active_session(session_id)
            session.status = SessionStatus.COMPLETED
            session.updated_at = datetime.now(UTC)
            answers = {pattern_id: list(a) for pattern_id, a in session.answers.items()}

        self.event_manager.success(
            self.name,
            "session_completed",
            project_id=session.project_id,
            context=f"Question session completed with {len(answers)} patterns",
            metadata={"session_id": session_id},
        )
        return answers

    def cancel_session(self, session_id: str) -> QuestionSession:
        """Cancel an active session.

        Raises:
            SessionNotFoundError: If the session doesn't exist.
            SessionStateError: If the session is no longer active.
        """
        with self._lock:
            session = self._active_session(session_id)
            session.status = SessionStatus.CANCELLED
            session.updated_at = datetime.now(UTC)
        logger.info("Cancelled question session %s", session_id)
        return session

    def _active_session(self, session_id: str) -> QuestionSession:
        session = self.get_session(session_id)
        if session.status != SessionStatus.ACTIVE:
            raise SessionStateError(f"Session {session_id} is {session.status.value}")
        return session

    @staticmethod
    def _current_pattern(session: QuestionSession) -> QuestionPattern | None:
        # Skip patterns that are already fully answered.
        while session.current_pattern < len(session.patterns):
            pattern = session.patterns[session.current_pattern]
            if len(session.answers.get(pattern.id, [])) < len(pattern.questions):
                return pattern
            session.current_pattern += 1
        return None
