"""Database connection manager for State Store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from spectre.state_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY_PATH = ":memory:"


class Database:
    """Database connection manager.

    Wraps a SQLite engine. The default in-memory database shares a single
    connection so every thread of one orchestrator sees the same state, while
    separate Database instances stay fully isolated.
    """

    def __init__(self, db_path: str = MEMORY_PATH) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
        """
        self.db_path = db_path
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.db_path == MEMORY_PATH:
                # One shared connection; the orchestrator drives it from worker threads too
                self._engine = create_engine(
                    "sqlite:///:memory:",
                    echo=False,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_engine(
                    f"sqlite:///{self.db_path}",
                    echo=False,
                    connect_args={"check_same_thread": False},
                )

            @event.listens_for(self._engine, "connect")
            def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                if self.db_path != MEMORY_PATH:
                    cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    @property
    def is_open(self) -> bool:
        """Whether an engine is currently allocated."""
        return self._engine is not None

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    def close(self) -> None:
        """Dispose of the engine. An in-memory database is discarded."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
