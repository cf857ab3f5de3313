"""Runtime configuration for Spectre.

Settings are read from ``SPECTRE_*`` environment variables. Every field has a
default so an empty environment yields a working in-memory setup.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "SPECTRE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass
class Settings:
    """Spectre settings.

    Attributes:
        db_path: SQLite path for the state store. ":memory:" keeps all state in process.
        log_dir: Directory for rotating log files.
        log_level: Root log level for the spectre logger.
        debug_mode: Include internal error details in API error responses.
        cors_origin: Allowed CORS origin for the HTTP API.
        host: Bind address for ``python -m spectre``.
        port: Bind port for ``python -m spectre``.
        seconds_per_minute: Wall-clock seconds the executor spends per estimated step minute.
        max_step_seconds: Upper bound on simulated work for a single step.
        max_parallel_steps: Steps from independent subtrees that may run at once.
        review_seed: Seed for the default reviewer signal source (None = nondeterministic).
    """

    db_path: str = ":memory:"
    log_dir: str = "logs"
    log_level: str = "INFO"
    debug_mode: bool = False
    cors_origin: str = "*"
    host: str = "127.0.0.1"
    port: int = 8000
    seconds_per_minute: float = 0.01
    max_step_seconds: float = 5.0
    max_parallel_steps: int = 1
    review_seed: int | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a variable holds a value of the wrong type.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            return env.get(f"{ENV_PREFIX}{name}")

        settings = cls(
            db_path=get("DB_PATH") or defaults.db_path,
            log_dir=get("LOG_DIR") or defaults.log_dir,
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            debug_mode=_parse_bool("DEBUG", get("DEBUG"), defaults.debug_mode),
            cors_origin=get("CORS_ORIGIN") or defaults.cors_origin,
            host=get("HOST") or defaults.host,
            port=_parse_int("PORT", get("PORT"), defaults.port),
            seconds_per_minute=_parse_float(
                "SECONDS_PER_MINUTE", get("SECONDS_PER_MINUTE"), defaults.seconds_per_minute
            ),
            max_step_seconds=_parse_float(
                "MAX_STEP_SECONDS", get("MAX_STEP_SECONDS"), defaults.max_step_seconds
            ),
            max_parallel_steps=_parse_int(
                "MAX_PARALLEL_STEPS", get("MAX_PARALLEL_STEPS"), defaults.max_parallel_steps
            ),
            review_seed=_parse_optional_int("REVIEW_SEED", get("REVIEW_SEED")),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Check cross-field constraints.

        Raises:
            ConfigError: If any value is out of range.
        """
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"Invalid log level: {self.log_level}")
        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}")
        if self.seconds_per_minute < 0 or self.max_step_seconds < 0:
            raise ConfigError("Simulated work durations must not be negative")
        if self.max_parallel_steps < 1:
            raise ConfigError("max_parallel_steps must be at least 1")


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")


def _parse_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e


def _parse_optional_int(name: str, raw: str | None) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    return _parse_int(name, raw, 0)


def _parse_float(name: str, raw: str | None, default: float) -> float:
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e
