"""Logging setup for the ``spectre`` logger tree.

Everything logs under ``spectre.*``; ``setup_logging`` attaches a rotating
file handler (and optionally the console) to the root of that tree. Telemetry
text that may carry executor error messages goes through ``sanitize_for_log``
before it is buffered, streamed or written.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "spectre.log"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Step handlers surface connection and deployment errors verbatim.
_SECRET_PATTERNS = [
    (re.compile(r"(?i)\bBearer\s+[\w.~+/-]+=*"), "Bearer [REDACTED]"),
    (re.compile(r"(?<=://)[^/\s:@]+:[^/\s@]+(?=@)"), "[REDACTED]"),
    (
        re.compile(r"(?i)\b(api[_-]?key|token|secret|password|passwd)([=:]\s*)[^\s,;&'\"]+"),
        r"\1\2[REDACTED]",
    ),
]


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``spectre`` logger.

    ``log_dir`` falls back to ``SPECTRE_LOG_DIR`` and ``level`` to
    ``SPECTRE_LOG_LEVEL``. Calling it again replaces the previous handlers.

    Returns:
        The ``spectre`` logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("SPECTRE_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("SPECTRE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("spectre")
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    log_path = log_dir / log_file
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info("Logging to %s at %s", log_path, level.upper())
    return logger


def truncate_output(output: str, max_length: int = 5000) -> str:
    """Cut step output to ``max_length`` characters, noting how much was dropped."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Mask credentials in free text.

    Covers bearer tokens, ``user:password@`` in URLs, and ``key=value`` or
    ``key: value`` pairs for api keys, tokens, secrets and passwords.
    """
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text
