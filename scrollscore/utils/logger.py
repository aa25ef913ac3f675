"""ScrollScore — Logging Setup.

Centralized logging for the scoring engine: colored console output and
an optional rotating file handler. All modules obtain their logger via
get_logger() so the handlers are installed exactly once.

Environment:
    SCROLLSCORE_LOG_LEVEL: console level (default INFO).
    SCROLLSCORE_LOG_DIR: directory for scrollscore.log. File logging is
        off when unset or empty.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# ── Constants ─────────────────────────────────────────────
LOG_FILENAME = "scrollscore.log"
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

CONSOLE_FORMAT = "%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s"
FILE_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ── ANSI Color Codes ─────────────────────────────────────
COLORS = {
    "DEBUG": "\033[36m",     # Cyan
    "INFO": "\033[32m",      # Green
    "WARNING": "\033[33m",   # Yellow
    "ERROR": "\033[31m",     # Red
    "CRITICAL": "\033[41m",  # Red background
}
RESET = "\033[0m"

_console_handler: logging.Handler | None = None


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name and timestamp.

    Works on a copy of the record so the file handler still receives
    plain, uncolored text.
    """

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        color = COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname:<8}{RESET}"
        record.asctime = f"{color}{self.formatTime(record, self.datefmt)}{RESET}"
        return super().format(record)

    def usesTime(self) -> bool:
        return False


def _resolve_log_dir() -> Path | None:
    """Return the log directory, or None when file logging is disabled."""
    raw = os.environ.get("SCROLLSCORE_LOG_DIR", "")
    if not raw.strip():
        return None
    return Path(raw).expanduser()


def _setup_logging() -> None:
    """Install the console and file handlers on the package logger.

    Idempotent: later calls return immediately.
    """
    global _console_handler
    if _console_handler is not None:
        return

    package_logger = logging.getLogger("scrollscore")
    package_logger.setLevel(logging.DEBUG)

    # ── Console Handler ──────────────────────────────────
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        os.environ.get("SCROLLSCORE_LOG_LEVEL", "INFO").upper()
    )
    console_handler.setFormatter(
        ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT)
    )
    package_logger.addHandler(console_handler)

    # ── Rotating File Handler (DEBUG) ────────────────────
    log_dir = _resolve_log_dir()
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_dir / LOG_FILENAME),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT)
        )
        package_logger.addHandler(file_handler)

    _console_handler = console_handler


def set_level(level: str) -> None:
    """Change the console log level (file handler stays at DEBUG).

    Args:
        level: Level name such as "DEBUG" or "WARNING".

    Raises:
        ValueError: If the level name is unknown.
    """
    _setup_logging()
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level!r}")
    if _console_handler is not None:
        _console_handler.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger with the package handlers installed.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        A configured logging.Logger instance.
    """
    _setup_logging()
    return logging.getLogger(name)
