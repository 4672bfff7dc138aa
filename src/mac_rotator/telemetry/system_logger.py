"""System logger for operational events.

This module provides a singleton system logger for everything that is not
part of the audit ledger (adapter enumeration, platform commands, health
polling, rollback problems).

Logging strategy:
- Console (stderr): INFO and above, DEBUG with --verbose
- File (system.jsonl under the log root): Only issues (WARNING, ERROR, CRITICAL)

The file handler is configured separately via configure_system_logger_file()
once the log root has been resolved.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "configure_system_logger_file",
    "get_system_logger",
    "set_console_level",
]

import logging
import os
import sys
from pathlib import Path

from mac_rotator.constants import APP_NAME
from mac_rotator.utils.logging.iso_formatter import ISO8601Formatter


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output.

    Extracts 'message' or 'event' field from dict messages for cleaner stderr output.
    """

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            msg = record.msg.get("message") or record.msg.get("event", "")
            return f"{record.levelname}: {msg}"
        return f"{record.levelname}: {record.msg}"


# Module-level singleton logger
_system_logger: logging.Logger | None = None
_stderr_handler: logging.Handler | None = None
_file_handler: logging.FileHandler | None = None


def get_system_logger() -> logging.Logger:
    """Get the singleton system logger instance.

    Creates the logger on first call with stderr handler only.
    File handler is added later via configure_system_logger_file().

    Returns:
        logging.Logger: Configured system logger instance.

    Example:
        >>> logger = get_system_logger()
        >>> logger.warning({"event": "ipv4_missing", "message": "..."})
    """
    global _system_logger, _stderr_handler

    if _system_logger is not None:
        return _system_logger

    _system_logger = logging.getLogger(f"{APP_NAME}.system")
    _system_logger.setLevel(logging.DEBUG)
    _system_logger.propagate = False

    for handler in _system_logger.handlers:
        handler.close()
    _system_logger.handlers.clear()

    _stderr_handler = logging.StreamHandler(sys.stderr)
    _stderr_handler.setLevel(logging.INFO)
    _stderr_handler.setFormatter(ConsoleFormatter())
    _system_logger.addHandler(_stderr_handler)

    return _system_logger


def set_console_level(level: int) -> None:
    """Change the stderr threshold (e.g. logging.DEBUG for --verbose)."""
    get_system_logger()
    if _stderr_handler is not None:
        _stderr_handler.setLevel(level)


def configure_system_logger_file(log_path: Path) -> None:
    """Attach (or move) the system logger's file handler.

    The file handler logs WARNING, ERROR, CRITICAL only. Calling again with
    a different path replaces the previous handler.

    Args:
        log_path: Path to system.jsonl under the resolved log root.
    """
    global _file_handler

    logger = get_system_logger()

    if _file_handler is not None:
        if _file_handler.baseFilename == os.path.abspath(log_path):
            return
        logger.removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return  # If we can't create log dir, stderr will still work

    _file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    _file_handler.setLevel(logging.WARNING)
    _file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(_file_handler)
