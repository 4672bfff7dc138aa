"""Fail-closed file handler for ledger sinks.

The Problem:
  On Unix, when a file is deleted while open, the file descriptor remains
  valid. Writes succeed but go to a "ghost" inode with no directory entry.
  When the process exits, those writes are permanently lost, and the chain
  state would point at an entry nobody can read.

The Solution:
  Before each write, compare the current file's device ID and inode number
  to the original values. If they differ, or the write itself fails, raise
  AuditFailure out of the logging call so the run aborts instead of
  advancing the chain state past a lost entry.
"""

from __future__ import annotations

__all__ = [
    "FailClosedLedgerHandler",
    "LineFormatter",
    "setup_ledger_logger",
    "verify_ledger_writable",
]

import logging
import os
import sys
from pathlib import Path

from mac_rotator.exceptions import AuditFailure


class FailClosedLedgerHandler(logging.FileHandler):
    """Ledger handler that detects file deletion or replacement and fails closed.

    Detection covers:
    - File deletion (FileNotFoundError on stat)
    - File replacement (inode change)
    - Permission changes (OSError)
    - Write failures (disk full, etc.)

    Unlike a standard handler, failures are raised to the caller rather than
    routed to handleError(); once compromised, the handler refuses all
    further writes.
    """

    def __init__(self, filename: str, mode: str = "a", encoding: str = "utf-8") -> None:
        super().__init__(filename, mode=mode, encoding=encoding)
        self._compromised: str | None = None

        # Record original file identity (device + inode)
        stat = os.fstat(self.stream.fileno())
        self._original_dev = stat.st_dev
        self._original_ino = stat.st_ino

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a record after verifying file integrity.

        Raises:
            AuditFailure: If the file was deleted, replaced, or cannot be written.
        """
        if self._compromised is not None:
            raise AuditFailure(f"Ledger sink already compromised: {self._compromised}")

        try:
            stat = os.stat(self.baseFilename)
        except FileNotFoundError:
            self._fail(f"Ledger file deleted: {self.baseFilename}")
        except OSError as e:
            self._fail(f"Ledger file inaccessible: {e}")
        else:
            if stat.st_dev != self._original_dev or stat.st_ino != self._original_ino:
                self._fail(f"Ledger file replaced or moved: {self.baseFilename}")

        try:
            msg = self.format(record)
            self.stream.write(msg + self.terminator)
            self.flush()
        except OSError as e:
            self._fail(f"Ledger write failed: {e}")

    def _fail(self, reason: str) -> None:
        self._compromised = reason
        raise AuditFailure(reason)


def verify_ledger_writable(path: Path) -> None:
    """Verify a ledger file can be created and appended to.

    Called before any mutation so a run never changes an adapter it
    cannot record.

    Args:
        path: Path to the ledger file.

    Raises:
        AuditFailure: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AuditFailure(f"Cannot create ledger directory {path.parent}: {e}") from e

    try:
        with path.open("a", encoding="utf-8") as f:
            f.write("")
            f.flush()
            os.fsync(f.fileno())
    except PermissionError as e:
        raise AuditFailure(f"Ledger not writable (permission denied): {e}") from e
    except OSError as e:
        raise AuditFailure(f"Ledger not writable: {e}") from e


class LineFormatter(logging.Formatter):
    """Emit the message exactly as given, one line per record."""

    def format(self, record: logging.LogRecord) -> str:
        return str(record.msg)


def setup_ledger_logger(logger_name: str, log_file: Path) -> logging.Logger:
    """Set up a fail-closed logger that appends verbatim lines to log_file.

    Each ledger sink is a dedicated, non-propagating logger whose only
    handler is a FailClosedLedgerHandler.

    Args:
        logger_name: Name for the logger (e.g., "mac-rotator.ledger.records").
        log_file: Path to the sink file.

    Returns:
        Configured logger instance.

    Raises:
        AuditFailure: If the sink cannot be created or written.
    """
    verify_ledger_writable(log_file)

    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    # Close existing handlers before clearing to avoid resource leaks
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    handler = FailClosedLedgerHandler(str(log_file), mode="a", encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(LineFormatter())
    logger.addHandler(handler)

    if sys.platform != "win32":
        try:
            log_file.chmod(0o600)
        except OSError:
            pass  # Permission changes might fail on some filesystems (e.g. FAT volumes)

    return logger
