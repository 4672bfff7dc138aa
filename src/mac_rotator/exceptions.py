"""Custom exceptions for mac-rotator.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into two categories:

Recoverable Errors (pass continues with the next adapter):
    - MutationError: Neither override path could be applied
    - HealthCheckTimeout: Link did not come back up in time
    - MismatchError: Adapter reports a different MAC than the one applied
    - RollbackFailure: Clearing the override after a failed health check failed
    - MacGenerationError: Could not draw an address distinct from the current one
    - BackendError: A platform command failed

Critical Failures (run aborts before or during the pass):
    - CriticalFailure: Base for failures that abort the run
    - ConfigurationError: Configuration missing or invalid
    - NoLogVolumeError: No log root could be resolved
    - AuditFailure: Audit ledger cannot be written reliably

Usage:
    from mac_rotator.exceptions import MutationError, AuditFailure
"""

from __future__ import annotations

__all__ = [
    "AuditFailure",
    "BackendError",
    "ConfigurationError",
    "CriticalFailure",
    "HealthCheckTimeout",
    "MacGenerationError",
    "MismatchError",
    "MutationError",
    "MutationErrorKind",
    "NoLogVolumeError",
    "RollbackFailure",
]

from enum import Enum


# =============================================================================
# Recoverable Errors (recorded on the attempt, never escape the adapter)
# =============================================================================


class BackendError(Exception):
    """A platform command or API call failed.

    Attributes:
        command: The command (or API) that failed, for diagnostics.
    """

    def __init__(self, message: str, *, command: str | None = None) -> None:
        super().__init__(message)
        self.command = command


class MutationErrorKind(str, Enum):
    """Why an override could not be applied or cleared.

    Values are the strings recorded in the ledger's error field.
    """

    PRIMARY_UNAVAILABLE = "PrimaryUnavailable"
    FALLBACK_KEY_NOT_FOUND = "FallbackKeyNotFound"
    FALLBACK_WRITE_FAILED = "FallbackWriteFailed"


class MutationError(Exception):
    """One override path failed for an adapter.

    Attributes:
        kind: Which step of the dual-path protocol failed.
        detail: Underlying error text from the platform.
    """

    def __init__(self, kind: MutationErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class HealthCheckTimeout(Exception):
    """Interface did not report Up within the health wait window."""


class MismatchError(Exception):
    """Adapter reports a MAC other than the one just applied.

    Attributes:
        expected: The MAC that was applied.
        observed: The MAC the adapter reports.
    """

    def __init__(self, expected: str, observed: str) -> None:
        self.expected = expected
        self.observed = observed
        super().__init__(f"MAC mismatch: expected {expected}, observed {observed}")


class RollbackFailure(Exception):
    """Clearing the override after a failed health check did not succeed.

    The adapter's address state is undefined afterwards.
    """


class MacGenerationError(Exception):
    """Generator kept producing the adapter's current address."""


# =============================================================================
# Critical Failures (run aborts)
# =============================================================================


class CriticalFailure(Exception):
    """Base exception for failures that abort the whole run.

    Attributes:
        exit_code: Process exit code.
        failure_type: Category string for logging.
    """

    exit_code: int = 1
    failure_type: str = "unknown"


class ConfigurationError(CriticalFailure):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist (not initialized)
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    """

    exit_code = 1
    failure_type = "configuration_failure"


class NoLogVolumeError(CriticalFailure):
    """No log root could be resolved.

    Raised when none of the configured volume labels is mounted and
    the local fallback directory is disabled. No mutation is attempted
    without somewhere to record it.
    """

    exit_code = 1
    failure_type = "no_log_volume"


class AuditFailure(CriticalFailure):
    """Audit ledger integrity cannot be maintained.

    Raised when:
    - A ledger sink is deleted or replaced while the run is writing
    - A ledger sink or the chain-state file becomes unwritable
    - The chain-state file cannot be read

    Exit code 10 indicates audit failure to operators.
    """

    exit_code = 10
    failure_type = "audit_failure"
