"""Pydantic models for ledger records."""

from mac_rotator.telemetry.models.audit import (
    RECORD_FIELDS,
    AttemptOutcome,
    LedgerEntry,
    MutationMethod,
    SpoofAttempt,
)

__all__ = [
    "RECORD_FIELDS",
    "AttemptOutcome",
    "LedgerEntry",
    "MutationMethod",
    "SpoofAttempt",
]
