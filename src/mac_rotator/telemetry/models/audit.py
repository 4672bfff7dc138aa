"""Pydantic models for the audit ledger.

SpoofAttempt is the in-memory outcome of processing one adapter in one
pass. LedgerEntry is its committed, hash-chained form: the record-stream
fields in canonical order followed by hashPrev and hashCurr.

Field order of LedgerEntry is part of the on-disk format: the canonical
serialization hashed into the chain follows RECORD_FIELDS exactly.
"""

from __future__ import annotations

__all__ = [
    "RECORD_FIELDS",
    "AttemptOutcome",
    "LedgerEntry",
    "MutationMethod",
    "SpoofAttempt",
]

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mac_rotator.utils.logging.iso_formatter import iso_timestamp

# Canonical order of the hashed fields in a record-stream line
RECORD_FIELDS: tuple[str, ...] = ("ts", "adapter", "desc", "oldMac", "newMac", "success", "error")


class MutationMethod(str, Enum):
    """Which override path took effect."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    NONE = "none"


class AttemptOutcome(str, Enum):
    """Terminal outcome of one adapter in one pass."""

    SUCCESS = "success"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"
    AUDITED = "audited"


class SpoofAttempt(BaseModel):
    """One adapter's rotation attempt.

    Created per adapter per pass and consumed immediately by the ledger.
    """

    adapter: str
    description: str = ""
    old_mac: str | None = None
    new_mac: str | None = None
    method: MutationMethod = MutationMethod.NONE
    outcome: AttemptOutcome
    error: str | None = None
    rollback_failed: bool = False
    timestamp: str = Field(default_factory=iso_timestamp)

    @property
    def success(self) -> bool:
        """True only when a new address was applied and verified."""
        return self.outcome == AttemptOutcome.SUCCESS

    def to_record(self) -> dict[str, Any]:
        """Record-stream fields in canonical order (no hashes)."""
        return {
            "ts": self.timestamp,
            "adapter": self.adapter,
            "desc": self.description,
            "oldMac": self.old_mac,
            "newMac": self.new_mac,
            "success": self.success,
            "error": self.error,
        }

    def summary_line(self) -> str:
        """Human-readable one-line summary for summary.log."""
        old = self.old_mac or "unknown"
        if self.outcome == AttemptOutcome.AUDITED:
            body = f"{old} AUDIT"
        elif self.outcome == AttemptOutcome.SUCCESS:
            body = f"{old} -> {self.new_mac} OK"
        elif self.outcome == AttemptOutcome.ROLLED_BACK:
            verdict = "ROLLBACK FAILED" if self.rollback_failed else "ROLLED BACK"
            body = f"{old} -> {self.new_mac} {verdict}: {self.error}"
        elif self.error:
            body = f"{old} FAIL: {self.error}"
        else:
            body = f"{old} FAIL"
        return f"{self.timestamp} [{self.adapter}] {body}"


class LedgerEntry(BaseModel):
    """A committed record-stream line.

    Invariant: hash_curr == SHA-256(hash_prev + "|" + canonical record).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ts: str
    adapter: str
    desc: str
    old_mac: str | None = Field(alias="oldMac")
    new_mac: str | None = Field(alias="newMac")
    success: bool
    error: str | None
    hash_prev: str = Field(alias="hashPrev")
    hash_curr: str = Field(alias="hashCurr")

    def to_line(self) -> str:
        """Serialize as one compact JSON line in on-disk field order."""
        return json.dumps(
            self.model_dump(by_alias=True),
            separators=(",", ":"),
            ensure_ascii=False,
        )
