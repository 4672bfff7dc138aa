"""Hash chain computation and verification for the audit ledger.

Each record-stream line carries:
- hashPrev: hashCurr of the previous line ("" for the first line)
- hashCurr: SHA-256 hex of hashPrev + "|" + canonical serialization

The canonical serialization is compact JSON of the record fields in
RECORD_FIELDS order, non-ASCII preserved. Because each hash covers its
predecessor, altering, deleting, inserting or reordering any committed line
breaks verification from that point forward.

Verification functions:
- verify_ledger_lines(lines): Verify pre-read lines, returns VerificationResult
- verify_ledger(path, expected_head): Read file and verify, including the
  chain-state head (detects truncation of trailing lines)

Security Limitations:
    This is a self-attesting system with NO external attestation. An attacker
    with write access to both the record stream AND the chain-state file can
    truncate the ledger and rewrite the head consistently. Keep the log root
    on a volume the attacker cannot reach (the external-volume labels exist
    for this) or ship the record stream somewhere append-only.
"""

from __future__ import annotations

__all__ = [
    "VerificationResult",
    "canonical_serialize",
    "compute_chain_hash",
    "verify_ledger",
    "verify_ledger_lines",
]

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mac_rotator.constants import GENESIS_HASH
from mac_rotator.telemetry.models.audit import RECORD_FIELDS

_HASH_FIELDS = frozenset({"hashPrev", "hashCurr"})


@dataclass
class VerificationResult:
    """Result of ledger verification.

    Attributes:
        success: True if all checks passed.
        entries: Number of lines checked.
        head: hashCurr of the last valid line ("" if none).
        errors: Critical errors (tampering or corruption).
        warnings: Non-critical findings (e.g., time regression).
    """

    success: bool
    entries: int = 0
    head: str = GENESIS_HASH
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def canonical_serialize(record: Mapping[str, Any]) -> str:
    """Serialize record fields deterministically.

    Args:
        record: Mapping containing every name in RECORD_FIELDS (hash fields
            and any other keys are ignored).

    Returns:
        Compact JSON with fields in RECORD_FIELDS order.

    Raises:
        KeyError: If a record field is missing.
    """
    ordered = {name: record[name] for name in RECORD_FIELDS}
    return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False)


def compute_chain_hash(previous_hash: str, serialized: str) -> str:
    """Compute SHA-256(previous_hash + "|" + serialized) as lowercase hex."""
    return hashlib.sha256(f"{previous_hash}|{serialized}".encode("utf-8")).hexdigest()


def verify_ledger_lines(lines: list[str]) -> VerificationResult:
    """Replay record-stream lines and recompute the chain.

    Checks, per line:
    - Valid JSON object with every record and hash field, and no others
    - hashPrev equals the previous line's hashCurr (GENESIS_HASH for the first)
    - hashCurr equals the recomputed hash
    - Timestamps non-decreasing (warning only)

    Args:
        lines: Raw lines of the record stream (blank lines are skipped).

    Returns:
        VerificationResult; head is the last line's stored hashCurr.
    """
    errors: list[str] = []
    warnings: list[str] = []
    expected_prev = GENESIS_HASH
    prev_time: str | None = None
    entries = 0
    head = GENESIS_HASH

    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue

        try:
            entry = json.loads(line)
        except json.JSONDecodeError as e:
            errors.append(f"Line {line_num}: Invalid JSON: {e}")
            continue
        if not isinstance(entry, dict):
            errors.append(f"Line {line_num}: Entry is not a JSON object")
            continue

        entries += 1
        missing = [name for name in (*RECORD_FIELDS, *_HASH_FIELDS) if name not in entry]
        if missing:
            errors.append(f"Line {line_num}: Missing fields: {', '.join(sorted(missing))}")
            continue
        unexpected = sorted(set(entry) - set(RECORD_FIELDS) - _HASH_FIELDS)
        if unexpected:
            errors.append(f"Line {line_num}: Unexpected fields: {', '.join(unexpected)}")

        stored_prev = entry["hashPrev"]
        stored_curr = entry["hashCurr"]

        if stored_prev != expected_prev:
            errors.append(
                f"Line {line_num}: Chain break. hashPrev={stored_prev!r} does not match "
                f"previous hashCurr={expected_prev!r}"
            )

        computed = compute_chain_hash(stored_prev, canonical_serialize(entry))
        if computed != stored_curr:
            errors.append(f"Line {line_num}: Entry hash mismatch. Stored={stored_curr}, computed={computed}")

        timestamp = entry.get("ts")
        if prev_time is not None and isinstance(timestamp, str) and timestamp < prev_time:
            warnings.append(f"Line {line_num}: Time regression. Current={timestamp}, previous={prev_time}")

        # Continue from the stored hash so one altered line yields one break
        expected_prev = stored_curr
        head = stored_curr
        if isinstance(timestamp, str):
            prev_time = timestamp

    return VerificationResult(
        success=len(errors) == 0,
        entries=entries,
        head=head,
        errors=errors,
        warnings=warnings,
    )


def verify_ledger(records_path: Path, expected_head: str | None = None) -> VerificationResult:
    """Verify a record stream file, optionally against the chain-state head.

    Args:
        records_path: Path to records.jsonl.
        expected_head: Hash stored in the chain-state file. When given, the
            last line's hashCurr must equal it (GENESIS_HASH means the
            ledger must be empty).

    Returns:
        VerificationResult with all errors/warnings.
    """
    if not records_path.exists():
        if expected_head:
            return VerificationResult(
                success=False,
                errors=[f"Record stream is missing but chain state expects head {expected_head}"],
            )
        return VerificationResult(success=True, warnings=["Record stream does not exist yet"])

    try:
        with records_path.open(encoding="utf-8") as f:
            lines = f.readlines()
    except OSError as e:
        return VerificationResult(success=False, errors=[f"Cannot read file: {e}"])

    result = verify_ledger_lines(lines)

    if expected_head is not None and result.head != expected_head:
        result.errors.append(
            f"Head mismatch with chain state. State expects {expected_head or '(genesis)'}, "
            f"ledger ends at {result.head or '(genesis)'}. "
            f"Trailing entries were removed or the state file was altered."
        )
        result.success = False

    return result
