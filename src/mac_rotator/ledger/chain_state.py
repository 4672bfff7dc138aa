"""Chain state persistence.

The chain-state file holds a single hex hash: hashCurr of the most recent
committed ledger entry, with no trailing newline. It is the only recovery
point for hashPrev across runs. An absent file means genesis.

State is written atomically (temp file + rename) after each append so a
crash mid-write never leaves a truncated hash behind.

Security Note:
    The state file is NOT cryptographically protected. Tampering is detected
    if ONLY the state file is modified (verify_ledger reports a head
    mismatch). See chain.py for the limits of self-attestation.
"""

from __future__ import annotations

__all__ = ["ChainStateStore"]

import os
import re
import tempfile
from pathlib import Path

from mac_rotator.constants import GENESIS_HASH
from mac_rotator.exceptions import AuditFailure

_HASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class ChainStateStore:
    """Loads and atomically overwrites the chain-state file.

    Single-writer: concurrent runs against the same log root are not
    supported and must be serialized by the scheduler.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str:
        """Return the stored head hash, or GENESIS_HASH if there is none.

        Raises:
            AuditFailure: If the file exists but is unreadable or not a hash.
        """
        if not self._path.exists():
            return GENESIS_HASH
        try:
            content = self._path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise AuditFailure(f"Cannot read chain state {self._path}: {e}") from e
        if not content:
            return GENESIS_HASH
        if not _HASH_PATTERN.match(content):
            raise AuditFailure(f"Corrupted chain state {self._path}: not a SHA-256 hex digest")
        return content

    def save(self, current_hash: str) -> None:
        """Persist current_hash atomically, without a trailing newline.

        Raises:
            AuditFailure: If the state cannot be written.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}_",
                suffix=".tmp",
            )
        except OSError as e:
            raise AuditFailure(f"Cannot write chain state {self._path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(current_hash)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise AuditFailure(f"Cannot write chain state {self._path}: {e}") from e
