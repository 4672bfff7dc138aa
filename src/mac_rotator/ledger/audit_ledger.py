"""Append-only, hash-chained audit ledger.

Every attempt (including audit-only dry runs) is committed as:
1. A line in the summary log (summary.log), human-readable
2. A line in the record stream (records.jsonl), machine-readable
3. An overwrite of the chain-state file with the new head hash

The caller owns the previous hash: it is passed into append() and the
returned entry's hash_curr is what the caller passes next time. The ledger
keeps no ambient chain position of its own.

Logs are written to <log_root>/records.jsonl and <log_root>/summary.log.
"""

from __future__ import annotations

__all__ = ["AuditLedger"]

import logging
from pathlib import Path

from mac_rotator.constants import (
    APP_NAME,
    DEFAULT_HASH_CHAIN_FILE,
    RECORDS_FILE_NAME,
    SUMMARY_FILE_NAME,
)
from mac_rotator.ledger.chain import canonical_serialize, compute_chain_hash
from mac_rotator.ledger.chain_state import ChainStateStore
from mac_rotator.ledger.sink_handler import setup_ledger_logger
from mac_rotator.telemetry.models.audit import LedgerEntry, SpoofAttempt
from mac_rotator.telemetry.system_logger import get_system_logger

_system_logger = get_system_logger()


class AuditLedger:
    """Tamper-evident record of every rotation attempt.

    Args:
        log_root: Directory holding the ledger files.
        hash_chain_file: Name of the chain-state file inside log_root.
    """

    def __init__(self, log_root: Path, hash_chain_file: str = DEFAULT_HASH_CHAIN_FILE) -> None:
        self.log_root = log_root
        self.records_path = log_root / RECORDS_FILE_NAME
        self.summary_path = log_root / SUMMARY_FILE_NAME
        self.state = ChainStateStore(log_root / hash_chain_file)

        self._records: logging.Logger = setup_ledger_logger(f"{APP_NAME}.ledger.records", self.records_path)
        self._summary: logging.Logger = setup_ledger_logger(f"{APP_NAME}.ledger.summary", self.summary_path)

    def load_head(self) -> str:
        """Return the persisted head hash ("" on first run)."""
        return self.state.load()

    def append(self, attempt: SpoofAttempt, previous_hash: str) -> LedgerEntry:
        """Commit one attempt to the ledger.

        Args:
            attempt: The attempt to record.
            previous_hash: hash_curr of the previous entry ("" for genesis).

        Returns:
            The committed entry; its hash_curr is the new head.

        Raises:
            AuditFailure: If any sink or the chain state cannot be written.
        """
        record = attempt.to_record()
        current_hash = compute_chain_hash(previous_hash, canonical_serialize(record))
        entry = LedgerEntry.model_validate({**record, "hashPrev": previous_hash, "hashCurr": current_hash})

        # The record line is the commit point: once it lands, only the chain
        # state may still fail, and verification reports that as a head mismatch.
        self._summary.info(attempt.summary_line())
        self._records.info(entry.to_line())
        self.state.save(current_hash)

        _system_logger.debug(
            {
                "event": "ledger_append",
                "message": f"Ledger head advanced to {current_hash[:16]}...",
                "adapter": attempt.adapter,
            }
        )
        return entry

    def close(self) -> None:
        """Close sink file handles."""
        for logger in (self._records, self._summary):
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()
