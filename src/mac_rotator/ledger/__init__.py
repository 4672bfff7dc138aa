"""Tamper-evident audit ledger.

- AuditLedger: Appends chained entries to the record stream and summary log
- ChainStateStore: Persists the head hash between runs
- verify_ledger: Replays the record stream and recomputes the chain
- FailClosedLedgerHandler: Sink handler that aborts on file deletion/replacement
"""

from mac_rotator.ledger.audit_ledger import AuditLedger
from mac_rotator.ledger.chain import (
    VerificationResult,
    canonical_serialize,
    compute_chain_hash,
    verify_ledger,
    verify_ledger_lines,
)
from mac_rotator.ledger.chain_state import ChainStateStore
from mac_rotator.ledger.sink_handler import (
    FailClosedLedgerHandler,
    setup_ledger_logger,
    verify_ledger_writable,
)

__all__ = [
    "AuditLedger",
    "ChainStateStore",
    "FailClosedLedgerHandler",
    "VerificationResult",
    "canonical_serialize",
    "compute_chain_hash",
    "setup_ledger_logger",
    "verify_ledger",
    "verify_ledger_lines",
    "verify_ledger_writable",
]
