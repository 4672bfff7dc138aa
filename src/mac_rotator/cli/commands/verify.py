"""Verify command for mac-rotator CLI.

Replays the audit ledger's hash chain and compares its head with the
chain-state file.
"""

from __future__ import annotations

__all__ = ["verify"]

import sys
from pathlib import Path

import click

from mac_rotator.constants import RECORDS_FILE_NAME
from mac_rotator.exceptions import AuditFailure, BackendError, CriticalFailure
from mac_rotator.ledger import ChainStateStore, verify_ledger
from mac_rotator.orchestrator import resolve_log_root
from mac_rotator.platform import get_backend

from ..helpers import config_option, load_config_or_exit
from ..styling import style_error, style_label, style_success, style_warning

EXIT_PASSED = 0
EXIT_FAILED = 1  # Tampering detected
EXIT_UNABLE = 2  # Unable to verify (missing files, etc.)


@click.command()
@click.option(
    "--log-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Ledger directory (default: resolved as for 'run')",
)
@config_option
def verify(log_root: Path | None, config_path: Path | None) -> None:
    """Verify audit ledger integrity.

    Checks that every record's hash covers its content and its predecessor,
    and that the last record matches the chain-state file (detects
    truncation).

    Exit codes:
      0 - All checks passed
      1 - Tampering detected (hash chain broken or state mismatch)
      2 - Unable to verify (missing files, read errors)
    """
    config = load_config_or_exit(config_path)

    if log_root is None:
        try:
            log_root = resolve_log_root(config, get_backend())
        except (CriticalFailure, BackendError) as e:
            click.echo(style_error(f"Cannot locate ledger: {e}"), err=True)
            sys.exit(EXIT_UNABLE)

    records_path = log_root / RECORDS_FILE_NAME
    click.echo(style_label("Ledger") + f" {records_path}")

    try:
        head = ChainStateStore(log_root / config.hash_chain_file).load()
    except AuditFailure as e:
        click.echo(style_error(f"Chain state unreadable: {e}"), err=True)
        sys.exit(EXIT_FAILED)

    if not records_path.exists() and not head:
        click.echo(style_warning("No ledger found; nothing to verify."))
        sys.exit(EXIT_UNABLE)

    result = verify_ledger(records_path, expected_head=head)

    for warning in result.warnings:
        click.echo(style_warning(warning))

    if not result.success:
        for error in result.errors:
            click.echo(style_error(error))
        click.echo(style_error(f"Verification FAILED ({result.entries} entries checked)"))
        sys.exit(EXIT_FAILED)

    click.echo(style_success(f"Verification passed: {result.entries} entries, head {result.head[:16] or '(genesis)'}"))
    sys.exit(EXIT_PASSED)
