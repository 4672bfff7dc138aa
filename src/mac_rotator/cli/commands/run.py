"""Run command for mac-rotator CLI.

Performs one rotation pass over every eligible adapter.
"""

from __future__ import annotations

__all__ = ["run"]

import logging
import sys
from pathlib import Path

import click

from mac_rotator.exceptions import AuditFailure, BackendError, CriticalFailure
from mac_rotator.orchestrator import Orchestrator
from mac_rotator.platform import get_backend
from mac_rotator.telemetry.models.audit import AttemptOutcome
from mac_rotator.telemetry.system_logger import set_console_level

from ..helpers import config_option, exit_with_failure, load_config_or_exit
from ..styling import style_dim, style_label, style_outcome, style_success, style_warning


@click.command()
@click.option("--audit", "audit_mode", is_flag=True, help="Record intent only; change nothing")
@click.option("--verbose", is_flag=True, help="Show debug output on stderr")
@config_option
def run(audit_mode: bool, verbose: bool, config_path: Path | None) -> None:
    """Rotate the MAC address of every eligible adapter.

    Each adapter gets a new random locally-administered address, is bounced,
    and is health-checked. Adapters that do not come back up (or get no IPv4
    address, if configured) are rolled back. Every attempt is appended to the
    hash-chained audit ledger.

    Exit codes:
      0 - Pass completed (including when no adapter was eligible)
      1 - Configuration error, no log root, or adapters could not be listed
      10 - Audit ledger could not be written
    """
    config = load_config_or_exit(config_path)
    set_console_level(logging.DEBUG if verbose or config.log_level == "DEBUG" else logging.INFO)

    try:
        backend = get_backend()
        report = Orchestrator(config, backend, audit_mode=audit_mode).run()
    except AuditFailure as e:
        exit_with_failure(e, "Audit ledger failure")
    except CriticalFailure as e:
        exit_with_failure(e, "Run aborted")
    except BackendError as e:
        click.echo(style_warning(f"Could not enumerate adapters: {e}"), err=True)
        sys.exit(1)

    click.echo(style_label("Log root") + f" {report.log_root}")
    if not report.attempts:
        click.echo(style_dim("No eligible adapters."))
        return

    for attempt in report.attempts:
        line = f"  {attempt.adapter}: {style_outcome(attempt.outcome)}"
        if attempt.new_mac and attempt.outcome != AttemptOutcome.FAILED:
            line += f" {attempt.old_mac} -> {attempt.new_mac}"
        if attempt.error:
            line += f" ({attempt.error})"
        click.echo(line)

    for attempt in report.rollback_failures:
        click.echo(
            style_warning(f"Rollback failed on {attempt.adapter}; its address must be restored manually"),
            err=True,
        )

    counts = ", ".join(f"{outcome.value}={count}" for outcome, count in report.counts.items() if count)
    click.echo(style_success(f"Pass complete: {counts}"))
