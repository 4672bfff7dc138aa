"""CLI output styling utilities.

Provides consistent styling helpers for CLI output:
- Cyan bold for section headers and labels
- Green for success messages (with checkmark)
- Red for error messages (with cross)
- Dim for neutral/empty state messages
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_error",
    "style_header",
    "style_label",
    "style_outcome",
    "style_success",
    "style_warning",
]

import click

from mac_rotator.telemetry.models.audit import AttemptOutcome

_OUTCOME_COLORS: dict[AttemptOutcome, str] = {
    AttemptOutcome.SUCCESS: "green",
    AttemptOutcome.FAILED: "red",
    AttemptOutcome.ROLLED_BACK: "yellow",
    AttemptOutcome.AUDITED: "cyan",
}


def style_header(title: str) -> str:
    """Style a section header with dashes.

    Example:
        >>> click.echo(style_header("Adapters"))
        --- Adapters ---
    """
    return click.style(f"--- {title} ---", fg="cyan", bold=True)


def style_label(label: str) -> str:
    """Style a label for list/summary headers (adds the colon)."""
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark.

    Example:
        >>> click.echo(style_success("Configuration saved"))
        ✓ Configuration saved
    """
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Example:
        >>> click.echo(style_error("Ledger hash mismatch"), err=True)
        ✗ Ledger hash mismatch
    """
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    """Style a neutral/empty state message as dim."""
    return click.style(message, dim=True)


def style_warning(message: str) -> str:
    """Style a warning message with yellow color.

    Example:
        >>> click.echo(style_warning("Rollback failed on eth0"))
        Warning: Rollback failed on eth0
    """
    return click.style(f"Warning: {message}", fg="yellow", bold=True)


def style_outcome(outcome: AttemptOutcome) -> str:
    """Color an attempt outcome for the run summary table."""
    return click.style(outcome.value, fg=_OUTCOME_COLORS[outcome])
