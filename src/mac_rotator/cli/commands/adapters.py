"""Adapters command for mac-rotator CLI.

Lists the adapters a pass would touch. Read-only.
"""

from __future__ import annotations

__all__ = ["adapters"]

import sys
from pathlib import Path

import click

from mac_rotator.adapters import AdapterInventory
from mac_rotator.exceptions import BackendError, CriticalFailure
from mac_rotator.platform import get_backend

from ..helpers import config_option, exit_with_failure, load_config_or_exit
from ..styling import style_dim, style_error, style_header


@click.command()
@click.option("--all", "show_all", is_flag=True, help="Also show excluded and disabled adapters")
@config_option
def adapters(show_all: bool, config_path: Path | None) -> None:
    """List adapters eligible for rotation."""
    config = load_config_or_exit(config_path)

    try:
        backend = get_backend()
        inventory = AdapterInventory(backend, config.exclusions)
        eligible = inventory.list_eligible(active_only=True)
        every = backend.list_adapters() if show_all else []
    except CriticalFailure as e:
        exit_with_failure(e, "Cannot list adapters")
    except BackendError as e:
        click.echo(style_error(f"Could not enumerate adapters: {e}"), err=True)
        sys.exit(1)

    click.echo(style_header("Eligible adapters"))
    if not eligible:
        click.echo(style_dim("None."))
    for adapter in eligible:
        click.echo(f"  {adapter.name:<20} {adapter.mac or '-':<17} {adapter.status.value:<8} {adapter.description}")

    if not show_all:
        return

    eligible_names = {adapter.name for adapter in eligible}
    skipped = [adapter for adapter in sorted(every, key=lambda a: a.name) if adapter.name not in eligible_names]
    click.echo()
    click.echo(style_header("Skipped adapters"))
    if not skipped:
        click.echo(style_dim("None."))
    for adapter in skipped:
        pattern = inventory.excluded_by(adapter)
        reason = f"excluded by {pattern!r}" if pattern is not None else "disabled"
        click.echo(f"  {adapter.name:<20} {reason}")
