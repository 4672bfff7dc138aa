"""Init command for mac-rotator CLI.

Writes a default configuration file.
"""

from __future__ import annotations

__all__ = ["init"]

import sys
from pathlib import Path

import click

from mac_rotator.config import AppConfig, default_config_path

from ..helpers import config_option
from ..styling import style_error, style_label, style_success


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing config without prompting")
@click.option(
    "--volume-label",
    "volume_labels",
    multiple=True,
    help="External volume label for logs (repeatable, tried in order)",
)
@click.option(
    "--no-fallback-local",
    is_flag=True,
    help="Refuse to run when no log volume is mounted",
)
@config_option
def init(force: bool, volume_labels: tuple[str, ...], no_fallback_local: bool, config_path: Path | None) -> None:
    """Create the configuration file with default settings.

    Edit the file afterwards to change exclusion patterns or health-check
    timing.
    """
    path = config_path or default_config_path()

    if path.exists() and not force:
        if not sys.stdin.isatty():
            click.echo(style_error("Error: Config already exists. Use --force to overwrite."), err=True)
            sys.exit(1)
        if not click.confirm("Config already exists. Overwrite?", default=False):
            click.echo("Aborted.")
            sys.exit(0)

    config = AppConfig(
        external_volume_labels=list(volume_labels),
        fallback_local=not no_fallback_local,
    )
    try:
        config.save_to_file(path)
    except OSError as e:
        click.echo(style_error(f"Error: Could not write config: {e}"), err=True)
        sys.exit(1)

    click.echo(style_success("Configuration saved"))
    click.echo(style_label("Config") + f" {path}")
