"""Main CLI entry point for mac-rotator.

Defines the CLI group and registers all subcommands.

Commands:
    adapters  - List adapters eligible for rotation
    init      - Create the configuration file
    run       - Run one rotation pass
    schedule  - Register a recurring rotation pass
    verify    - Verify audit ledger integrity

Subcommand help:
    mac-rotator COMMAND -h     Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli"]

import sys

import click

from mac_rotator import __version__

from .commands.adapters import adapters
from .commands.init import init
from .commands.run import run
from .commands.schedule import schedule
from .commands.verify import verify


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  mac-rotator init                      Write default configuration
  mac-rotator adapters --all            See which adapters would be rotated
  mac-rotator run --audit               Dry run: record intent only
  mac-rotator run                       Rotate (requires administrator/root)
  mac-rotator schedule --interval-minutes 60

Logs go to the first mounted volume in ExternalVolumeLabels, or the local
user log directory when FallbackLocal is true.
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """mac-rotator: Scheduled MAC address rotation with automatic rollback."""
    if version:
        click.echo(f"mac-rotator {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(adapters)
cli.add_command(init)
cli.add_command(run)
cli.add_command(schedule)
cli.add_command(verify)


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
