"""Schedule command for mac-rotator CLI.

Registers a recurring rotation pass with the platform scheduler.

- Windows: a Task Scheduler task running with highest privileges that
  never starts a second instance while one is running
- Elsewhere: prints a crontab line wrapped in flock for the same guarantee
"""

from __future__ import annotations

__all__ = ["build_cron_line", "build_schtasks_command", "schedule"]

import shlex
import subprocess
import sys
from pathlib import Path

import click

from mac_rotator.config import default_config_path
from mac_rotator.constants import DEFAULT_SCHEDULE_INTERVAL_MINUTES, SCHEDULED_TASK_NAME, SUBPROCESS_TIMEOUT_SECONDS

from ..helpers import config_option, load_config_or_exit
from ..styling import style_dim, style_error, style_label, style_success

# schtasks /SC MINUTE accepts 1..1439
_MAX_INTERVAL_MINUTES = 1439


def _run_invocation(config_path: Path | None) -> list[str]:
    """Command line that runs one pass with the current interpreter.

    The config path is always explicit: the scheduler runs as SYSTEM or
    root, whose own config directory is not the invoking user's.
    """
    path = (config_path or default_config_path()).resolve()
    return [sys.executable, "-m", "mac_rotator.cli.main", "run", "--config", str(path)]


def build_schtasks_command(interval_minutes: int, config_path: Path | None) -> list[str]:
    """schtasks arguments registering the recurring task."""
    task_run = subprocess.list2cmdline(_run_invocation(config_path))
    return [
        "schtasks",
        "/Create",
        "/F",
        "/TN",
        SCHEDULED_TASK_NAME,
        "/SC",
        "MINUTE",
        "/MO",
        str(interval_minutes),
        "/RL",
        "HIGHEST",
        "/RU",
        "SYSTEM",
        "/TR",
        task_run,
    ]


def build_cron_line(interval_minutes: int, config_path: Path | None) -> str:
    """crontab entry running one pass every interval_minutes."""
    if interval_minutes < 60:
        timing = f"*/{interval_minutes} * * * *"
    elif interval_minutes % 60 == 0 and interval_minutes < 1440:
        timing = f"0 */{interval_minutes // 60} * * *"
    else:
        raise click.BadParameter("cron schedules need fewer than 60 minutes or whole hours under 24")
    command = shlex.join(_run_invocation(config_path))
    return f"{timing} flock -n /run/lock/mac-rotator.lock {command}"


@click.command()
@click.option(
    "--interval-minutes",
    type=click.IntRange(1, _MAX_INTERVAL_MINUTES),
    default=DEFAULT_SCHEDULE_INTERVAL_MINUTES,
    show_default=True,
    help="Minutes between rotation passes",
)
@config_option
def schedule(interval_minutes: int, config_path: Path | None) -> None:
    """Register a recurring rotation pass.

    On Windows this creates (or replaces) a scheduled task. Elsewhere the
    crontab line to install is printed.
    """
    # Fail early on a broken config rather than at the first scheduled run
    load_config_or_exit(config_path)

    if sys.platform != "win32":
        click.echo(style_label("Add this line to root's crontab"))
        click.echo(build_cron_line(interval_minutes, config_path))
        return

    args = build_schtasks_command(interval_minutes, config_path)
    click.echo(style_dim(subprocess.list2cmdline(args)))
    try:
        subprocess.run(args, check=True, capture_output=True, text=True, timeout=SUBPROCESS_TIMEOUT_SECONDS)
    except subprocess.CalledProcessError as e:
        click.echo(style_error(f"schtasks failed: {(e.stderr or e.stdout or '').strip()}"), err=True)
        sys.exit(1)
    except (OSError, subprocess.TimeoutExpired) as e:
        click.echo(style_error(f"Could not run schtasks: {e}"), err=True)
        sys.exit(1)

    click.echo(style_success(f"Scheduled task {SCHEDULED_TASK_NAME!r} runs every {interval_minutes} minutes"))
