"""Subprocess helper shared by the platform backends."""

from __future__ import annotations

__all__ = ["run_command"]

import subprocess

from mac_rotator.constants import SUBPROCESS_TIMEOUT_SECONDS
from mac_rotator.exceptions import BackendError
from mac_rotator.telemetry.system_logger import get_system_logger


def run_command(args: list[str], timeout: int = SUBPROCESS_TIMEOUT_SECONDS) -> str:
    """Run a command and return its stdout.

    Args:
        args: Command and arguments (no shell).
        timeout: Seconds before the command is killed.

    Returns:
        Captured stdout, stripped.

    Raises:
        BackendError: If the command is missing, times out, or exits non-zero.
    """
    display = args[0]
    get_system_logger().debug({"event": "platform_command", "message": f"Running {display}", "args": args})
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise BackendError(f"{display} timed out after {timeout}s", command=display) from e
    except FileNotFoundError as e:
        raise BackendError(f"{display} not found", command=display) from e
    except OSError as e:
        raise BackendError(f"{display} could not be started: {e}", command=display) from e

    if result.returncode != 0:
        detail = (result.stderr or result.stdout).strip() or f"exit code {result.returncode}"
        raise BackendError(f"{display} failed: {detail}", command=display)
    return result.stdout.strip()
