"""Shared CLI utility functions."""

from __future__ import annotations

__all__ = [
    "config_option",
    "exit_with_failure",
    "load_config_or_exit",
]

import sys
from pathlib import Path
from typing import Any, Callable, NoReturn

import click

from mac_rotator.config import AppConfig, default_config_path
from mac_rotator.exceptions import ConfigurationError, CriticalFailure
from mac_rotator.telemetry.system_logger import get_system_logger

from .styling import style_error


def config_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the shared --config/-c option."""
    return click.option(
        "--config",
        "-c",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Config file (default: platform config directory)",
    )(func)


def load_config_or_exit(config_path: Path | None) -> AppConfig:
    """Load configuration, exiting with the configuration exit code on failure."""
    path = config_path or default_config_path()
    try:
        return AppConfig.load_from_file(path)
    except ConfigurationError as e:
        exit_with_failure(e, "Configuration error")


def exit_with_failure(error: CriticalFailure, title: str) -> NoReturn:
    """Log a critical failure, report it on stderr and exit with its code."""
    get_system_logger().debug(
        {
            "event": error.failure_type,
            "message": str(error),
            "exit_code": error.exit_code,
        }
    )
    click.echo(style_error(f"{title}: {error}"), err=True)
    sys.exit(error.exit_code)
