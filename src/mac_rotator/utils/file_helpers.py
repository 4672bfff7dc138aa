"""File helpers for the configuration file.

- config_dir: Per-user configuration directory
- restrict_to_owner: chmod 0o600 / 0o700 where the OS supports it
- read_model: Read a JSON file into a pydantic model with readable errors
- write_owner_only_json: Write JSON readable only by the owner
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ValidationError

from mac_rotator.constants import APP_NAME

ModelT = TypeVar("ModelT", bound=BaseModel)

__all__ = [
    "config_dir",
    "read_model",
    "restrict_to_owner",
    "write_owner_only_json",
]


def config_dir() -> Path:
    """Per-user configuration directory (click.get_app_dir).

    ~/.config/mac-rotator on Linux, %APPDATA%\\mac-rotator on Windows.
    """
    return Path(click.get_app_dir(APP_NAME))


def restrict_to_owner(path: Path) -> None:
    """Make path accessible to its owner only. No-op on Windows."""
    if sys.platform == "win32":
        return
    try:
        path.chmod(0o700 if path.is_dir() else 0o600)
    except OSError:
        pass  # FAT/exFAT volumes reject chmod


def _describe_validation_error(error: ValidationError) -> list[str]:
    lines = []
    for item in error.errors():
        where = ".".join(str(part) for part in item["loc"]) or "<root>"
        lines.append(f"  - {where}: {item['msg']}")
    return lines


def read_model(path: Path, model: type[ModelT], *, what: str, hint: str) -> ModelT:
    """Load and validate a JSON document.

    Args:
        path: File to read (UTF-8).
        model: Pydantic model to validate against.
        what: Noun for messages, e.g. "configuration".
        hint: Recovery hint appended to every error.

    Raises:
        ValueError: Missing or unreadable file, bad JSON, or failed validation.
    """
    if not path.exists():
        raise ValueError(f"{what.capitalize()} file not found at {path}.\n{hint}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {what} file {path}: {e}\n{hint}") from e
    except OSError as e:
        raise ValueError(f"Could not read {what} file {path}: {e}") from e

    try:
        return model.model_validate(data)
    except ValidationError as e:
        details = "\n".join(_describe_validation_error(e))
        raise ValueError(f"Invalid {what} in {path}:\n{details}\n\n{hint}") from e


def write_owner_only_json(path: Path, data: Any) -> None:
    """Write data as indented JSON, creating an owner-only parent directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    restrict_to_owner(path.parent)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    restrict_to_owner(path)
