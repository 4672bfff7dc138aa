"""Application configuration for mac-rotator.

User creates config via `mac-rotator init`. Config is stored at the
OS-appropriate location (via click.get_app_dir) unless --config points
elsewhere.

Field names are snake_case. The PascalCase names used by existing
deployments (e.g. "HealthWaitSeconds") are accepted on load.

Example usage:
    # Load from config file
    config = AppConfig.load_from_file(config_path)

    # Save new configuration
    config.save_to_file(config_path)
"""

from __future__ import annotations

__all__ = [
    "AppConfig",
    "CONFIG_FILE_NAME",
    "default_config_path",
]

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mac_rotator.constants import (
    DEFAULT_EXCLUSIONS,
    DEFAULT_HASH_CHAIN_FILE,
    DEFAULT_HEALTH_WAIT_SECONDS,
    DEFAULT_MAX_DISABLE_SECONDS,
    MAX_HEALTH_WAIT_SECONDS,
    MAX_MAX_DISABLE_SECONDS,
    MIN_HEALTH_WAIT_SECONDS,
    MIN_MAX_DISABLE_SECONDS,
)
from mac_rotator.exceptions import ConfigurationError
from mac_rotator.utils.file_helpers import config_dir, read_model, write_owner_only_json

CONFIG_FILE_NAME = "config.json"

_RECOVERY_HINT = "Run 'mac-rotator init' to create it (add --force to replace an invalid file)."


def default_config_path() -> Path:
    """Config file location when --config is not given."""
    return config_dir() / CONFIG_FILE_NAME


class AppConfig(BaseModel):
    """Main application configuration for mac-rotator.

    Attributes:
        exclusions: Regex patterns; adapters whose "<name> <description>"
            matches any (case-insensitive) are never touched.
        health_wait_seconds: Window for link-up and IPv4 after a bounce.
        max_disable_seconds: Bound on the disable half of a bounce.
        rollback_on_no_ipv4: Roll back when no IPv4 address is acquired.
        external_volume_labels: Volume labels tried in order for the log root.
        fallback_local: Use the local user log directory when no volume is found.
        hash_chain_file: Chain-state file name, relative to the log root.
        log_level: Console verbosity (DEBUG or INFO).
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    exclusions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUSIONS),
        alias="Exclusions",
    )
    health_wait_seconds: int = Field(
        default=DEFAULT_HEALTH_WAIT_SECONDS,
        ge=MIN_HEALTH_WAIT_SECONDS,
        le=MAX_HEALTH_WAIT_SECONDS,
        alias="HealthWaitSeconds",
    )
    max_disable_seconds: int = Field(
        default=DEFAULT_MAX_DISABLE_SECONDS,
        ge=MIN_MAX_DISABLE_SECONDS,
        le=MAX_MAX_DISABLE_SECONDS,
        alias="MaxDisableSeconds",
    )
    rollback_on_no_ipv4: bool = Field(default=True, alias="RollbackOnNoIPv4")
    external_volume_labels: list[str] = Field(default_factory=list, alias="ExternalVolumeLabels")
    fallback_local: bool = Field(default=True, alias="FallbackLocal")
    hash_chain_file: str = Field(default=DEFAULT_HASH_CHAIN_FILE, min_length=1, alias="HashChainFile")
    log_level: Literal["DEBUG", "INFO"] = Field(default="INFO", alias="LogLevel")

    @field_validator("exclusions")
    @classmethod
    def _exclusions_compile(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid exclusion pattern {pattern!r}: {e}") from e
        return value

    @field_validator("hash_chain_file")
    @classmethod
    def _plain_file_name(cls, value: str) -> str:
        if "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError("must be a file name, not a path")
        return value

    @field_validator("external_volume_labels")
    @classmethod
    def _labels_non_empty(cls, value: list[str]) -> list[str]:
        if any(not label.strip() for label in value):
            raise ValueError("volume labels must not be empty")
        return value

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file.

        Creates parent directories if they don't exist and restricts both
        directory and file to the owner.

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        write_owner_only_json(config_path, self.model_dump())

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            AppConfig instance with loaded configuration.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid.
        """
        try:
            return read_model(config_path, cls, what="configuration", hint=_RECOVERY_HINT)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
