"""Eligible adapter enumeration.

Filters the backend's physical adapters by exclusion patterns and, outside
audit mode, drops administratively disabled adapters. Read-only.
"""

from __future__ import annotations

__all__ = ["AdapterInventory"]

import re
from collections.abc import Sequence

from mac_rotator.adapters.models import Adapter
from mac_rotator.exceptions import ConfigurationError
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.telemetry.system_logger import get_system_logger

_system_logger = get_system_logger()


class AdapterInventory:
    """Enumerates adapters eligible for rotation.

    Patterns are regular expressions searched case-insensitively in
    "<name> <description>"; a plain word therefore matches as a substring.
    """

    def __init__(self, backend: NetworkBackend, exclusions: Sequence[str]) -> None:
        self._backend = backend
        try:
            self._patterns = [(pattern, re.compile(pattern, re.IGNORECASE)) for pattern in exclusions]
        except re.error as e:
            raise ConfigurationError(f"Invalid exclusion pattern: {e}") from e

    def excluded_by(self, adapter: Adapter) -> str | None:
        """Return the first exclusion pattern matching the adapter, if any."""
        for pattern, compiled in self._patterns:
            if compiled.search(adapter.label):
                return pattern
        return None

    def list_eligible(self, active_only: bool = True) -> list[Adapter]:
        """Return eligible adapters ordered by name.

        Args:
            active_only: Skip administratively disabled adapters.

        Raises:
            BackendError: If the platform cannot enumerate adapters.
        """
        eligible: list[Adapter] = []
        for adapter in sorted(self._backend.list_adapters(), key=lambda a: a.name):
            pattern = self.excluded_by(adapter)
            if pattern is not None:
                _system_logger.debug(
                    {
                        "event": "adapter_excluded",
                        "message": f"Skipping {adapter.name}: matches exclusion {pattern!r}",
                    }
                )
                continue
            if active_only and adapter.is_disabled:
                _system_logger.debug(
                    {"event": "adapter_disabled", "message": f"Skipping {adapter.name}: disabled"}
                )
                continue
            eligible.append(adapter)
        return eligible
