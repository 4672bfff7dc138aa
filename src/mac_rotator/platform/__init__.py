"""Platform backends for adapter query, mutation and volume lookup.

- NetworkBackend: Interface consumed by the core
- WindowsBackend: NetAdapter cmdlets + registry device class key
- LinuxBackend: iproute2 / net-tools / psutil / sysfs
- get_backend: Select the backend for the running platform
"""

from __future__ import annotations

import sys

from mac_rotator.exceptions import ConfigurationError
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.platform.linux import LinuxBackend
from mac_rotator.platform.windows import WindowsBackend

__all__ = [
    "LinuxBackend",
    "NetworkBackend",
    "WindowsBackend",
    "get_backend",
]


def get_backend() -> NetworkBackend:
    """Return the backend for the running platform.

    Raises:
        ConfigurationError: If the platform has no backend.
    """
    if sys.platform == "win32":
        return WindowsBackend()
    if sys.platform.startswith("linux"):
        return LinuxBackend()
    raise ConfigurationError(f"Unsupported platform: {sys.platform}")
