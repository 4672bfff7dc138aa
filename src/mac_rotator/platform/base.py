"""Network backend interface.

A backend is the only component that touches the operating system. The
core (inventory, mutator, health supervisor, orchestrator) talks to the
platform exclusively through this interface so it can run against the
in-memory fake in tests.

Error contract:
    Every method raises BackendError when the underlying command or API
    fails. resolve_device_key returns None when no key matches; it only
    raises for enumeration failures.
"""

from __future__ import annotations

__all__ = ["NetworkBackend"]

from abc import ABC, abstractmethod
from pathlib import Path

from mac_rotator.adapters.models import Adapter


class NetworkBackend(ABC):
    """Adapter query, adapter mutation and volume lookup for one platform."""

    name: str = "abstract"

    # --- query ---

    @abstractmethod
    def list_adapters(self) -> list[Adapter]:
        """Return physical, non-virtual adapters (including disabled ones)."""

    @abstractmethod
    def get_adapter(self, name: str) -> Adapter | None:
        """Return the current view of one adapter, or None if it vanished."""

    @abstractmethod
    def get_ipv4_addresses(self, name: str) -> list[str]:
        """Return IPv4 addresses currently assigned to the adapter."""

    # --- primary override path ---

    @abstractmethod
    def set_override_property(self, adapter: Adapter, value: str | None) -> None:
        """Set (value) or clear (None) the MAC override via the managed property."""

    # --- fallback override path ---

    @abstractmethod
    def resolve_device_key(self, adapter: Adapter) -> str | None:
        """Locate the low-level device key for the adapter's instance id."""

    @abstractmethod
    def write_device_key(self, key: str, value: str | None) -> None:
        """Write (value) or delete (None) the override directly under key."""

    # --- interface control ---

    @abstractmethod
    def disable(self, adapter: Adapter) -> None:
        """Administratively disable the interface."""

    @abstractmethod
    def enable(self, adapter: Adapter) -> None:
        """Administratively enable the interface."""

    # --- volumes ---

    @abstractmethod
    def find_volume_by_label(self, label: str) -> Path | None:
        """Return the mount point of the volume with this label, if mounted."""
