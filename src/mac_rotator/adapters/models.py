"""Adapter and MAC address value types.

Adapters are transient: they are refetched from the platform on every run
and never persisted. MAC addresses are immutable 6-byte values that parse
the common textual forms and render the forms each platform expects.
"""

from __future__ import annotations

__all__ = [
    "Adapter",
    "AdapterStatus",
    "MacAddress",
]

import re
from dataclasses import dataclass
from enum import Enum

_MAC_LENGTH = 6

# Accepts AA:BB:CC:DD:EE:FF, AA-BB-CC-DD-EE-FF and AABBCCDDEEFF
_MAC_PATTERN = re.compile(r"^[0-9A-Fa-f]{2}([:-]?)(?:[0-9A-Fa-f]{2}\1){4}[0-9A-Fa-f]{2}$")

_LOCALLY_ADMINISTERED_BIT = 0x02
_MULTICAST_BIT = 0x01


@dataclass(frozen=True, slots=True)
class MacAddress:
    """A 6-byte link-layer address."""

    octets: bytes

    def __post_init__(self) -> None:
        if len(self.octets) != _MAC_LENGTH:
            raise ValueError(f"MAC address must be {_MAC_LENGTH} bytes, got {len(self.octets)}")

    @classmethod
    def parse(cls, text: str) -> MacAddress:
        """Parse a MAC address from its textual form.

        Args:
            text: Colon-, dash- or un-separated hex (case-insensitive).

        Returns:
            The parsed address.

        Raises:
            ValueError: If text is not a MAC address.
        """
        candidate = text.strip()
        if not _MAC_PATTERN.match(candidate):
            raise ValueError(f"Invalid MAC address: {text!r}")
        return cls(bytes.fromhex(re.sub(r"[:-]", "", candidate)))

    @classmethod
    def try_parse(cls, text: str | None) -> MacAddress | None:
        """Parse text, returning None for empty or malformed values."""
        if not text:
            return None
        try:
            return cls.parse(text)
        except ValueError:
            return None

    @property
    def is_locally_administered(self) -> bool:
        return bool(self.octets[0] & _LOCALLY_ADMINISTERED_BIT)

    @property
    def is_unicast(self) -> bool:
        return not self.octets[0] & _MULTICAST_BIT

    @property
    def compact(self) -> str:
        """Twelve hex digits, the form written as an override value."""
        return self.octets.hex().upper()

    def __str__(self) -> str:
        return ":".join(f"{b:02X}" for b in self.octets)


class AdapterStatus(str, Enum):
    """Link status as reported by the platform."""

    UP = "Up"
    DOWN = "Down"
    DISABLED = "Disabled"
    UNKNOWN = "Unknown"

    @classmethod
    def from_platform(cls, value: str | None) -> AdapterStatus:
        """Map a platform status string onto the known statuses.

        Windows reports e.g. "Up", "Disconnected", "Disabled"; anything that
        is not administratively disabled or up counts as down.
        """
        if not value:
            return cls.UNKNOWN
        normalized = value.strip().lower()
        if normalized == "up":
            return cls.UP
        if normalized == "disabled":
            return cls.DISABLED
        if normalized == "unknown":
            return cls.UNKNOWN
        return cls.DOWN


@dataclass(frozen=True, slots=True)
class Adapter:
    """A physical network adapter as seen at query time.

    Attributes:
        name: Interface name (e.g. "Ethernet", "eth0").
        description: Driver/hardware description.
        instance_id: Stable hardware instance identifier (PnP device id on
            Windows, bus device path on Linux). Used to locate the device key
            for the fallback override path.
        status: Link status at query time.
        mac: Current MAC address, if reported.
    """

    name: str
    description: str
    instance_id: str
    status: AdapterStatus
    mac: MacAddress | None = None

    @property
    def label(self) -> str:
        """Combined text that exclusion patterns are matched against."""
        return f"{self.name} {self.description}"

    @property
    def is_disabled(self) -> bool:
        return self.status == AdapterStatus.DISABLED
