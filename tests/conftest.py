"""Shared fixtures: an in-memory network backend and a fake clock.

FakeBackend models the behavior the core relies on:
- An override written by either path only takes effect when the adapter is
  re-enabled (i.e. after a bounce)
- Clearing the override restores the burned-in address on the next enable
- Link and DHCP can be made to fail only while a spoofed address is active,
  so rollback genuinely restores health
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from mac_rotator.adapters.models import Adapter, AdapterStatus, MacAddress
from mac_rotator.config import AppConfig
from mac_rotator.exceptions import BackendError
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.telemetry import system_logger


@dataclass
class FakeNic:
    """Simulated adapter state."""

    name: str
    description: str
    instance_id: str
    burned_in: MacAddress
    enabled: bool = True
    ipv4: list[str] = field(default_factory=lambda: ["192.168.1.20"])
    pending_override: str | None = None
    active_override: str | None = None
    # Failure knobs
    primary_available: bool = True
    device_key_present: bool = True
    device_key_writable: bool = True
    disable_fails: bool = False
    enable_failures: int = 0
    link_fails_when_spoofed: bool = False
    dhcp_rejects_spoofed: bool = False
    reported_mac: MacAddress | None = None

    @property
    def effective_mac(self) -> MacAddress:
        if self.reported_mac is not None and self.active_override is not None:
            return self.reported_mac
        if self.active_override:
            return MacAddress.parse(self.active_override)
        return self.burned_in

    @property
    def spoofed(self) -> bool:
        return self.active_override is not None

    @property
    def status(self) -> AdapterStatus:
        if not self.enabled:
            return AdapterStatus.DISABLED
        if self.spoofed and self.link_fails_when_spoofed:
            return AdapterStatus.DOWN
        return AdapterStatus.UP

    def snapshot(self) -> Adapter:
        return Adapter(
            name=self.name,
            description=self.description,
            instance_id=self.instance_id,
            status=self.status,
            mac=self.effective_mac,
        )


class FakeBackend(NetworkBackend):
    """In-memory NetworkBackend."""

    name = "fake"

    def __init__(self) -> None:
        self.nics: dict[str, FakeNic] = {}
        self.volumes: dict[str, Path] = {}
        self.calls: list[tuple[str, ...]] = []
        self.list_fails = False

    def add(self, name: str, mac: str, description: str = "Intel(R) Ethernet Connection", **knobs: object) -> FakeNic:
        nic = FakeNic(
            name=name,
            description=description,
            instance_id=f"PCI\\VEN_8086&DEV_15B8\\{len(self.nics) + 1:04d}",
            burned_in=MacAddress.parse(mac),
            **knobs,  # type: ignore[arg-type]
        )
        self.nics[name] = nic
        return nic

    # --- query ---

    def list_adapters(self) -> list[Adapter]:
        if self.list_fails:
            raise BackendError("enumeration failed", command="list")
        return [nic.snapshot() for nic in self.nics.values()]

    def get_adapter(self, name: str) -> Adapter | None:
        nic = self.nics.get(name)
        return nic.snapshot() if nic is not None else None

    def get_ipv4_addresses(self, name: str) -> list[str]:
        nic = self.nics[name]
        if nic.status != AdapterStatus.UP:
            return []
        if nic.spoofed and nic.dhcp_rejects_spoofed:
            return ["169.254.10.20"]
        return list(nic.ipv4)

    # --- override ---

    def set_override_property(self, adapter: Adapter, value: str | None) -> None:
        nic = self.nics[adapter.name]
        self.calls.append(("primary", adapter.name, value or ""))
        if not nic.primary_available:
            raise BackendError("NetworkAddress property not supported")
        nic.pending_override = value

    def resolve_device_key(self, adapter: Adapter) -> str | None:
        for index, nic in enumerate(self.nics.values()):
            if nic.instance_id.lower() == adapter.instance_id.lower():
                return f"{index:04d}" if nic.device_key_present else None
        return None

    def write_device_key(self, key: str, value: str | None) -> None:
        nic = list(self.nics.values())[int(key)]
        self.calls.append(("fallback", nic.name, value or ""))
        if not nic.device_key_writable:
            raise BackendError("Access is denied")
        nic.pending_override = value

    # --- interface control ---

    def disable(self, adapter: Adapter) -> None:
        self.calls.append(("disable", adapter.name))
        nic = self.nics[adapter.name]
        if nic.disable_fails:
            raise BackendError("Disable-NetAdapter failed")
        nic.enabled = False

    def enable(self, adapter: Adapter) -> None:
        self.calls.append(("enable", adapter.name))
        nic = self.nics[adapter.name]
        if nic.enable_failures > 0:
            nic.enable_failures -= 1
            raise BackendError("Enable-NetAdapter failed")
        nic.enabled = True
        nic.active_override = nic.pending_override

    # --- volumes ---

    def find_volume_by_label(self, label: str) -> Path | None:
        return self.volumes.get(label)


class FakeClock:
    """Monotonic clock advanced only by sleep()."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def backend() -> FakeBackend:
    """Backend with no adapters."""
    return FakeBackend()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> AppConfig:
    """Configuration with short waits."""
    return AppConfig(health_wait_seconds=5, max_disable_seconds=3)


@pytest.fixture
def log_root(tmp_path: Path) -> Path:
    root = tmp_path / "logs"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def _detach_system_log_file() -> Iterator[None]:
    """Keep system.jsonl handlers from leaking between tests."""
    yield
    logger = system_logger.get_system_logger()
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()
    system_logger._file_handler = None
