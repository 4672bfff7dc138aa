"""Linux network backend.

Physical interfaces are those with a /sys/class/net/<if>/device link; the
resolved device path is the stable instance id. Addresses and link state
come from psutil. The primary override path is iproute2 (``ip link``), the
fallback path is net-tools (``ifconfig hw ether``) against the interface
currently bound to the instance id. Clearing restores the permanent
(burned-in) address reported by ``ethtool -P``.

Most drivers refuse an address change while the link is up, so both paths
take the interface down first. The mandatory bounce brings it back after a
successful write; a rejected write brings it straight back up.
"""

from __future__ import annotations

__all__ = ["LinuxBackend"]

import os
import re
import socket
from pathlib import Path

import psutil

from mac_rotator.adapters.models import Adapter, AdapterStatus, MacAddress
from mac_rotator.exceptions import BackendError
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.platform.commands import run_command
from mac_rotator.telemetry.system_logger import get_system_logger

_IFF_UP = 0x1
_PERMANENT_ADDRESS_PATTERN = re.compile(r"Permanent address:\s*([0-9a-fA-F:]{17})")
_NULL_MAC = MacAddress(bytes(6))

_system_logger = get_system_logger()


class LinuxBackend(NetworkBackend):
    """iproute2 / net-tools / psutil / sysfs."""

    name = "linux"

    def __init__(
        self,
        sysfs_net: Path = Path("/sys/class/net"),
        by_label: Path = Path("/dev/disk/by-label"),
    ) -> None:
        self._sysfs_net = sysfs_net
        self._by_label = by_label

    # --- query ---

    def list_adapters(self) -> list[Adapter]:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except OSError as e:
            raise BackendError(f"Cannot query interfaces: {e}") from e
        adapters = []
        for name in sorted(stats):
            if not (self._sysfs_net / name / "device").exists():
                continue  # Virtual interface (lo, bridges, tunnels, veth)
            adapters.append(self._build_adapter(name, stats[name].isup, addrs.get(name, [])))
        return adapters

    def get_adapter(self, name: str) -> Adapter | None:
        try:
            stats = psutil.net_if_stats()
            addrs = psutil.net_if_addrs()
        except OSError as e:
            raise BackendError(f"Cannot query interfaces: {e}") from e
        if name not in stats:
            return None
        return self._build_adapter(name, stats[name].isup, addrs.get(name, []))

    def get_ipv4_addresses(self, name: str) -> list[str]:
        try:
            addrs = psutil.net_if_addrs().get(name, [])
        except OSError as e:
            raise BackendError(f"Cannot query addresses for {name}: {e}") from e
        return [addr.address for addr in addrs if addr.family == socket.AF_INET]

    def _build_adapter(self, name: str, isup: bool, addrs: list) -> Adapter:
        mac = None
        for addr in addrs:
            if addr.family == psutil.AF_LINK:
                mac = MacAddress.try_parse(addr.address)
                break

        if not self._is_admin_up(name):
            status = AdapterStatus.DISABLED
        elif isup:
            status = AdapterStatus.UP
        else:
            status = AdapterStatus.DOWN

        return Adapter(
            name=name,
            description=self._read_driver(name),
            instance_id=self._instance_id(name),
            status=status,
            mac=mac,
        )

    def _instance_id(self, name: str) -> str:
        device = self._sysfs_net / name / "device"
        if not device.exists():
            return ""
        return os.path.realpath(device)

    def _read_driver(self, name: str) -> str:
        uevent = self._sysfs_net / name / "device" / "uevent"
        try:
            for line in uevent.read_text(encoding="utf-8").splitlines():
                if line.startswith("DRIVER="):
                    return line.split("=", 1)[1]
        except OSError:
            pass  # Description is informational only
        return ""

    def _is_admin_up(self, name: str) -> bool:
        try:
            flags = int((self._sysfs_net / name / "flags").read_text(encoding="utf-8").strip(), 16)
        except (OSError, ValueError):
            return True  # Unknown flags: let link status decide
        return bool(flags & _IFF_UP)

    def _permanent_address(self, name: str) -> MacAddress:
        output = run_command(["ethtool", "-P", name])
        match = _PERMANENT_ADDRESS_PATTERN.search(output)
        mac = MacAddress.try_parse(match.group(1)) if match else None
        if mac is None or mac == _NULL_MAC:
            raise BackendError(f"No permanent address reported for {name}", command="ethtool")
        return mac

    # --- primary override path ---

    def set_override_property(self, adapter: Adapter, value: str | None) -> None:
        mac = self._permanent_address(adapter.name) if value is None else MacAddress.parse(value)
        self._write_while_down(
            adapter.name,
            [
                ["ip", "link", "set", "dev", adapter.name, "down"],
                ["ip", "link", "set", "dev", adapter.name, "address", str(mac).lower()],
            ],
        )

    # --- fallback override path ---

    def resolve_device_key(self, adapter: Adapter) -> str | None:
        if not adapter.instance_id or not self._sysfs_net.exists():
            return None
        for entry in sorted(self._sysfs_net.iterdir()):
            if self._instance_id(entry.name) == adapter.instance_id:
                return entry.name
        return None

    def write_device_key(self, key: str, value: str | None) -> None:
        mac = self._permanent_address(key) if value is None else MacAddress.parse(value)
        self._write_while_down(
            key,
            [
                ["ifconfig", key, "down"],
                ["ifconfig", key, "hw", "ether", str(mac).lower()],
            ],
        )

    def _write_while_down(self, name: str, steps: list[list[str]]) -> None:
        """Run an address change that needs the link down.

        A failed change brings the link back up before re-raising, so a
        rejected write never leaves the interface down. Only a successful
        write is followed by the mutator's bounce.
        """
        try:
            for args in steps:
                run_command(args)
        except BackendError:
            self._restore_link(name)
            raise

    def _restore_link(self, name: str) -> None:
        try:
            run_command(["ip", "link", "set", "dev", name, "up"])
        except BackendError as e:
            _system_logger.error(
                {
                    "event": "link_restore_failed",
                    "message": f"{name} left down after a failed address change: {e}",
                    "adapter": name,
                }
            )

    # --- interface control ---

    def disable(self, adapter: Adapter) -> None:
        run_command(["ip", "link", "set", "dev", adapter.name, "down"])

    def enable(self, adapter: Adapter) -> None:
        run_command(["ip", "link", "set", "dev", adapter.name, "up"])

    # --- volumes ---

    def find_volume_by_label(self, label: str) -> Path | None:
        # udev escapes spaces and slashes in label link names
        link = self._by_label / label.replace(" ", "\\x20").replace("/", "\\x2f")
        if not link.exists():
            return None
        device = os.path.realpath(link)
        try:
            partitions = psutil.disk_partitions(all=False)
        except OSError as e:
            raise BackendError(f"Cannot list mounted partitions: {e}") from e
        for partition in partitions:
            if os.path.realpath(partition.device) == device:
                return Path(partition.mountpoint)
        return None
