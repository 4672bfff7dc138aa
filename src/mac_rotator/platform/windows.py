"""Windows network backend.

Adapter query and control go through the NetAdapter PowerShell cmdlets
(JSON output via ConvertTo-Json). The fallback override path writes the
NetworkAddress value directly under the adapter's subkey of the network
device class key, located by matching DeviceInstanceID against the
adapter's PnP device id.

Requires an elevated process for every mutating call.
"""

from __future__ import annotations

__all__ = ["WindowsBackend"]

import json
from pathlib import Path
from typing import Any

from mac_rotator.adapters.models import Adapter, AdapterStatus, MacAddress
from mac_rotator.constants import NET_CLASS_KEY, OVERRIDE_REGISTRY_KEYWORD
from mac_rotator.exceptions import BackendError
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.platform.commands import run_command

_ADAPTER_FIELDS = "Name,InterfaceDescription,PnPDeviceID,Status,MacAddress"


def _quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


def _powershell(script: str) -> str:
    return run_command(["powershell", "-NoProfile", "-NonInteractive", "-Command", script])


def _parse_json_list(output: str) -> list[Any]:
    """Parse ConvertTo-Json output, which is a bare object for single results."""
    if not output:
        return []
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise BackendError(f"Unexpected PowerShell output: {output[:200]}") from e
    if isinstance(data, list):
        return data
    return [data]


def _adapter_from_json(item: dict[str, Any]) -> Adapter:
    return Adapter(
        name=str(item.get("Name") or ""),
        description=str(item.get("InterfaceDescription") or ""),
        instance_id=str(item.get("PnPDeviceID") or ""),
        status=AdapterStatus.from_platform(item.get("Status")),
        mac=MacAddress.try_parse(item.get("MacAddress")),
    )


class WindowsBackend(NetworkBackend):
    """NetAdapter cmdlets + registry device class key."""

    name = "windows"

    def list_adapters(self) -> list[Adapter]:
        output = _powershell(
            f"Get-NetAdapter -Physical | Select-Object {_ADAPTER_FIELDS} | ConvertTo-Json -Compress"
        )
        return [_adapter_from_json(item) for item in _parse_json_list(output)]

    def get_adapter(self, name: str) -> Adapter | None:
        output = _powershell(
            f"Get-NetAdapter -Name {_quote(name)} -ErrorAction SilentlyContinue"
            f" | Select-Object {_ADAPTER_FIELDS} | ConvertTo-Json -Compress"
        )
        items = _parse_json_list(output)
        return _adapter_from_json(items[0]) if items else None

    def get_ipv4_addresses(self, name: str) -> list[str]:
        output = _powershell(
            f"Get-NetIPAddress -InterfaceAlias {_quote(name)} -AddressFamily IPv4"
            " -ErrorAction SilentlyContinue | Select-Object -ExpandProperty IPAddress"
            " | ConvertTo-Json -Compress"
        )
        return [str(address) for address in _parse_json_list(output)]

    def set_override_property(self, adapter: Adapter, value: str | None) -> None:
        if value is None:
            script = (
                f"Reset-NetAdapterAdvancedProperty -Name {_quote(adapter.name)}"
                f" -RegistryKeyword {_quote(OVERRIDE_REGISTRY_KEYWORD)} -NoRestart -ErrorAction Stop"
            )
        else:
            script = (
                f"Set-NetAdapterAdvancedProperty -Name {_quote(adapter.name)}"
                f" -RegistryKeyword {_quote(OVERRIDE_REGISTRY_KEYWORD)}"
                f" -RegistryValue {_quote(value)} -NoRestart -ErrorAction Stop"
            )
        _powershell(script)

    def resolve_device_key(self, adapter: Adapter) -> str | None:
        if not adapter.instance_id:
            return None
        winreg = _import_winreg()
        wanted = adapter.instance_id.lower()
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, NET_CLASS_KEY) as class_key:
                index = 0
                while True:
                    try:
                        subkey_name = winreg.EnumKey(class_key, index)
                    except OSError:
                        break  # No more subkeys
                    index += 1
                    # Instance subkeys are 0000, 0001, ...; skip "Properties"
                    if not subkey_name.isdigit():
                        continue
                    try:
                        with winreg.OpenKey(class_key, subkey_name) as subkey:
                            instance_id, _ = winreg.QueryValueEx(subkey, "DeviceInstanceID")
                    except OSError:
                        continue  # Access denied or value missing on this subkey
                    if str(instance_id).lower() == wanted:
                        return f"{NET_CLASS_KEY}\\{subkey_name}"
        except OSError as e:
            raise BackendError(f"Cannot enumerate network class key: {e}") from e
        return None

    def write_device_key(self, key: str, value: str | None) -> None:
        winreg = _import_winreg()
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key, 0, winreg.KEY_SET_VALUE) as subkey:
                if value is None:
                    try:
                        winreg.DeleteValue(subkey, OVERRIDE_REGISTRY_KEYWORD)
                    except FileNotFoundError:
                        pass  # Already absent: burned-in address in effect
                else:
                    winreg.SetValueEx(subkey, OVERRIDE_REGISTRY_KEYWORD, 0, winreg.REG_SZ, value)
        except OSError as e:
            raise BackendError(f"Cannot write {OVERRIDE_REGISTRY_KEYWORD} under {key}: {e}") from e

    def disable(self, adapter: Adapter) -> None:
        _powershell(f"Disable-NetAdapter -Name {_quote(adapter.name)} -Confirm:$false -ErrorAction Stop")

    def enable(self, adapter: Adapter) -> None:
        _powershell(f"Enable-NetAdapter -Name {_quote(adapter.name)} -Confirm:$false -ErrorAction Stop")

    def find_volume_by_label(self, label: str) -> Path | None:
        output = _powershell(
            f"Get-Volume -FileSystemLabel {_quote(label)} -ErrorAction SilentlyContinue"
            " | Where-Object DriveLetter | Select-Object -First 1 -ExpandProperty DriveLetter"
        )
        letter = output.strip()
        if not letter:
            return None
        return Path(f"{letter[0]}:\\")


def _import_winreg() -> Any:
    """Import winreg, which only exists on Windows builds of Python."""
    try:
        import winreg
    except ImportError as e:
        raise BackendError("Registry access requires Windows") from e
    return winreg
