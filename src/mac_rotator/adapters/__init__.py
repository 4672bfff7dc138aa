"""Adapter discovery, address generation and override application.

- Adapter, AdapterStatus, MacAddress: Value types
- AdapterInventory: Eligible adapter enumeration
- generate_mac, generate_distinct_mac: Locally administered unicast addresses
- AdapterMutator: Dual-path override apply/clear with mandatory bounce
"""

from mac_rotator.adapters.generator import generate_distinct_mac, generate_mac
from mac_rotator.adapters.inventory import AdapterInventory
from mac_rotator.adapters.models import Adapter, AdapterStatus, MacAddress
from mac_rotator.adapters.mutator import (
    AdapterMutator,
    AdapterWriter,
    FallbackDeviceKeyWriter,
    InterfaceBouncer,
    MutationResult,
    PrimaryPropertyWriter,
)

__all__ = [
    "Adapter",
    "AdapterInventory",
    "AdapterMutator",
    "AdapterStatus",
    "AdapterWriter",
    "FallbackDeviceKeyWriter",
    "InterfaceBouncer",
    "MacAddress",
    "MutationResult",
    "PrimaryPropertyWriter",
    "generate_distinct_mac",
    "generate_mac",
]
