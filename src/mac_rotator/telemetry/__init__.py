"""Telemetry: system logger and ledger record models.

Import directly from submodules:
    from mac_rotator.telemetry.system_logger import get_system_logger
    from mac_rotator.telemetry.models import SpoofAttempt
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
