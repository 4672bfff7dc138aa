"""Logging utilities.

Import directly from submodules:
    from mac_rotator.utils.logging.iso_formatter import ISO8601Formatter
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
