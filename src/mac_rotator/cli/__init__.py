"""Command-line interface for mac-rotator.

Provides commands for initializing configuration, running a rotation pass,
listing adapters, verifying the audit ledger and scheduling recurring runs.
"""

from .main import cli, main

__all__ = ["cli", "main"]
