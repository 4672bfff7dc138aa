"""mac-rotator: scheduled MAC address rotation with health-checked rollback."""

__version__ = "0.3.0"
