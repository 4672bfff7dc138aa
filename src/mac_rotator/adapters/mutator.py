"""Dual-path MAC override application.

An override is applied by the first AdapterWriter strategy that succeeds,
in fixed priority order:

1. PrimaryPropertyWriter: the platform's managed adapter property
2. FallbackDeviceKeyWriter: direct write under the device key located by
   the adapter's stable instance id

Any successful write is followed by a mandatory bounce (disable, settle,
enable); an override that was written but not bounced is not applied.
Clearing (rollback) runs the same protocol with an absent value, restoring
the burned-in address.
"""

from __future__ import annotations

__all__ = [
    "AdapterMutator",
    "AdapterWriter",
    "FallbackDeviceKeyWriter",
    "InterfaceBouncer",
    "MutationResult",
    "PrimaryPropertyWriter",
]

import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Callable

from mac_rotator.adapters.models import Adapter, AdapterStatus, MacAddress
from mac_rotator.constants import POLL_INTERVAL_SECONDS, SETTLE_PAUSE_SECONDS
from mac_rotator.exceptions import BackendError, MutationError, MutationErrorKind
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.telemetry.models.audit import MutationMethod
from mac_rotator.telemetry.system_logger import get_system_logger

_system_logger = get_system_logger()


# =============================================================================
# Writer strategies
# =============================================================================


class AdapterWriter(ABC):
    """One way of setting or clearing the MAC override."""

    method: MutationMethod

    def __init__(self, backend: NetworkBackend) -> None:
        self._backend = backend

    @abstractmethod
    def write(self, adapter: Adapter, mac: MacAddress) -> None:
        """Set the override. Raises MutationError on failure."""

    @abstractmethod
    def clear(self, adapter: Adapter) -> None:
        """Remove the override. Raises MutationError on failure."""


class PrimaryPropertyWriter(AdapterWriter):
    """Managed advanced-adapter-property path."""

    method = MutationMethod.PRIMARY

    def write(self, adapter: Adapter, mac: MacAddress) -> None:
        self._set(adapter, mac.compact)

    def clear(self, adapter: Adapter) -> None:
        self._set(adapter, None)

    def _set(self, adapter: Adapter, value: str | None) -> None:
        try:
            self._backend.set_override_property(adapter, value)
        except BackendError as e:
            raise MutationError(MutationErrorKind.PRIMARY_UNAVAILABLE, str(e)) from e


class FallbackDeviceKeyWriter(AdapterWriter):
    """Direct device-key path, located by stable instance id."""

    method = MutationMethod.FALLBACK

    def write(self, adapter: Adapter, mac: MacAddress) -> None:
        self._set(adapter, mac.compact)

    def clear(self, adapter: Adapter) -> None:
        self._set(adapter, None)

    def _set(self, adapter: Adapter, value: str | None) -> None:
        try:
            key = self._backend.resolve_device_key(adapter)
        except BackendError as e:
            raise MutationError(MutationErrorKind.FALLBACK_KEY_NOT_FOUND, str(e)) from e
        if key is None:
            raise MutationError(
                MutationErrorKind.FALLBACK_KEY_NOT_FOUND,
                f"No device key for instance id {adapter.instance_id!r}",
            )
        try:
            self._backend.write_device_key(key, value)
        except BackendError as e:
            raise MutationError(MutationErrorKind.FALLBACK_WRITE_FAILED, str(e)) from e


# =============================================================================
# Bounce
# =============================================================================


class InterfaceBouncer:
    """Disable, settle, enable.

    The disable phase is bounded by max_disable_seconds: after requesting
    disable, the adapter is polled until it stops reporting Up. Exceeding
    the bound is logged and the bounce proceeds to enable.
    """

    def __init__(
        self,
        backend: NetworkBackend,
        max_disable_seconds: float,
        *,
        settle_seconds: float = SETTLE_PAUSE_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._max_disable_seconds = max_disable_seconds
        self._settle_seconds = settle_seconds
        self._poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    def bounce(self, adapter: Adapter) -> None:
        """Bounce the interface.

        Raises:
            BackendError: If disable or enable fails.
        """
        self._backend.disable(adapter)
        if not self._await_down(adapter):
            _system_logger.warning(
                {
                    "event": "disable_timeout",
                    "message": (
                        f"{adapter.name} still reports Up {self._max_disable_seconds}s after disable; "
                        "continuing with enable"
                    ),
                    "adapter": adapter.name,
                }
            )
        self._sleep(self._settle_seconds)
        self._backend.enable(adapter)

    def _await_down(self, adapter: Adapter) -> bool:
        deadline = self._clock() + self._max_disable_seconds
        while True:
            try:
                current = self._backend.get_adapter(adapter.name)
            except BackendError:
                current = None  # Query failure mid-disable is not a bounce failure
            if current is None or current.status != AdapterStatus.UP:
                return True
            remaining = deadline - self._clock()
            if remaining <= 0:
                return False
            self._sleep(min(self._poll_interval, remaining))


# =============================================================================
# Mutator
# =============================================================================


@dataclass
class MutationResult:
    """Outcome of apply() or clear().

    Attributes:
        method: Strategy whose write succeeded (NONE if all failed).
        bounced: Whether the post-write bounce completed.
        failures: Errors from each strategy that failed, in order tried.
        bounce_error: Detail if the bounce failed.
    """

    method: MutationMethod = MutationMethod.NONE
    bounced: bool = False
    failures: list[MutationError] = field(default_factory=list)
    bounce_error: str | None = None

    @property
    def applied(self) -> bool:
        """Written and bounced."""
        return self.method != MutationMethod.NONE and self.bounced

    @property
    def error(self) -> str | None:
        """Ledger error string for a failed write (kind of the last failure)."""
        if self.method != MutationMethod.NONE:
            return self.bounce_error
        if self.failures:
            return self.failures[-1].kind.value
        return None

    @property
    def detail(self) -> str:
        """Every failure, for operator logs."""
        parts = [str(failure) for failure in self.failures]
        if self.bounce_error:
            parts.append(self.bounce_error)
        return "; ".join(parts)


class AdapterMutator:
    """Applies or clears an override using writers in priority order."""

    def __init__(self, writers: Sequence[AdapterWriter], bouncer: InterfaceBouncer) -> None:
        if not writers:
            raise ValueError("At least one writer is required")
        self._writers = list(writers)
        self._bouncer = bouncer

    @classmethod
    def for_backend(cls, backend: NetworkBackend, bouncer: InterfaceBouncer) -> AdapterMutator:
        """Standard primary-then-fallback mutator for a backend."""
        return cls([PrimaryPropertyWriter(backend), FallbackDeviceKeyWriter(backend)], bouncer)

    def apply(self, adapter: Adapter, new_mac: MacAddress) -> MutationResult:
        """Set new_mac as the adapter's override and bounce it."""
        return self._run(adapter, lambda writer: writer.write(adapter, new_mac), f"apply {new_mac}")

    def clear(self, adapter: Adapter) -> MutationResult:
        """Remove the override (restore burned-in address) and bounce."""
        return self._run(adapter, lambda writer: writer.clear(adapter), "clear")

    def _run(
        self,
        adapter: Adapter,
        operation: Callable[[AdapterWriter], None],
        description: str,
    ) -> MutationResult:
        result = MutationResult()
        for writer in self._writers:
            try:
                operation(writer)
            except MutationError as e:
                _system_logger.info(
                    {
                        "event": "writer_failed",
                        "message": f"{adapter.name}: {writer.method.value} path could not {description}: {e}",
                        "adapter": adapter.name,
                        "error_kind": e.kind.value,
                    }
                )
                result.failures.append(e)
                continue
            result.method = writer.method
            break

        if result.method == MutationMethod.NONE:
            return result

        try:
            self._bouncer.bounce(adapter)
        except BackendError as e:
            result.bounce_error = f"Bounce failed: {e}"
            return result
        result.bounced = True
        return result
