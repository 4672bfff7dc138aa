"""Post-mutation health supervision and rollback.

After an override has been applied and bounced, the supervisor polls the
interface once per poll interval until it reports Up or health_wait_seconds
elapse. When rollback_on_no_ipv4 is set it additionally waits, within the
same window, for at least one usable IPv4 address (link-local 169.254/16
addresses do not count).

Decision:
    healthy AND (IPv4 check disabled OR IPv4 present) -> success
    otherwise -> clear the override (which re-bounces), outcome rolled back

Rollback is attempted exactly once. If clearing fails the attempt is still
rolled back, flagged rollback_failed, and logged at CRITICAL: the adapter's
address is then undefined and needs an operator.
"""

from __future__ import annotations

__all__ = [
    "HealthReport",
    "HealthSupervisor",
    "SupervisionResult",
]

import ipaddress
import threading
import time
from dataclasses import dataclass
from typing import Callable

from mac_rotator.adapters.models import Adapter, AdapterStatus, MacAddress
from mac_rotator.adapters.mutator import AdapterMutator
from mac_rotator.constants import POLL_INTERVAL_SECONDS, REASON_BOUNCE_FAIL, REASON_NO_IPV4
from mac_rotator.exceptions import BackendError, HealthCheckTimeout, MismatchError, RollbackFailure
from mac_rotator.health.state import AttemptState, AttemptStateMachine
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.telemetry.models.audit import AttemptOutcome
from mac_rotator.telemetry.system_logger import get_system_logger

_system_logger = get_system_logger()

_LINK_LOCAL = ipaddress.ip_network("169.254.0.0/16")


@dataclass(frozen=True, slots=True)
class HealthReport:
    """Result of polling after a bounce.

    Attributes:
        link_up: Interface reported Up within the window.
        ipv4_present: Usable IPv4 seen (None when the check is disabled).
        reason: Rollback reason when unhealthy.
    """

    link_up: bool
    ipv4_present: bool | None = None
    reason: str | None = None

    @property
    def healthy(self) -> bool:
        return self.link_up and self.ipv4_present is not False


@dataclass(frozen=True, slots=True)
class SupervisionResult:
    """Terminal decision for one mutated adapter."""

    outcome: AttemptOutcome
    error: str | None = None
    rollback_failed: bool = False


def _is_usable_ipv4(address: str) -> bool:
    try:
        parsed = ipaddress.IPv4Address(address)
    except ValueError:
        return False
    return parsed not in _LINK_LOCAL and not parsed.is_unspecified


class HealthSupervisor:
    """Decides success vs. rollback after an applied override."""

    def __init__(
        self,
        backend: NetworkBackend,
        mutator: AdapterMutator,
        *,
        health_wait_seconds: float,
        rollback_on_no_ipv4: bool,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._backend = backend
        self._mutator = mutator
        self._health_wait_seconds = health_wait_seconds
        self._rollback_on_no_ipv4 = rollback_on_no_ipv4
        self._poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock
        self._stop_event = stop_event

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _poll(self, predicate: Callable[[], bool], deadline: float) -> bool:
        """Evaluate predicate until true, the deadline passes, or stop is set."""
        while True:
            if self._stop_event is not None and self._stop_event.is_set():
                return False
            try:
                if predicate():
                    return True
            except BackendError as e:
                _system_logger.debug({"event": "health_poll_error", "message": str(e)})
            remaining = deadline - self._clock()
            if remaining <= 0:
                return False
            self._sleep(min(self._poll_interval, remaining))

    def _link_up(self, adapter: Adapter) -> bool:
        current = self._backend.get_adapter(adapter.name)
        return current is not None and current.status == AdapterStatus.UP

    def _has_ipv4(self, adapter: Adapter) -> bool:
        return any(_is_usable_ipv4(a) for a in self._backend.get_ipv4_addresses(adapter.name))

    def wait_for_link(self, adapter: Adapter, deadline: float) -> None:
        """Block until the interface is Up.

        Raises:
            HealthCheckTimeout: If it is not Up by the deadline.
        """
        if not self._poll(lambda: self._link_up(adapter), deadline):
            raise HealthCheckTimeout(
                f"{adapter.name} not Up within {self._health_wait_seconds}s after bounce"
            )

    def check(self, adapter: Adapter) -> HealthReport:
        """Poll link (and optionally IPv4) within one health window."""
        deadline = self._clock() + self._health_wait_seconds
        try:
            self.wait_for_link(adapter, deadline)
        except HealthCheckTimeout as e:
            _system_logger.warning({"event": "health_check_timeout", "message": str(e), "adapter": adapter.name})
            return HealthReport(link_up=False, reason=REASON_BOUNCE_FAIL)

        if not self._rollback_on_no_ipv4:
            return HealthReport(link_up=True)

        if self._poll(lambda: self._has_ipv4(adapter), deadline):
            return HealthReport(link_up=True, ipv4_present=True)

        _system_logger.warning(
            {
                "event": "ipv4_missing",
                "message": f"{adapter.name} has no IPv4 address {self._health_wait_seconds}s after bounce",
                "adapter": adapter.name,
            }
        )
        return HealthReport(link_up=True, ipv4_present=False, reason=REASON_NO_IPV4)

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def supervise(
        self,
        adapter: Adapter,
        new_mac: MacAddress,
        state: AttemptStateMachine,
    ) -> SupervisionResult:
        """Health-check a mutated adapter and roll back if unhealthy.

        Args:
            adapter: The adapter as enumerated before mutation.
            new_mac: The address just applied.
            state: Attempt state, expected at Mutated.

        Returns:
            SUCCESS, ROLLED_BACK, or FAILED (address mismatch).
        """
        state.advance(AttemptState.HEALTH_CHECKING)
        report = self.check(adapter)
        if not report.healthy:
            return self.rollback(adapter, report.reason or REASON_BOUNCE_FAIL, state)

        try:
            self.verify_address(adapter, new_mac)
        except MismatchError as e:
            _system_logger.warning({"event": "mac_mismatch", "message": f"{adapter.name}: {e}", "adapter": adapter.name})
            state.advance(AttemptState.FAILED)
            return SupervisionResult(outcome=AttemptOutcome.FAILED, error=str(e))

        state.advance(AttemptState.SUCCESS)
        return SupervisionResult(outcome=AttemptOutcome.SUCCESS)

    def verify_address(self, adapter: Adapter, new_mac: MacAddress) -> None:
        """Confirm the adapter now reports new_mac.

        An adapter that reports no address (or cannot be queried) is not a
        mismatch; only a different, known address is.

        Raises:
            MismatchError: If the adapter reports a different address.
        """
        try:
            current = self._backend.get_adapter(adapter.name)
        except BackendError:
            return
        if current is None or current.mac is None:
            return
        if current.mac != new_mac:
            raise MismatchError(str(new_mac), str(current.mac))

    def rollback(self, adapter: Adapter, reason: str, state: AttemptStateMachine) -> SupervisionResult:
        """Clear the override exactly once.

        Args:
            adapter: Adapter to restore.
            reason: Recorded rollback reason ("Bounce fail" / "No IPv4, rolled back").
            state: Attempt state, moved through RollingBack to RolledBack.
        """
        state.advance(AttemptState.ROLLING_BACK)
        _system_logger.warning(
            {"event": "rollback_started", "message": f"Rolling back {adapter.name}: {reason}", "adapter": adapter.name}
        )
        result = self._mutator.clear(adapter)
        state.advance(AttemptState.ROLLED_BACK)

        if result.applied:
            _system_logger.info(
                {
                    "event": "rollback_complete",
                    "message": f"{adapter.name} restored via {result.method.value} path",
                    "adapter": adapter.name,
                }
            )
            return SupervisionResult(outcome=AttemptOutcome.ROLLED_BACK, error=reason)

        failure = RollbackFailure(result.detail or "no writer could clear the override")
        _system_logger.critical(
            {
                "event": "rollback_failed",
                "message": (
                    f"ROLLBACK FAILED for {adapter.name}: {failure}. "
                    "Address state is undefined; restore the adapter manually."
                ),
                "adapter": adapter.name,
            }
        )
        return SupervisionResult(
            outcome=AttemptOutcome.ROLLED_BACK,
            error=f"{reason}; rollback failed: {failure}",
            rollback_failed=True,
        )
