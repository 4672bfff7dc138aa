"""One rotation pass across all eligible adapters.

Pass sequence:
1. Resolve the log root (external volume by label, else local fallback)
2. Open the ledger and load the head hash from the chain-state file
3. Enumerate eligible adapters (disabled ones included in audit mode)
4. Per adapter: generate -> apply -> supervise -> append to ledger

Adapters are processed strictly in sequence. Anything that goes wrong
while processing one adapter is recorded on that adapter's attempt and the
pass moves on. Only critical failures (no log root, audit ledger
unwritable) abort the pass.

The previous hash is threaded through the loop explicitly: each
ledger.append() receives the last committed hash and returns the next.
"""

from __future__ import annotations

__all__ = [
    "Orchestrator",
    "PassReport",
    "resolve_log_root",
    "run_pass",
]

import random
import threading
import time
from collections import Counter
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable

from platformdirs import user_log_dir

from mac_rotator.adapters import (
    Adapter,
    AdapterInventory,
    AdapterMutator,
    InterfaceBouncer,
    MacAddress,
    generate_distinct_mac,
)
from mac_rotator.config import AppConfig
from mac_rotator.constants import APP_NAME, LOG_DIR_NAME, REASON_BOUNCE_FAIL, SYSTEM_LOG_FILE_NAME
from mac_rotator.exceptions import BackendError, CriticalFailure, MacGenerationError, NoLogVolumeError
from mac_rotator.health import AttemptState, AttemptStateMachine, HealthSupervisor, SupervisionResult
from mac_rotator.ledger import AuditLedger
from mac_rotator.platform.base import NetworkBackend
from mac_rotator.telemetry.models.audit import AttemptOutcome, MutationMethod, SpoofAttempt
from mac_rotator.telemetry.system_logger import configure_system_logger_file, get_system_logger

_system_logger = get_system_logger()


def resolve_log_root(config: AppConfig, backend: NetworkBackend) -> Path:
    """Pick the directory that will hold the ledger.

    Volume labels are tried in configured order; the first mounted one wins.

    Raises:
        NoLogVolumeError: If no labelled volume is mounted and the local
            fallback is disabled.
    """
    for label in config.external_volume_labels:
        try:
            mount = backend.find_volume_by_label(label)
        except BackendError as e:
            _system_logger.warning(
                {"event": "volume_lookup_failed", "message": f"Could not look up volume {label!r}: {e}"}
            )
            continue
        if mount is not None:
            _system_logger.debug({"event": "log_root_volume", "message": f"Logging to volume {label!r} at {mount}"})
            return mount / LOG_DIR_NAME

    if config.fallback_local:
        if config.external_volume_labels:
            _system_logger.warning(
                {
                    "event": "log_root_fallback",
                    "message": "No configured log volume is mounted; using the local log directory",
                }
            )
        return Path(user_log_dir(APP_NAME, appauthor=False))

    raise NoLogVolumeError(
        "None of the configured log volumes is mounted "
        f"({', '.join(config.external_volume_labels) or 'none configured'}) "
        "and FallbackLocal is disabled"
    )


@dataclass
class PassReport:
    """What one pass did.

    Attributes:
        log_root: Directory the ledger was written to.
        attempts: Every attempt, in processing order.
        head: Ledger head hash after the pass.
    """

    log_root: Path
    attempts: list[SpoofAttempt] = field(default_factory=list)
    head: str = ""

    @property
    def counts(self) -> dict[AttemptOutcome, int]:
        counter = Counter(attempt.outcome for attempt in self.attempts)
        return {outcome: counter.get(outcome, 0) for outcome in AttemptOutcome}

    @property
    def rollback_failures(self) -> list[SpoofAttempt]:
        return [attempt for attempt in self.attempts if attempt.rollback_failed]


class Orchestrator:
    """Drives one pass.

    Args:
        config: Loaded configuration.
        backend: Platform backend.
        audit_mode: Record intent only; never mutate.
        rng: Deterministic source for generated addresses (tests).
        sleep: Blocking wait, injectable so tests never sleep.
        clock: Monotonic clock paired with sleep.
        stop_event: When set, health polling stops and treats the adapter as unhealthy.
        log_root: Use this directory instead of resolving one.
    """

    def __init__(
        self,
        config: AppConfig,
        backend: NetworkBackend,
        *,
        audit_mode: bool = False,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        stop_event: threading.Event | None = None,
        log_root: Path | None = None,
    ) -> None:
        self.config = config
        self.backend = backend
        self.audit_mode = audit_mode
        self._rng = rng
        self._log_root = log_root

        self.inventory = AdapterInventory(backend, config.exclusions)
        bouncer = InterfaceBouncer(backend, config.max_disable_seconds, sleep=sleep, clock=clock)
        self.mutator = AdapterMutator.for_backend(backend, bouncer)
        self.supervisor = HealthSupervisor(
            backend,
            self.mutator,
            health_wait_seconds=config.health_wait_seconds,
            rollback_on_no_ipv4=config.rollback_on_no_ipv4,
            sleep=sleep,
            clock=clock,
            stop_event=stop_event,
        )

    def run(self) -> PassReport:
        """Execute the pass.

        Raises:
            NoLogVolumeError: If no log root can be resolved.
            AuditFailure: If the ledger cannot be written or its state read.
            BackendError: If adapters cannot be enumerated at all.
        """
        log_root = self._log_root or resolve_log_root(self.config, self.backend)
        log_root.mkdir(parents=True, exist_ok=True)
        configure_system_logger_file(log_root / SYSTEM_LOG_FILE_NAME)

        ledger = AuditLedger(log_root, self.config.hash_chain_file)
        try:
            head = ledger.load_head()
            report = PassReport(log_root=log_root, head=head)

            adapters = self.inventory.list_eligible(active_only=not self.audit_mode)
            if not adapters:
                _system_logger.info({"event": "no_eligible_adapters", "message": "No eligible adapters found"})
                return report

            for adapter in adapters:
                attempt = self.process(adapter)
                entry = ledger.append(attempt, head)
                head = entry.hash_curr
                report.attempts.append(attempt)

            report.head = head
            return report
        finally:
            ledger.close()

    def process(self, adapter: Adapter) -> SpoofAttempt:
        """Produce the attempt record for one adapter. Never raises recoverable errors."""
        if self.audit_mode:
            _system_logger.info(
                {"event": "audit_intent", "message": f"Would rotate {adapter.name} ({adapter.mac or 'unknown'})"}
            )
            return self._attempt(adapter, outcome=AttemptOutcome.AUDITED)

        state = AttemptStateMachine()
        try:
            return self._rotate(adapter, state)
        except CriticalFailure:
            raise
        except Exception as e:
            _system_logger.error(
                {
                    "event": "adapter_failed",
                    "message": f"Unexpected error while processing {adapter.name}: {e}",
                    "adapter": adapter.name,
                    "state": state.state.value,
                },
                exc_info=True,
            )
            return self._attempt(adapter, outcome=AttemptOutcome.FAILED, error=f"{type(e).__name__}: {e}")

    def _rotate(self, adapter: Adapter, state: AttemptStateMachine) -> SpoofAttempt:
        try:
            new_mac = generate_distinct_mac(adapter.mac, rng=self._rng)
        except MacGenerationError as e:
            state.advance(AttemptState.FAILED)
            return self._attempt(adapter, outcome=AttemptOutcome.FAILED, error=str(e))

        state.advance(AttemptState.MUTATING)
        _system_logger.info(
            {"event": "rotation_started", "message": f"{adapter.name}: {adapter.mac or 'unknown'} -> {new_mac}"}
        )
        result = self.mutator.apply(adapter, new_mac)

        if result.method == MutationMethod.NONE:
            state.advance(AttemptState.FAILED)
            _system_logger.warning(
                {"event": "mutation_failed", "message": f"{adapter.name}: {result.detail}", "adapter": adapter.name}
            )
            return self._attempt(adapter, outcome=AttemptOutcome.FAILED, new_mac=str(new_mac), error=result.error)

        if not result.bounced:
            _system_logger.warning(
                {"event": "bounce_failed", "message": f"{adapter.name}: {result.bounce_error}", "adapter": adapter.name}
            )
            supervision = self.supervisor.rollback(adapter, REASON_BOUNCE_FAIL, state)
        else:
            state.advance(AttemptState.MUTATED)
            supervision = self._supervise_or_roll_back(adapter, new_mac, state)

        return self._attempt(
            adapter,
            outcome=supervision.outcome,
            new_mac=str(new_mac),
            method=result.method,
            error=supervision.error,
            rollback_failed=supervision.rollback_failed,
        )

    def _supervise_or_roll_back(
        self, adapter: Adapter, new_mac: MacAddress, state: AttemptStateMachine
    ) -> SupervisionResult:
        """Supervise a bounced adapter; an unexpected error rolls the override back.

        Once an override is live, no error may leave it in place unrecorded.
        """
        try:
            return self.supervisor.supervise(adapter, new_mac, state)
        except CriticalFailure:
            raise
        except Exception as e:
            if not state.can_advance(AttemptState.ROLLING_BACK):
                raise
            _system_logger.error(
                {
                    "event": "supervision_failed",
                    "message": f"Health check of {adapter.name} raised {type(e).__name__}: {e}",
                    "adapter": adapter.name,
                },
                exc_info=True,
            )
            supervision = self.supervisor.rollback(adapter, REASON_BOUNCE_FAIL, state)
            error = f"{supervision.error}; {type(e).__name__}: {e}"
            return replace(supervision, error=error)

    @staticmethod
    def _attempt(adapter: Adapter, **fields: Any) -> SpoofAttempt:
        return SpoofAttempt(
            adapter=adapter.name,
            description=adapter.description,
            old_mac=str(adapter.mac) if adapter.mac is not None else None,
            **fields,
        )


def run_pass(config: AppConfig, backend: NetworkBackend, audit_mode: bool = False, **kwargs: Any) -> PassReport:
    """Convenience wrapper: build an Orchestrator and run it once."""
    return Orchestrator(config, backend, audit_mode=audit_mode, **kwargs).run()
