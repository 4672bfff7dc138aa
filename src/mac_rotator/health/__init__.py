"""Post-mutation health supervision.

- HealthSupervisor: Link/IPv4 polling, success-vs-rollback decision
- AttemptStateMachine: Per-adapter state transitions
"""

from mac_rotator.health.state import AttemptState, AttemptStateMachine
from mac_rotator.health.supervisor import HealthReport, HealthSupervisor, SupervisionResult

__all__ = [
    "AttemptState",
    "AttemptStateMachine",
    "HealthReport",
    "HealthSupervisor",
    "SupervisionResult",
]
