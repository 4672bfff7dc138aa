"""Per-adapter attempt state machine.

    Unmutated -> Mutating -> Mutated -> HealthChecking -> Success
                    |                        |
                    |                        +-> RollingBack -> RolledBack
                    |                        +-> Failed (address mismatch)
                    +-> Failed (no writer succeeded)
                    +-> RollingBack (written but bounce failed)

Terminal states: Success, Failed, RolledBack. Unmutated -> Failed covers
errors before any write (e.g. address generation).
"""

from __future__ import annotations

__all__ = [
    "AttemptState",
    "AttemptStateMachine",
]

from enum import Enum


class AttemptState(str, Enum):
    UNMUTATED = "unmutated"
    MUTATING = "mutating"
    MUTATED = "mutated"
    HEALTH_CHECKING = "health_checking"
    SUCCESS = "success"
    ROLLING_BACK = "rolling_back"
    ROLLED_BACK = "rolled_back"
    FAILED = "failed"


_TRANSITIONS: dict[AttemptState, frozenset[AttemptState]] = {
    AttemptState.UNMUTATED: frozenset({AttemptState.MUTATING, AttemptState.FAILED}),
    AttemptState.MUTATING: frozenset(
        {AttemptState.MUTATED, AttemptState.FAILED, AttemptState.ROLLING_BACK}
    ),
    AttemptState.MUTATED: frozenset({AttemptState.HEALTH_CHECKING}),
    AttemptState.HEALTH_CHECKING: frozenset(
        {AttemptState.SUCCESS, AttemptState.ROLLING_BACK, AttemptState.FAILED}
    ),
    AttemptState.ROLLING_BACK: frozenset({AttemptState.ROLLED_BACK}),
    AttemptState.SUCCESS: frozenset(),
    AttemptState.ROLLED_BACK: frozenset(),
    AttemptState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({AttemptState.SUCCESS, AttemptState.ROLLED_BACK, AttemptState.FAILED})


class AttemptStateMachine:
    """Tracks one adapter's progress through a pass."""

    def __init__(self) -> None:
        self.state = AttemptState.UNMUTATED
        self.history: list[AttemptState] = [AttemptState.UNMUTATED]

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def can_advance(self, target: AttemptState) -> bool:
        return target in _TRANSITIONS[self.state]

    def advance(self, target: AttemptState) -> None:
        """Move to target.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if not self.can_advance(target):
            raise ValueError(f"Illegal attempt transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)
