"""Wake session state."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum

from wakebot.machines.models import MachineTarget


class WakePhase(StrEnum):
    ACKNOWLEDGED = "acknowledged"
    STARTING = "starting"
    AWAITING_FIRST_CHECK = "awaiting_first_check"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({WakePhase.SUCCEEDED, WakePhase.FAILED, WakePhase.ABANDONED})


@dataclass
class WakeSession:
    """Mutable state of one wake-and-poll run."""

    target: MachineTarget
    mention: str = ""
    started_at: float = field(default_factory=time.monotonic)
    poll_count: int = 0
    phase: WakePhase = WakePhase.ACKNOWLEDGED
    error: str | None = None

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def advance(self, phase: WakePhase) -> None:
        if self.phase.is_terminal:
            raise RuntimeError(f"session for {self.target} already finished as {self.phase}")
        self.phase = phase
