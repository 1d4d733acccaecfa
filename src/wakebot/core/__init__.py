"""Wake orchestration core."""

from wakebot.core.health import ReadinessVerdict, VerdictKind, evaluate
from wakebot.core.orchestrator import WakeOrchestrator
from wakebot.core.registry import SessionRegistry
from wakebot.core.session import WakePhase, WakeSession

__all__ = [
    "ReadinessVerdict",
    "SessionRegistry",
    "VerdictKind",
    "WakeOrchestrator",
    "WakePhase",
    "WakeSession",
    "evaluate",
]
