"""Readiness verdicts derived from a machine description."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from wakebot.machines.models import MachineDescription


class VerdictKind(StrEnum):
    READY = "ready"
    NOT_STARTED = "not_started"
    WAITING = "waiting"


@dataclass(frozen=True)
class FailingCheck:
    name: str
    status: str
    output: str


@dataclass(frozen=True)
class ReadinessVerdict:
    """Ternary readiness judgment for one poll."""

    kind: VerdictKind
    reason: str = ""
    failing: tuple[FailingCheck, ...] = field(default_factory=tuple)

    @classmethod
    def ready(cls) -> ReadinessVerdict:
        return cls(VerdictKind.READY)

    @classmethod
    def not_started(cls, state: str) -> ReadinessVerdict:
        return cls(VerdictKind.NOT_STARTED, reason=state or "unknown")

    @classmethod
    def waiting(cls, reason: str, failing: tuple[FailingCheck, ...] = ()) -> ReadinessVerdict:
        return cls(VerdictKind.WAITING, reason=reason, failing=failing)

    @property
    def is_ready(self) -> bool:
        return self.kind is VerdictKind.READY


def evaluate(machine: MachineDescription) -> ReadinessVerdict:
    """Decide whether ``machine`` is ready to serve.

    A started machine without configured checks is ready immediately. With
    checks configured, every reported check must be passing, and no reported
    results at all means the checks have not run yet.
    """
    if not machine.started:
        logger.info("health.not_started machine={} state={}", machine.id, machine.state)
        return ReadinessVerdict.not_started(machine.state)

    if not machine.has_health_checks:
        logger.info("health.ready machine={} checks=none", machine.id)
        return ReadinessVerdict.ready()

    if not machine.checks:
        logger.info("health.waiting machine={} reason=no_results", machine.id)
        return ReadinessVerdict.waiting("no results yet")

    failing = tuple(
        FailingCheck(name=check.name, status=check.status, output=check.output)
        for check in machine.checks
        if not check.passing
    )
    if not failing:
        logger.info("health.ready machine={} checks={}", machine.id, len(machine.checks))
        return ReadinessVerdict.ready()

    for check in failing:
        logger.debug("health.check name={} status={} output={}", check.name, check.status, check.output)
    names = ", ".join(f"{check.name}={check.status}" for check in failing)
    return ReadinessVerdict.waiting(f"checks not passing: {names}", failing)
