"""Wake-and-poll orchestration."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from loguru import logger

from wakebot.channels.base import Notifier
from wakebot.core import remarks
from wakebot.core.health import ReadinessVerdict, evaluate
from wakebot.core.session import WakePhase, WakeSession
from wakebot.errors import ControlError
from wakebot.machines.models import MachineDescription, MachineTarget

Sleep = Callable[[float], Awaitable[None]]


class MachineControl(Protocol):
    async def start(self, target: MachineTarget) -> None: ...

    async def describe(self, target: MachineTarget) -> MachineDescription: ...


class WakeOrchestrator:
    """Start a machine, then poll its health until it is ready.

    ``run`` is meant to be scheduled as its own task; cancelling that task is
    the only way to stop a session that has no ``max_wait``.
    """

    def __init__(
        self,
        client: MachineControl,
        *,
        poll_interval: float = 30.0,
        patience_poll: int = 6,
        max_wait: float | None = None,
        sleep: Sleep = asyncio.sleep,
        remark: Callable[[], str] = remarks.patience_remark,
    ) -> None:
        self._client = client
        self._poll_interval = poll_interval
        self._patience_poll = patience_poll
        self._max_wait = max_wait
        self._sleep = sleep
        self._remark = remark

    async def run(self, session: WakeSession, notifier: Notifier) -> WakePhase:
        try:
            await self._run(session, notifier)
        except asyncio.CancelledError:
            if not session.phase.is_terminal:
                session.advance(WakePhase.ABANDONED)
            logger.warning(
                "wake.cancelled target={} polls={} elapsed={:.0f}s", session.target, session.poll_count, session.elapsed
            )
            raise
        return session.phase

    async def _run(self, session: WakeSession, notifier: Notifier) -> None:
        session.advance(WakePhase.STARTING)
        logger.info("wake.starting target={}", session.target)
        try:
            await self._client.start(session.target)
        except ControlError as exc:
            session.error = str(exc)
            session.advance(WakePhase.FAILED)
            logger.error("wake.start.error target={} error={}", session.target, exc)
            await self._notify(session, notifier.update_message, remarks.start_failed(exc))
            return

        await self._notify(session, notifier.update_message, remarks.CHECKING_HEALTH)

        # A warm machine should report without waiting a full interval.
        session.advance(WakePhase.AWAITING_FIRST_CHECK)
        session.poll_count = 1
        await self._maybe_remark(session, notifier)
        if (await self._check(session)).is_ready:
            self._succeed(session)
            await self._notify(session, notifier.update_message, remarks.READY)
            return

        session.advance(WakePhase.POLLING)
        while True:
            if self._max_wait is not None and session.elapsed >= self._max_wait:
                session.advance(WakePhase.ABANDONED)
                logger.warning(
                    "wake.abandoned target={} polls={} max_wait={}s", session.target, session.poll_count, self._max_wait
                )
                await self._notify(session, notifier.post_followup, remarks.gave_up(session.elapsed), session.mention)
                return

            await self._sleep(self._poll_interval)
            session.poll_count += 1
            await self._maybe_remark(session, notifier)

            if (await self._check(session)).is_ready:
                self._succeed(session)
                await self._notify(session, notifier.post_followup, remarks.READY, session.mention)
                return

    async def _maybe_remark(self, session: WakeSession, notifier: Notifier) -> None:
        if session.poll_count == self._patience_poll:
            await self._notify(session, notifier.update_message, self._remark())

    async def _check(self, session: WakeSession) -> ReadinessVerdict:
        try:
            machine = await self._client.describe(session.target)
        except ControlError as exc:
            # A flaky status call must not end an otherwise healthy wake.
            logger.warning("wake.describe.error target={} poll={} error={}", session.target, session.poll_count, exc)
            return ReadinessVerdict.waiting(str(exc))

        verdict = evaluate(machine)
        logger.info(
            "wake.poll target={} poll={} verdict={} reason={}",
            session.target,
            session.poll_count,
            verdict.kind,
            verdict.reason,
        )
        return verdict

    @staticmethod
    def _succeed(session: WakeSession) -> None:
        session.advance(WakePhase.SUCCEEDED)
        logger.info(
            "wake.ready target={} polls={} elapsed={:.0f}s", session.target, session.poll_count, session.elapsed
        )

    @staticmethod
    async def _notify(session: WakeSession, send: Callable[..., Awaitable[None]], *args: Any) -> None:
        try:
            await send(*args)
        except Exception:
            logger.exception("wake.notify.error target={} phase={}", session.target, session.phase)
