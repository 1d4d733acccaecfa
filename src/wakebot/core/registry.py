"""Registry of in-flight wake sessions keyed by target."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from loguru import logger

from wakebot.core.session import WakePhase, WakeSession
from wakebot.errors import SessionInProgressError


class SessionRegistry:
    """Track one running wake task per target and cancel them on shutdown."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[WakePhase]] = {}
        self._sessions: dict[str, WakeSession] = {}

    def running(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    def active(self) -> list[WakeSession]:
        return [self._sessions[key] for key, task in self._tasks.items() if not task.done()]

    def launch(self, session: WakeSession, run: Coroutine[Any, Any, WakePhase]) -> asyncio.Task[WakePhase]:
        """Schedule ``run`` for ``session``; refuses a second session for the same target."""
        key = session.target.key
        if key in self._tasks and not self._tasks[key].done():
            run.close()
            raise SessionInProgressError(key)

        task = asyncio.create_task(run, name=f"wake:{key}")
        self._tasks[key] = task
        self._sessions[key] = session
        task.add_done_callback(lambda done: self._on_done(key, done))
        logger.info("registry.launch target={} active={}", key, len(self._tasks))
        return task

    async def cancel_all(self) -> int:
        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                continue
            except Exception:
                logger.exception("registry.cancel.error task={}", task.get_name())
        if pending:
            logger.info("registry.cancelled count={}", len(pending))
        return len(pending)

    def _on_done(self, key: str, task: asyncio.Task[WakePhase]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
            self._sessions.pop(key, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error("registry.session.error target={}", key)
            return
        logger.info("registry.done target={} phase={}", key, task.result())
