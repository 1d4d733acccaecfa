"""Application runtime and session management."""

from __future__ import annotations

import asyncio

from wakebot.channels.base import Notifier
from wakebot.config import Settings
from wakebot.core.health import ReadinessVerdict, evaluate
from wakebot.core.orchestrator import MachineControl, WakeOrchestrator
from wakebot.core.registry import SessionRegistry
from wakebot.core.session import WakePhase, WakeSession
from wakebot.machines.client import MachinesClient
from wakebot.machines.models import MachineDescription, MachineTarget


class AppRuntime:
    """Process runtime that owns the control client and in-flight sessions."""

    def __init__(
        self,
        settings: Settings,
        *,
        client: MachineControl | None = None,
        registry: SessionRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.target: MachineTarget = settings.target
        self.client = client or MachinesClient(
            settings.fly_api_token or "",
            settings.api_base,
            start_timeout=settings.start_timeout_seconds,
            describe_timeout=settings.describe_timeout_seconds,
        )
        self.registry = registry or SessionRegistry()
        self.orchestrator = WakeOrchestrator(
            self.client,
            poll_interval=settings.poll_interval_seconds,
            patience_poll=settings.patience_poll,
            max_wait=settings.max_wait_seconds,
        )

    def is_waking(self) -> bool:
        return self.registry.running(self.target.key)

    def wake(self, notifier: Notifier, *, mention: str = "") -> asyncio.Task[WakePhase]:
        """Launch a wake session in the background and return its task.

        Raises SessionInProgressError when the target is already being woken.
        """
        session = WakeSession(target=self.target, mention=mention)
        return self.registry.launch(session, self.orchestrator.run(session, notifier))

    async def inspect(self) -> tuple[MachineDescription, ReadinessVerdict]:
        machine = await self.client.describe(self.target)
        return machine, evaluate(machine)

    async def shutdown(self) -> int:
        """Cancel every in-flight session; returns how many were cancelled."""
        return await self.registry.cancel_all()
