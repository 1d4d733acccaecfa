"""wakebot command line interface."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Iterable
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich import get_console
from rich.table import Table

from wakebot.app.bootstrap import build_runtime
from wakebot.app.runtime import AppRuntime
from wakebot.channels.console import ConsoleNotifier
from wakebot.channels.discord import DiscordChannel
from wakebot.config import DISCORD_FIELDS, MACHINE_FIELDS, load_settings
from wakebot.core import remarks
from wakebot.core.session import WakePhase
from wakebot.errors import ConfigurationError, ControlError
from wakebot.logging_utils import LogProfile, configure_logging

app = typer.Typer(name="wakebot", help="Wake a sleeping Fly.io machine from Discord.", add_completion=False)


def _runtime_or_exit(
    required: Iterable[str],
    *,
    profile: LogProfile = "default",
    poll_interval: float | None = None,
    max_wait: float | None = None,
) -> AppRuntime:
    try:
        settings = load_settings()
        configure_logging(settings.log_level, profile=profile)
        return build_runtime(required, settings=settings, poll_interval=poll_interval, max_wait=max_wait)
    except (ConfigurationError, ValidationError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(2) from exc


@app.command()
def discord() -> None:
    """Run the Discord bot until SIGINT or SIGTERM."""
    runtime = _runtime_or_exit(DISCORD_FIELDS)
    channel = DiscordChannel(runtime)
    asyncio.run(_serve_channel(channel, runtime))


@app.command()
def wake(
    interval: Optional[float] = typer.Option(None, "--interval", min=0.1, help="Seconds between health polls"),
    max_wait: Optional[float] = typer.Option(None, "--max-wait", min=1, help="Give up after this many seconds"),
) -> None:
    """Wake the machine and wait in the terminal until it is healthy."""
    runtime = _runtime_or_exit(MACHINE_FIELDS, profile="console", poll_interval=interval, max_wait=max_wait)
    phase = asyncio.run(_wake_once(runtime, ConsoleNotifier()))
    if phase is not WakePhase.SUCCEEDED:
        raise typer.Exit(1)


@app.command()
def status() -> None:
    """Describe the machine once and show its readiness."""
    runtime = _runtime_or_exit(MACHINE_FIELDS, profile="console")
    try:
        machine, verdict = asyncio.run(runtime.inspect())
    except ControlError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1) from exc

    console = get_console()
    console.print(
        f"machine {machine.id} ({machine.name or '-'}) state={machine.state} verdict={verdict.kind}", markup=False
    )
    if verdict.reason:
        console.print(f"reason: {verdict.reason}", markup=False)
    if machine.checks:
        table = Table("check", "status", "updated", "output")
        for check in machine.checks:
            updated = check.updated_at.isoformat() if check.updated_at else "-"
            table.add_row(check.name, check.status, updated, check.output)
        console.print(table)


async def _wake_once(runtime: AppRuntime, notifier: ConsoleNotifier) -> WakePhase:
    await notifier.post_initial_ack(remarks.ACKNOWLEDGED)
    return await runtime.wake(notifier)


async def _serve_channel(channel: DiscordChannel, runtime: AppRuntime) -> None:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    handled: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)
            handled.append(sig)

    channel_task = asyncio.create_task(channel.start())
    stop_task = asyncio.create_task(stop_event.wait())
    try:
        await asyncio.wait({channel_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        logger.info("serve.stopping signal={}", stop_event.is_set())
        cancelled = await runtime.shutdown()
        logger.info("serve.sessions.cancelled count={}", cancelled)
        await channel.stop()
        await channel_task
    finally:
        stop_task.cancel()
        for sig in handled:
            loop.remove_signal_handler(sig)
    logger.info("serve.stopped")
