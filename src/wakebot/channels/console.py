"""Terminal notifier for one-shot wakes."""

from __future__ import annotations

from rich import get_console
from rich.console import Console

from wakebot.channels.base import Notifier
from wakebot.core.remarks import with_mention


class ConsoleNotifier(Notifier):
    """Print every update as a new line; a terminal cannot edit earlier output."""

    name = "console"

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or get_console()
        self.messages: list[str] = []

    async def post_initial_ack(self, text: str) -> None:
        self._print(text)

    async def update_message(self, text: str) -> None:
        self._print(text)

    async def post_followup(self, text: str, mention: str | None = None) -> None:
        self._print(with_mention(text, mention))

    def _print(self, text: str) -> None:
        self.messages.append(text)
        self._console.print(text, markup=False, highlight=False, soft_wrap=True)
        self._console.print()
