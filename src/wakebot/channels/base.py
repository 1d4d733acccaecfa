"""Base notifier interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Progress sink for one wake session.

    The front end posts the acknowledgement with ``post_initial_ack`` before the
    session starts; the orchestrator only edits that message or posts follow-ups.
    """

    name: str = "base"

    @abstractmethod
    async def post_initial_ack(self, text: str) -> None:
        """Post the acknowledgement message that later updates replace."""

    @abstractmethod
    async def update_message(self, text: str) -> None:
        """Replace the content of the acknowledgement message."""

    @abstractmethod
    async def post_followup(self, text: str, mention: str | None = None) -> None:
        """Post a new message, addressing ``mention`` when given."""
