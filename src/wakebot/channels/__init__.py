"""Front ends that receive wake requests and render progress."""

from wakebot.channels.base import Notifier
from wakebot.channels.console import ConsoleNotifier

__all__ = ["ConsoleNotifier", "Notifier"]
