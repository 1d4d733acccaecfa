"""wakebot - wake a sleeping Fly.io machine from a chat command."""

__version__ = "0.1.0"
