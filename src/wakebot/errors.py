"""Application-level exception types for wakebot."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wakebot.machines.models import MachineTarget


class WakebotError(Exception):
    """Base exception for wakebot."""


class ConfigurationError(WakebotError):
    """Raised when required settings are missing at startup."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"missing required configuration: {', '.join(self.missing)}")


class ControlError(WakebotError):
    """Base exception for control-plane calls."""

    def __init__(self, message: str, *, target: MachineTarget | None = None) -> None:
        super().__init__(message)
        self.target = target


class TransportError(ControlError):
    """Raised when the control plane cannot be reached."""


class ControlPlaneError(ControlError):
    """Raised when the control plane answers with an unexpected status."""

    def __init__(self, action: str, status: int, body: str, *, target: MachineTarget | None = None) -> None:
        self.action = action
        self.status = status
        self.body = body
        super().__init__(f"failed to {action}: status {status}, body: {body}", target=target)


class DecodeError(ControlError):
    """Raised when a control-plane response body cannot be decoded."""


class SessionInProgressError(WakebotError):
    """Raised when a wake session is already running for the same target."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"a wake session is already running for {key}")
