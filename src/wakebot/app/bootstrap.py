"""Runtime bootstrap helpers."""

from __future__ import annotations

from collections.abc import Iterable

from wakebot.app.runtime import AppRuntime
from wakebot.config import Settings, load_settings


def build_runtime(
    required: Iterable[str],
    *,
    settings: Settings | None = None,
    poll_interval: float | None = None,
    max_wait: float | None = None,
) -> AppRuntime:
    """Build the app runtime, failing fast when ``required`` settings are missing."""

    settings = settings or load_settings()
    settings.require(*required)
    updates: dict[str, object] = {}
    if poll_interval is not None:
        updates["poll_interval_seconds"] = poll_interval
    if max_wait is not None:
        updates["max_wait_seconds"] = max_wait
    if updates:
        settings = settings.model_copy(update=updates)
    return AppRuntime(settings)
