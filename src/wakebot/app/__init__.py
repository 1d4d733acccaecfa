"""Application runtime exports."""

from wakebot.app.bootstrap import build_runtime
from wakebot.app.runtime import AppRuntime

__all__ = ["AppRuntime", "build_runtime"]
