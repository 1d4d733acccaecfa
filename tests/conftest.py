from __future__ import annotations

import os
from pathlib import Path

import pytest

_LEGACY_ENV_NAMES = ("DISCORD_BOT_TOKEN", "MC_FLY_API_TOKEN", "MC_FLY_APP_NAME", "MC_FLY_MACHINE_ID")


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Keep the developer's shell and .env out of settings under test.
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("WAKEBOT_") or name in _LEGACY_ENV_NAMES:
            monkeypatch.delenv(name, raising=False)
