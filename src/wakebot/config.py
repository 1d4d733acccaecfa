"""Configuration management for wakebot."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wakebot.errors import ConfigurationError
from wakebot.machines.models import MachineTarget

DEFAULT_API_BASE = "https://api.machines.dev/v1"

DISCORD_FIELDS = ("discord_token", "fly_api_token", "fly_app_name", "fly_machine_id")
MACHINE_FIELDS = ("fly_api_token", "fly_app_name", "fly_machine_id")


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="WAKEBOT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials and target
    discord_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("WAKEBOT_DISCORD_TOKEN", "DISCORD_BOT_TOKEN"),
        description="Discord bot token",
    )
    fly_api_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("WAKEBOT_FLY_API_TOKEN", "MC_FLY_API_TOKEN"),
        description="Fly.io Machines API token",
    )
    fly_app_name: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("WAKEBOT_FLY_APP_NAME", "MC_FLY_APP_NAME"),
        description="Fly.io application that owns the machine",
    )
    fly_machine_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("WAKEBOT_FLY_MACHINE_ID", "MC_FLY_MACHINE_ID"),
        description="Machine to wake",
    )
    api_base: str = Field(default=DEFAULT_API_BASE, description="Machines API base URL")

    # Wake loop
    poll_interval_seconds: float = Field(default=30.0, gt=0, description="Delay between health polls")
    patience_poll: int = Field(default=6, ge=1, description="Poll number that triggers the patience remark")
    max_wait_seconds: Optional[float] = Field(
        default=None, gt=0, description="Give up after this many seconds; unset waits forever"
    )
    start_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for the start call")
    describe_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for the describe call")

    # Discord
    command_name: str = Field(default="start-server", description="Slash command name")
    allow_channels: str = Field(default="", description="Comma separated channel ids allowed to trigger")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")

    @property
    def allowed_channel_ids(self) -> set[str]:
        return {item.strip() for item in self.allow_channels.split(",") if item.strip()}

    @property
    def target(self) -> MachineTarget:
        self.require(*MACHINE_FIELDS[1:])
        return MachineTarget(app=self.fly_app_name or "", machine_id=self.fly_machine_id or "")

    def require(self, *fields: str) -> None:
        """Raise ConfigurationError naming every empty field in ``fields``."""
        missing = [name for name in fields if not (getattr(self, name) or "").strip()]
        if missing:
            raise ConfigurationError(missing)


def load_settings() -> Settings:
    """Load settings from the environment and ``.env``."""
    return Settings()
