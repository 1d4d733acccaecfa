"""Machine description models returned by the Machines API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

STARTED = "started"


@dataclass(frozen=True)
class MachineTarget:
    """One machine, addressed by application name and machine id."""

    app: str
    machine_id: str

    @property
    def key(self) -> str:
        return f"{self.app}/{self.machine_id}"

    def __str__(self) -> str:
        return self.key


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # The API sends null for empty lists and omitted strings.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class CheckStatus(_Model):
    """Reported result of one health check."""

    name: str = ""
    output: str = ""
    status: str = "unknown"  # passing|warning|critical|unknown
    updated_at: datetime | None = None

    @property
    def passing(self) -> bool:
        return self.status == "passing"


class CheckDefinition(_Model):
    """Health check configured on a service."""

    type: str = ""
    interval: str = ""
    timeout: str = ""
    grace_period: str = ""
    method: str | None = None
    path: str | None = None
    protocol: str | None = None
    port: int | None = None


class ServicePort(_Model):
    port: int | None = None
    handlers: list[str] = Field(default_factory=list)


class ServiceConfig(_Model):
    protocol: str = ""
    internal_port: int | None = None
    ports: list[ServicePort] = Field(default_factory=list)
    checks: list[CheckDefinition] = Field(default_factory=list)


class MachineConfig(_Model):
    services: list[ServiceConfig] = Field(default_factory=list)


class MachineEvent(_Model):
    id: str = ""
    type: str = ""
    status: str = ""
    request: dict[str, Any] | None = None
    source: str = ""
    timestamp: int | None = None


class MachineDescription(_Model):
    """Snapshot of one machine as reported by the control plane."""

    id: str = ""
    name: str = ""
    state: str = ""
    checks: list[CheckStatus] = Field(default_factory=list)
    config: MachineConfig = Field(default_factory=MachineConfig)
    events: list[MachineEvent] = Field(default_factory=list)

    @property
    def started(self) -> bool:
        return self.state == STARTED

    @property
    def has_health_checks(self) -> bool:
        return any(service.checks for service in self.config.services)
