"""Fly.io Machines API client."""

from __future__ import annotations

import asyncio

import aiohttp
from loguru import logger
from pydantic import ValidationError

from wakebot.errors import ControlPlaneError, DecodeError, TransportError
from wakebot.machines.models import MachineDescription, MachineTarget

DEFAULT_BASE_URL = "https://api.machines.dev/v1"
START_OK = frozenset({200, 204})


class MachinesClient:
    """
    Minimal Machines API client.

    Endpoints:
      - POST /apps/<app>/machines/<id>/start
      - GET  /apps/<app>/machines/<id>

    No retries happen here; callers decide what a failure means.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        *,
        start_timeout: float = 30,
        describe_timeout: float = 10,
    ) -> None:
        self.api_token = api_token.strip()
        self.base_url = base_url.rstrip("/")
        self.start_timeout = start_timeout
        self.describe_timeout = describe_timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    def machine_url(self, target: MachineTarget) -> str:
        return f"{self.base_url}/apps/{target.app}/machines/{target.machine_id}"

    async def start(self, target: MachineTarget) -> None:
        url = f"{self.machine_url(target)}/start"
        status, body = await self._request(
            "POST", url, timeout_s=self.start_timeout, target=target, action="start machine"
        )
        if status not in START_OK:
            raise ControlPlaneError("start machine", status, body, target=target)
        logger.info("machines.start ok target={} status={}", target, status)

    async def describe(self, target: MachineTarget) -> MachineDescription:
        url = self.machine_url(target)
        status, body = await self._request(
            "GET", url, timeout_s=self.describe_timeout, target=target, action="get machine"
        )
        if status != 200:
            raise ControlPlaneError("get machine", status, body, target=target)
        try:
            machine = MachineDescription.model_validate_json(body)
        except ValidationError as exc:
            raise DecodeError(f"failed to decode machine response: {exc}", target=target) from exc
        logger.debug("machines.describe target={} state={} checks={}", target, machine.state, len(machine.checks))
        return machine

    async def _request(
        self,
        method: str,
        url: str,
        *,
        timeout_s: float,
        target: MachineTarget,
        action: str,
    ) -> tuple[int, str]:
        timeout = aiohttp.ClientTimeout(total=timeout_s)
        try:
            async with aiohttp.ClientSession(timeout=timeout, headers=self._headers()) as session:
                async with session.request(method, url) as resp:
                    body = await resp.text(errors="replace")
                    return resp.status, body
        except asyncio.TimeoutError as exc:
            raise TransportError(f"failed to {action}: timed out after {timeout_s}s", target=target) from exc
        except aiohttp.ClientError as exc:
            raise TransportError(f"failed to {action}: {exc}", target=target) from exc
