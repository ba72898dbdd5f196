"""HTTP health probe for a channel's transcoding service."""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel

from app.app_config import get_app_environ_config


class TranscodingStatus(str, Enum):
    RUNNING = "running"  # transcoding API answered
    STARTING = "starting"  # only the status server answered
    UNREACHABLE = "unreachable"
    MOCK = "mock"  # synthetic instance, nothing to probe

    def __str__(self) -> str:
        return self.value


class ProbeResult(BaseModel):
    status: TranscodingStatus
    details: dict[str, Any] | None = None
    error: str | None = None


class TranscodingProbe:
    """Checks the transcoding API first, then the secondary status server."""

    def __init__(
        self,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout_seconds or get_app_environ_config().TRANSCODING_PROBE_TIMEOUT_SECONDS
        self._transport = transport

    async def probe(self, transcoding_url: str, status_server_url: str) -> ProbeResult:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(transcoding_url)
                response.raise_for_status()
                return ProbeResult(status=TranscodingStatus.RUNNING, details=_json_or_none(response))
            except httpx.HTTPError as e:
                primary_error = f"{type(e).__name__}: {e}"
                logger.debug(f"Transcoding API probe failed for {transcoding_url}: {primary_error}")

            try:
                response = await client.get(status_server_url)
                response.raise_for_status()
                return ProbeResult(status=TranscodingStatus.STARTING, error=primary_error)
            except httpx.HTTPError as e:
                logger.info(f"Status server probe failed for {status_server_url}: {e}")
                return ProbeResult(status=TranscodingStatus.UNREACHABLE, error=primary_error)


def _json_or_none(response: httpx.Response) -> dict[str, Any] | None:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else {"value": data}


transcoding_probe = TranscodingProbe()
