"""HTTP SMS gateway for silent delivery."""

from __future__ import annotations

import logging

import httpx

from wsafe.core.errors import NotificationDeliveryFailed
from wsafe.services.notifier import NotificationChannel

logger = logging.getLogger(__name__)


class HttpSmsGateway:
    """Sends SMS through an HTTP gateway; the composer fallback goes to the device.

    The gateway is expected to accept ``POST {"to": ..., "body": ...}`` and
    answer 2xx once the message is queued.
    """

    def __init__(
        self,
        url: str,
        fallback: NotificationChannel,
        token: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._fallback = fallback
        self._token = token
        self._timeout = timeout
        self._transport = transport

    async def send_silent(self, phone: str, text: str) -> None:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, json={"to": phone, "body": text}, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotificationDeliveryFailed(phone, f"gateway returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise NotificationDeliveryFailed(phone, f"gateway unreachable: {exc}") from exc

    async def open_composer(self, phone: str, text: str) -> None:
        await self._fallback.open_composer(phone, text)
