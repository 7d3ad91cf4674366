"""Device actuators reached through commands pushed over the WebSocket.

The phone executes SMS, dialer, recorder, torch and vibration commands. A
command that reaches no connected device counts as a failure.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from wsafe.core.errors import AuxiliaryControlFailed, NotificationDeliveryFailed
from wsafe.core.ws_manager import ConnectionManager

logger = logging.getLogger(__name__)


class DeviceBridge:
    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def _command(self, event: str, data: dict[str, Any]) -> bool:
        delivered = await self._manager.broadcast(event, data)
        if not delivered:
            logger.warning("Device command %s reached no device", event)
        return delivered > 0

    # NotificationChannel

    async def send_silent(self, phone: str, text: str) -> None:
        if not await self._command("sms.send", {"phone": phone, "body": text}):
            raise NotificationDeliveryFailed(phone, "no device connected")

    async def open_composer(self, phone: str, text: str) -> None:
        if not await self._command("sms.compose", {"phone": phone, "body": text}):
            raise NotificationDeliveryFailed(phone, "no device to open the composer")

    # Dialer

    async def call(self, phone: str) -> None:
        if not await self._command("call.place", {"phone": phone}):
            raise RuntimeError(f"Call to {phone} not placed: no device connected")

    # Auxiliary controllers

    async def start_recording(self) -> None:
        if not await self._command("recorder.start", {}):
            raise AuxiliaryControlFailed("Recorder unavailable")

    async def stop_recording(self) -> None:
        if not await self._command("recorder.stop", {}):
            raise AuxiliaryControlFailed("Recorder unavailable")

    async def set_illumination(self, on: bool) -> None:
        if not await self._command("torch.set", {"on": on}):
            raise AuxiliaryControlFailed("Torch unavailable")

    async def vibrate(self, pattern: Sequence[int]) -> None:
        if not await self._command("vibrate", {"pattern": list(pattern)}):
            raise AuxiliaryControlFailed("Vibrator unavailable")

    async def start_listening(self, locale: str) -> None:
        if not await self._command("speech.start", {"locale": locale}):
            raise AuxiliaryControlFailed("Speech recognizer unavailable")

    async def stop_listening(self) -> None:
        if not await self._command("speech.stop", {}):
            raise AuxiliaryControlFailed("Speech recognizer unavailable")
