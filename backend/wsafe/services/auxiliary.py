"""Best-effort auxiliary controllers: recording, flashlight, vibration."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol, Sequence

from wsafe.services.notifier import NoticeSink

logger = logging.getLogger(__name__)


class Recorder(Protocol):
    async def start_recording(self) -> None: ...

    async def stop_recording(self) -> None: ...


class Torch(Protocol):
    async def set_illumination(self, on: bool) -> None: ...


class Vibrator(Protocol):
    async def vibrate(self, pattern: Sequence[int]) -> None: ...


class AuxiliaryControllers:
    """Wraps the device actuators; failures are logged and surfaced as notices."""

    def __init__(self, recorder: Recorder, torch: Torch, vibrator: Vibrator, notices: NoticeSink) -> None:
        self._recorder = recorder
        self._torch = torch
        self._vibrator = vibrator
        self._notices = notices
        self.recording = False
        self.flashlight_on = False

    async def _attempt(self, what: str, action: Callable[[], Awaitable[None]]) -> bool:
        try:
            await action()
            return True
        except Exception as exc:
            logger.error("%s error: %s", what, exc)
            await self._notices.publish(
                "notice",
                {"level": "warning", "title": f"{what} failed", "message": str(exc)},
            )
            return False

    async def start_recording(self) -> bool:
        if await self._attempt("Recording start", self._recorder.start_recording):
            self.recording = True
        return self.recording

    async def stop_recording(self) -> bool:
        if await self._attempt("Recording stop", self._recorder.stop_recording):
            self.recording = False
        return self.recording

    async def set_illumination(self, on: bool) -> bool:
        if await self._attempt("Flashlight", lambda: self._torch.set_illumination(on)):
            self.flashlight_on = on
        return self.flashlight_on

    async def toggle_flashlight(self) -> bool:
        return await self.set_illumination(not self.flashlight_on)

    async def toggle_recording(self) -> bool:
        if self.recording:
            return await self.stop_recording()
        return await self.start_recording()

    async def vibrate(self, pattern: Sequence[int]) -> None:
        await self._attempt("Vibration", lambda: self._vibrator.vibrate(pattern))
