"""Push-based device event streams.

The phone posts sensor readings to the API; each stream fans them out to its
subscribers. Subscribers never block the producer.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class SpeechRecognizer(Protocol):
    async def start_listening(self, locale: str) -> None: ...

    async def stop_listening(self) -> None: ...


class _Subscribers:
    def __init__(self) -> None:
        self._callbacks: list[Callable[..., Any]] = []

    def add(self, callback: Callable[..., Any]) -> Unsubscribe:
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def emit(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            try:
                callback(*args)
            except Exception:
                logger.exception("Stream subscriber failed")

    def __len__(self) -> int:
        return len(self._callbacks)


class MotionStream:
    """Accelerometer samples (x, y, z) in m/s^2."""

    def __init__(self) -> None:
        self._subscribers = _Subscribers()

    def subscribe(self, callback: Callable[[float, float, float], Any]) -> Unsubscribe:
        return self._subscribers.add(callback)

    def push(self, x: float, y: float, z: float) -> None:
        self._subscribers.emit(x, y, z)


class SpeechStream:
    """Recognized speech results; listening is switched on the device."""

    def __init__(self, recognizer: SpeechRecognizer | None = None) -> None:
        self._recognizer = recognizer
        self._subscribers = _Subscribers()
        self.listening = False
        self.locale: str | None = None

    def on_result(self, callback: Callable[[Any], Any]) -> Unsubscribe:
        return self._subscribers.add(callback)

    async def start(self, locale: str) -> None:
        if self._recognizer is not None:
            await self._recognizer.start_listening(locale)
        self.listening = True
        self.locale = locale

    async def stop(self) -> None:
        if self._recognizer is not None:
            await self._recognizer.stop_listening()
        self.listening = False

    def push(self, result: Any) -> None:
        self._subscribers.emit(result)


class DeviceLinkStream:
    """Serial link to the paired wearable."""

    def __init__(self) -> None:
        self._data = _Subscribers()
        self._disconnect = _Subscribers()
        self.connected = False
        self.device_name: str | None = None

    def on_data(self, callback: Callable[[Any], Any]) -> Unsubscribe:
        return self._data.add(callback)

    def on_disconnect(self, callback: Callable[[], Any]) -> Unsubscribe:
        return self._disconnect.add(callback)

    def mark_connected(self, device_name: str | None = None) -> None:
        self.connected = True
        self.device_name = device_name

    def push(self, data: Any) -> None:
        self._data.emit(data)

    def connection_lost(self) -> None:
        """Unexpected drop of the link; subscribers are told."""
        self.connected = False
        logger.warning("Wearable link lost (%s)", self.device_name or "unknown device")
        self._disconnect.emit()

    def disconnect(self) -> None:
        """User-initiated disconnect; not reported as a loss."""
        self.connected = False
        self.device_name = None
