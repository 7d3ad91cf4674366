"""Trigger detectors: shake, voice keyword, wearable."""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Iterable

from wsafe.core.sos_policies import (
    SHAKE_THRESHOLD,
    SHAKE_TRIGGER_COUNT,
    SHAKE_WINDOW_SECONDS,
    SOURCE_SHAKE,
    SOURCE_VOICE,
    SOURCE_WEARABLE,
    SOURCE_WEARABLE_DISCONNECT,
    VOICE_KEYWORDS,
    WEARABLE_SOS_TOKEN,
)
from wsafe.services.episode_engine import TriggerEvent
from wsafe.services.streams import DeviceLinkStream, MotionStream, SpeechStream, Unsubscribe

logger = logging.getLogger(__name__)

Emit = Callable[[TriggerEvent], None]


class ShakeDetector:
    """Counts strong shakes; five within the window of each other trigger.

    The count lapses to zero once the window passes with no qualifying
    sample, and resets immediately when it triggers.
    """

    def __init__(
        self,
        emit: Emit,
        threshold: float = SHAKE_THRESHOLD,
        window: float = SHAKE_WINDOW_SECONDS,
        trigger_count: int = SHAKE_TRIGGER_COUNT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._emit = emit
        self._threshold = threshold
        self._window = window
        self._trigger_count = trigger_count
        self._clock = clock
        self._count = 0
        self._last_at = 0.0
        self.fired = 0

    @property
    def count(self) -> int:
        self._expire(self._clock())
        return self._count

    def _expire(self, now: float) -> None:
        if self._count and now - self._last_at >= self._window:
            self._count = 0

    def feed(self, magnitude: float) -> bool:
        """Feed one acceleration magnitude. Returns True when it triggered."""
        if magnitude is None or math.isnan(magnitude) or magnitude <= self._threshold:
            return False

        now = self._clock()
        self._expire(now)
        self._count += 1
        self._last_at = now
        logger.debug("Shake detected: %s/%s", self._count, self._trigger_count)

        if self._count >= self._trigger_count:
            self._count = 0
            self.fired += 1
            self._emit(TriggerEvent(SOURCE_SHAKE))
            return True
        return False

    def feed_vector(self, x: float, y: float, z: float) -> bool:
        return self.feed(math.sqrt(x * x + y * y + z * z))

    def attach(self, stream: MotionStream) -> Unsubscribe:
        return stream.subscribe(self.feed_vector)


class VoiceDetector:
    def __init__(self, emit: Emit, keywords: Iterable[str] = VOICE_KEYWORDS) -> None:
        self._emit = emit
        self._keywords = tuple(k.lower() for k in keywords)
        self.fired = 0

    def feed(self, result: Any) -> bool:
        """Feed a recognition result: text, or a list of alternatives (best first)."""
        if isinstance(result, (list, tuple)):
            result = result[0] if result else None
        if not isinstance(result, str) or not result.strip():
            return False

        transcript = result.lower()
        if any(keyword in transcript for keyword in self._keywords):
            logger.info("Voice keyword heard")
            self.fired += 1
            self._emit(TriggerEvent(SOURCE_VOICE))
            return True
        return False

    def attach(self, stream: SpeechStream) -> Unsubscribe:
        return stream.on_result(self.feed)


class WearableDetector:
    def __init__(self, emit: Emit, token: str = WEARABLE_SOS_TOKEN) -> None:
        self._emit = emit
        self._token = token.upper()
        self.fired = 0

    def feed(self, data: Any) -> bool:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="ignore")
        if not isinstance(data, str):
            return False
        if data.strip().upper() == self._token:
            self.fired += 1
            self._emit(TriggerEvent(SOURCE_WEARABLE))
            return True
        return False

    def on_disconnect(self) -> None:
        self.fired += 1
        self._emit(TriggerEvent(SOURCE_WEARABLE_DISCONNECT))

    def attach(self, stream: DeviceLinkStream) -> Unsubscribe:
        unsub_data = stream.on_data(self.feed)
        unsub_disconnect = stream.on_disconnect(self.on_disconnect)

        def unsubscribe() -> None:
            unsub_data()
            unsub_disconnect()

        return unsubscribe
