"""Periodic location polling during an episode."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from wsafe.core.scheduler import Scheduler, TimerHandle
from wsafe.core.sos_policies import LIVE_UPDATE_INTERVAL_SECONDS, LOCATION_TIMEOUT_SECONDS
from wsafe.services.location import Fix, LocationProvider

logger = logging.getLogger(__name__)


class LiveTracker:
    """Requests a fix every interval and hands it to on_fix.

    Ticks run at a fixed rate; a failed fix skips that round only.
    """

    def __init__(
        self,
        location: LocationProvider,
        on_fix: Callable[[Fix], Awaitable[None]],
        scheduler: Scheduler,
        interval: float = LIVE_UPDATE_INTERVAL_SECONDS,
        timeout: float = LOCATION_TIMEOUT_SECONDS,
    ) -> None:
        self._location = location
        self._on_fix = on_fix
        self._scheduler = scheduler
        self._interval = interval
        self._timeout = timeout
        self._timer: TimerHandle | None = None
        self._firing: list[TimerHandle] = []
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            return
        self._active = True
        self._timer = self._scheduler.schedule(self._interval, self.tick)
        logger.info("Live tracking started (every %ss)", self._interval)

    def stop(self) -> None:
        if not self._active and self._timer is None and not self._firing:
            return
        self._active = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for handle in self._firing:
            handle.cancel()
        self._firing.clear()
        logger.info("Live tracking stopped")

    async def tick(self) -> None:
        handle, self._timer = self._timer, None
        if handle is not None:
            self._firing.append(handle)
        try:
            if not self._active:
                return
            self._timer = self._scheduler.schedule(self._interval, self.tick)

            try:
                fix = await self._location.get_current_fix(self._timeout)
            except Exception as exc:
                logger.warning("Live tracking error: %s", exc)
                return

            if not self._active:
                return
            await self._on_fix(fix)
        finally:
            if handle in self._firing:
                self._firing.remove(handle)
