"""Location fixes and the device-reported location provider."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from wsafe.core.errors import LocationUnavailable
from wsafe.core.sos_policies import LOCATION_MAX_AGE_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fix:
    """One location sample. Produced fresh per request, never mutated."""

    lat: float
    lng: float
    accuracy: float | None
    timestamp: datetime


class LocationProvider(Protocol):
    async def get_current_fix(self, timeout: float) -> Fix:
        """Return a fresh fix or raise LocationUnavailable."""
        ...


def format_coordinate(value: float) -> str:
    """Shortest decimal form, e.g. 10.0 -> "10", 12.9716 -> "12.9716"."""
    text = f"{value:.7f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_accuracy(accuracy: float | None) -> str:
    """Accuracy rounded to the nearest meter, or N/A."""
    if accuracy is None:
        return "N/A"
    return f"{round(accuracy)}m"


def map_link(map_service_url: str, fix: Fix) -> str:
    return f"{map_service_url}?q={format_coordinate(fix.lat)},{format_coordinate(fix.lng)}"


def nearby_search_link(kind: str, fix: Fix) -> str:
    """Map search for police stations or hospitals around the fix."""
    if kind not in ("police", "hospital"):
        raise ValueError("Unknown place type; use 'police' or 'hospital'")
    query = "police+station" if kind == "police" else "hospital"
    return (
        f"https://www.google.com/maps/search/{query}/"
        f"@{format_coordinate(fix.lat)},{format_coordinate(fix.lng)},15z"
    )


class ReportedLocationProvider:
    """Location provider fed by fixes the phone posts to the service.

    A request is served from the latest report when it is fresh enough;
    otherwise it waits up to the timeout for the next report.
    """

    def __init__(self, max_age: float = LOCATION_MAX_AGE_SECONDS) -> None:
        self._max_age = max_age
        self._latest: Fix | None = None
        self._received_at: float = 0.0
        self._waiters: list[asyncio.Future] = []

    @property
    def latest(self) -> Fix | None:
        return self._latest

    def report(self, lat: float, lng: float, accuracy: float | None = None) -> Fix:
        fix = Fix(lat=lat, lng=lng, accuracy=accuracy, timestamp=datetime.now(timezone.utc))
        self._latest = fix
        self._received_at = time.monotonic()
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(fix)
        return fix

    async def get_current_fix(self, timeout: float) -> Fix:
        if self._latest is not None and time.monotonic() - self._received_at <= self._max_age:
            return self._latest

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await asyncio.wait_for(waiter, timeout)
        except asyncio.TimeoutError:
            logger.warning("No location report within %ss", timeout)
            raise LocationUnavailable(f"No fix within {timeout:g}s") from None
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)
