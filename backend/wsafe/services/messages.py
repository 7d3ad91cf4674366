"""Outbound SOS message templates: activation, live update, deactivation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from wsafe.services.location import Fix, format_accuracy, map_link

LOCATION_UNAVAILABLE = "Location unavailable (GPS did not respond)"


def format_time(moment: datetime) -> str:
    return moment.strftime("%d %b %Y, %H:%M:%S %Z").strip()


@dataclass(frozen=True)
class MessageComposer:
    map_service_url: str
    app_signature: str
    live_interval_seconds: float

    def _location_lines(self, fix: Fix | None) -> list[str]:
        if fix is None:
            return [LOCATION_UNAVAILABLE, f"Accuracy: {format_accuracy(None)}"]
        return [map_link(self.map_service_url, fix), f"Accuracy: {format_accuracy(fix.accuracy)}"]

    def activation(self, source: str, started_at: datetime, fix: Fix | None) -> str:
        lines = [
            "EMERGENCY SOS ALERT!",
            "",
            "I NEED IMMEDIATE HELP!",
            "",
            f"Trigger: {source}",
            f"Time: {format_time(started_at)}",
            "",
            "LIVE LOCATION:",
            *self._location_lines(fix),
            "",
            "Live tracking is now ACTIVE. You will receive location updates "
            f"every {self.live_interval_seconds:g} seconds.",
            "",
            "PLEASE CONTACT ME OR CALL AUTHORITIES IMMEDIATELY!",
            "",
            f"This is an automated emergency message from {self.app_signature}.",
        ]
        return "\n".join(lines)

    def live_update(self, fix: Fix) -> str:
        lines = [
            "SOS Alert! I am in danger.",
            f"Location: {map_link(self.map_service_url, fix)}",
            f"Time: {format_time(fix.timestamp)}",
            f"Accuracy: {format_accuracy(fix.accuracy)}",
            "Please help immediately.",
        ]
        return "\n".join(lines)

    def deactivation(self, ended_at: datetime, fix: Fix | None) -> str:
        location = map_link(self.map_service_url, fix) if fix else LOCATION_UNAVAILABLE
        lines = [
            "PANIC MODE DEACTIVATED",
            "",
            "User has safely deactivated the emergency alert.",
            "",
            f"Time: {format_time(ended_at)}",
            f"Final Location: {location}",
            "",
            "Emergency has been resolved.",
        ]
        return "\n".join(lines)
