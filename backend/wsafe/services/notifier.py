"""Notification fan-out with silent delivery and assisted fallback."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Iterable, Protocol

from wsafe.services.contact_service import ContactEntry

logger = logging.getLogger(__name__)


class NotificationChannel(Protocol):
    async def send_silent(self, phone: str, text: str) -> None:
        """Deliver without user interaction; raise NotificationDeliveryFailed on failure."""
        ...

    async def open_composer(self, phone: str, text: str) -> None:
        """Hand the message to the user to send manually; raise on failure."""
        ...


class NoticeSink(Protocol):
    async def publish(self, event: str, data: Any) -> None: ...


class DeliveryResult(str, enum.Enum):
    SENT = "SENT"
    ASSISTED = "ASSISTED"
    FAILED = "FAILED"


class NotificationDispatcher:
    """Sends one message per contact; a failure never blocks the others."""

    def __init__(self, channel: NotificationChannel, notices: NoticeSink) -> None:
        self._channel = channel
        self._notices = notices

    async def deliver(self, phone: str, text: str) -> DeliveryResult:
        try:
            await self._channel.send_silent(phone, text)
            logger.info("SMS auto-sent to %s", phone)
            return DeliveryResult.SENT
        except Exception as exc:
            logger.warning("Silent delivery to %s failed: %s", phone, exc)

        try:
            await self._channel.open_composer(phone, text)
        except Exception as exc:
            logger.error("Composer fallback for %s failed: %s", phone, exc)
            await self._notices.publish(
                "notice",
                {
                    "level": "error",
                    "title": "SMS Failed",
                    "message": f"Unable to send SMS to {phone} automatically or open the composer.",
                },
            )
            return DeliveryResult.FAILED

        await self._notices.publish(
            "notice",
            {
                "level": "warning",
                "title": "SMS Not Sent Silently",
                "message": f"Auto-send to {phone} failed. SMS composer opened, please press Send.",
            },
        )
        return DeliveryResult.ASSISTED

    async def fan_out(self, contacts: Iterable[ContactEntry], text: str) -> dict[int, DeliveryResult]:
        """Send text to every contact independently. Returns results by contact id."""
        targets = list(contacts)
        results = await asyncio.gather(*(self.deliver(c.phone, text) for c in targets))
        return {c.id: r for c, r in zip(targets, results)}
