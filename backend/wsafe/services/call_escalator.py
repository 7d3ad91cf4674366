"""Call retry and escalation policy.

The dialer cannot report whether a call was answered, so elapsed time stands
in for "unanswered": every call schedules a re-check, and each re-check
either redials the same contact or, once its attempts are used up, moves on
to the next contact in store order. The state (target, attempt) is explicit
and only advances on scheduler ticks.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from wsafe.core.scheduler import Scheduler, TimerHandle
from wsafe.core.sos_policies import CALL_RETRY_SECONDS, MAX_CALL_ATTEMPTS
from wsafe.services.contact_service import ContactEntry

logger = logging.getLogger(__name__)


class Dialer(Protocol):
    async def call(self, phone: str) -> None:
        """Start a call. Fire-and-forget: no answer confirmation."""
        ...


class CallEscalator:
    def __init__(
        self,
        dialer: Dialer,
        contacts: Callable[[], list[ContactEntry]],
        scheduler: Scheduler,
        retry_delay: float = CALL_RETRY_SECONDS,
        max_attempts: int = MAX_CALL_ATTEMPTS,
    ) -> None:
        self._dialer = dialer
        self._contacts = contacts
        self._scheduler = scheduler
        self._retry_delay = retry_delay
        self._max_attempts = max_attempts
        self._timer: TimerHandle | None = None
        self._firing: list[TimerHandle] = []
        self._running = False
        self.target: ContactEntry | None = None
        self.attempt = 0
        self.idle = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def calls_made(self) -> int:
        """Calls placed to the current target (1..max_attempts), 0 when stopped."""
        return self.attempt + 1 if self._running and self.target else 0

    async def start(self, target: ContactEntry) -> None:
        self.cancel()
        self._running = True
        self.target = target
        self.attempt = 0
        self.idle = False
        logger.info("Call escalation started with contact %s", target.id)
        await self._place_call()

    def cancel(self) -> None:
        """Stop escalating and drop any pending or firing re-check."""
        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for handle in self._firing:
            handle.cancel()
        self._firing.clear()
        self.target = None
        self.attempt = 0
        self.idle = False

    async def tick(self) -> None:
        """Re-check after the retry delay: redial, rotate, or go idle."""
        handle, self._timer = self._timer, None
        if handle is not None:
            self._firing.append(handle)
        try:
            if not self._running or self.target is None:
                return

            if self.attempt + 1 < self._max_attempts:
                self.attempt += 1
                await self._place_call()
                return

            alternate = self._next_target(self.target)
            if alternate is None:
                self.idle = True
                logger.info("No alternate contact after %s attempts; escalation idle", self._max_attempts)
                return

            logger.info("Escalating call from contact %s to %s", self.target.id, alternate.id)
            self.target = alternate
            self.attempt = 0
            await self._place_call()
        finally:
            if handle in self._firing:
                self._firing.remove(handle)

    def _next_target(self, current: ContactEntry) -> ContactEntry | None:
        """Next contact after current in store order, wrapping around."""
        contacts = self._contacts()
        ids = [c.id for c in contacts]
        if current.id in ids:
            idx = ids.index(current.id)
            contacts = contacts[idx + 1:] + contacts[:idx]
        for contact in contacts:
            if contact.id != current.id:
                return contact
        return None

    async def _place_call(self) -> None:
        # Re-check is scheduled before dialing so a failed call cannot stall it
        self._timer = self._scheduler.schedule(self._retry_delay, self.tick)
        target = self.target
        logger.info("Calling contact %s (attempt %s/%s)", target.id, self.attempt + 1, self._max_attempts)
        try:
            await self._dialer.call(target.phone)
        except Exception as exc:
            logger.error("Call error: %s", exc)
