"""SOS episode engine.

Owns the IDLE/ACTIVE state machine. A qualifying trigger while idle starts
an episode: fix, activation fan-out, live tracking, call escalation and
auxiliaries. Stand-down cancels the timers, stops the auxiliaries and sends a
single deactivation message. Triggers while active are absorbed.
"""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol, Sequence

from wsafe.core.errors import NoContactsConfigured
from wsafe.core.scheduler import Scheduler
from wsafe.core.sos_policies import (
    ACTIVATION_VIBRATION_PATTERN,
    CALL_RETRY_SECONDS,
    LIVE_UPDATE_INTERVAL_SECONDS,
    LOCATION_TIMEOUT_SECONDS,
    MAX_CALL_ATTEMPTS,
    MIN_CONTACTS_FOR_SOS,
)
from wsafe.services.auxiliary import AuxiliaryControllers
from wsafe.services.call_escalator import CallEscalator, Dialer
from wsafe.services.contact_service import ContactEntry, Preferences
from wsafe.services.live_tracker import LiveTracker
from wsafe.services.location import Fix, LocationProvider
from wsafe.services.messages import MessageComposer
from wsafe.services.notifier import NoticeSink, NotificationDispatcher

logger = logging.getLogger(__name__)


class ContactSource(Protocol):
    def list(self) -> list[ContactEntry]: ...

    def primary(self) -> ContactEntry | None: ...


class TriggerOutcome(str, enum.Enum):
    ACTIVATED = "ACTIVATED"
    ALREADY_ACTIVE = "ALREADY_ACTIVE"
    # Stand-down arrived before activation finished
    STOOD_DOWN = "STOOD_DOWN"


@dataclass(frozen=True)
class TriggerEvent:
    source: str


@dataclass
class Episode:
    active: bool = False
    trigger_source: str | None = None
    started_at: datetime | None = None
    last_fix: Fix | None = None
    tracking_active: bool = False
    call_attempt: int = 0
    current_call_target: ContactEntry | None = None


class EpisodeEngine:
    def __init__(
        self,
        store: ContactSource,
        preferences: Preferences,
        location: LocationProvider,
        dispatcher: NotificationDispatcher,
        dialer: Dialer,
        auxiliary: AuxiliaryControllers,
        notices: NoticeSink,
        scheduler: Scheduler,
        composer: MessageComposer,
        location_timeout: float = LOCATION_TIMEOUT_SECONDS,
        live_interval: float = LIVE_UPDATE_INTERVAL_SECONDS,
        call_retry_delay: float = CALL_RETRY_SECONDS,
        max_call_attempts: int = MAX_CALL_ATTEMPTS,
        vibration_pattern: Sequence[int] = ACTIVATION_VIBRATION_PATTERN,
    ) -> None:
        self._store = store
        self._preferences = preferences
        self._location = location
        self._dispatcher = dispatcher
        self._auxiliary = auxiliary
        self._notices = notices
        self._composer = composer
        self._location_timeout = location_timeout
        self._vibration_pattern = tuple(vibration_pattern)

        self._escalator = CallEscalator(dialer, store.list, scheduler, call_retry_delay, max_call_attempts)
        self._tracker = LiveTracker(location, self._send_live_update, scheduler, live_interval, location_timeout)

        self._episode = Episode()
        # Bumped on every transition; activation steps bail out once it moves
        self._generation = 0
        self._stopping = False
        self._queue: asyncio.Queue[TriggerEvent] = asyncio.Queue()
        self.last_known_fix: Fix | None = None

    # ---------- state ----------

    @property
    def is_active(self) -> bool:
        return self._episode.active

    @property
    def escalator(self) -> CallEscalator:
        return self._escalator

    @property
    def tracker(self) -> LiveTracker:
        return self._tracker

    def snapshot(self) -> Episode:
        """Copy of the current episode for read-only consumers."""
        return dataclasses.replace(
            self._episode,
            tracking_active=self._tracker.active,
            call_attempt=self._escalator.calls_made,
            current_call_target=self._escalator.target,
        )

    def _current(self, generation: int) -> bool:
        return self._generation == generation and self._episode.active

    # ---------- transitions ----------

    async def trigger(self, source: str) -> TriggerOutcome:
        """IDLE -> ACTIVE. Absorbed while active; refused with no contacts.

        Returns STOOD_DOWN when a stand-down lands before activation is done;
        anything this call already switched on is switched off again.
        """
        if self._episode.active:
            logger.info("Trigger %r absorbed: episode already active", source)
            return TriggerOutcome.ALREADY_ACTIVE

        contacts = self._store.list()
        if len(contacts) < MIN_CONTACTS_FOR_SOS:
            logger.warning("Trigger %r refused: no emergency contacts", source)
            await self._notices.publish(
                "contacts.required",
                {"title": "No Contacts", "message": "Please add emergency contacts first!"},
            )
            raise NoContactsConfigured()

        # The guard flips before the first await
        self._generation += 1
        generation = self._generation
        started_at = datetime.now(timezone.utc)
        self._episode = Episode(active=True, trigger_source=source, started_at=started_at)
        logger.warning("SOS episode started: source=%s contacts=%s", source, len(contacts))

        await self._auxiliary.vibrate(self._vibration_pattern)

        fix = await self._fetch_fix()
        if not self._current(generation):
            return TriggerOutcome.STOOD_DOWN
        self._episode.last_fix = fix

        text = self._composer.activation(source, started_at, fix)
        results = await self._dispatcher.fan_out(self._store.list(), text)
        if not self._current(generation):
            return TriggerOutcome.STOOD_DOWN

        self._tracker.start()

        call_target = None
        if self._preferences.auto_call_enabled:
            call_target = self._call_target()
            if call_target is not None:
                await self._escalator.start(call_target)
                if not self._current(generation):
                    return TriggerOutcome.STOOD_DOWN

        recording = await self._auxiliary.start_recording()
        if not self._current(generation):
            await self._release_auxiliaries()
            return TriggerOutcome.STOOD_DOWN
        flashlight = await self._auxiliary.set_illumination(True)
        if not self._current(generation):
            await self._release_auxiliaries()
            return TriggerOutcome.STOOD_DOWN

        await self._notices.publish(
            "episode.activated",
            {
                "trigger_source": source,
                "started_at": started_at.isoformat(),
                "contacts_notified": len(results),
                "location_available": fix is not None,
                "live_tracking": self._tracker.active,
                "call_target_id": call_target.id if call_target else None,
                "recording": recording,
                "flashlight": flashlight,
            },
        )
        return TriggerOutcome.ACTIVATED

    async def stand_down(self) -> bool:
        """ACTIVE -> IDLE. No-op (False) while idle or already standing down."""
        if not self._episode.active or self._stopping:
            return False

        self._stopping = True
        self._generation += 1
        try:
            self._tracker.stop()
            self._escalator.cancel()
            logger.warning("SOS episode standing down (source=%s)", self._episode.trigger_source)

            if self._auxiliary.recording:
                await self._auxiliary.stop_recording()
            if self._auxiliary.flashlight_on:
                await self._auxiliary.set_illumination(False)

            fix = await self._fetch_fix() or self._episode.last_fix
            ended_at = datetime.now(timezone.utc)
            text = self._composer.deactivation(ended_at, fix)
            results = await self._dispatcher.fan_out(self._store.list(), text)
            await self._notices.publish(
                "episode.deactivated",
                {"ended_at": ended_at.isoformat(), "contacts_notified": len(results)},
            )
        finally:
            self._episode = Episode()
            self._stopping = False
        return True

    # ---------- manual controls ----------

    def start_live_tracking(self) -> bool:
        self._tracker.start()
        return self._tracker.active

    def stop_live_tracking(self) -> bool:
        self._tracker.stop()
        return self._tracker.active

    # ---------- event queue ----------

    def post(self, event: TriggerEvent) -> None:
        """Queue a trigger from a detector callback."""
        self._queue.put_nowait(event)

    async def run(self) -> None:
        """Process queued triggers one at a time until cancelled."""
        while True:
            event = await self._queue.get()
            try:
                await self.trigger(event.source)
            except NoContactsConfigured:
                # Refusal already published as a contacts.required notice
                continue
            except Exception:
                logger.exception("Trigger %r failed", event.source)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued trigger has been processed."""
        await self._queue.join()

    # ---------- helpers ----------

    async def _release_auxiliaries(self) -> None:
        """Switch off what an interrupted activation turned on."""
        if self._episode.active and not self._stopping:
            # A newer episode owns the auxiliaries now
            return
        if self._auxiliary.recording:
            await self._auxiliary.stop_recording()
        if self._auxiliary.flashlight_on:
            await self._auxiliary.set_illumination(False)

    def _call_target(self) -> ContactEntry | None:
        primary = self._store.primary()
        if primary is not None:
            return primary
        contacts = self._store.list()
        return contacts[0] if contacts else None

    async def _fetch_fix(self) -> Fix | None:
        try:
            fix = await self._location.get_current_fix(self._location_timeout)
        except Exception as exc:
            logger.warning("Location unavailable: %s", exc)
            return None
        self.last_known_fix = fix
        return fix

    async def _send_live_update(self, fix: Fix) -> None:
        self.last_known_fix = fix
        if self._episode.active:
            self._episode.last_fix = fix
        await self._dispatcher.fan_out(self._store.list(), self._composer.live_update(fix))
