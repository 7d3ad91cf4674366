"""Wires collaborators, detectors and the episode engine together."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import sessionmaker

from wsafe.core.config import Settings
from wsafe.core.scheduler import AsyncioScheduler, Scheduler
from wsafe.core.sos_policies import LIVE_UPDATE_INTERVAL_SECONDS
from wsafe.core.ws_manager import ConnectionManager
from wsafe.services.auxiliary import AuxiliaryControllers
from wsafe.services.contact_service import ContactStore, Preferences
from wsafe.services.device_bridge import DeviceBridge
from wsafe.services.episode_engine import EpisodeEngine
from wsafe.services.location import ReportedLocationProvider
from wsafe.services.messages import MessageComposer
from wsafe.services.notifier import NotificationChannel, NotificationDispatcher
from wsafe.services.sms_gateway import HttpSmsGateway
from wsafe.services.streams import DeviceLinkStream, MotionStream, SpeechStream, Unsubscribe
from wsafe.services.triggers import ShakeDetector, VoiceDetector, WearableDetector

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    config: Settings
    session_factory: sessionmaker
    store: ContactStore
    preferences: Preferences
    location: ReportedLocationProvider
    bridge: DeviceBridge
    auxiliary: AuxiliaryControllers
    motion: MotionStream
    speech: SpeechStream
    link: DeviceLinkStream
    shake: ShakeDetector
    voice: VoiceDetector
    wearable: WearableDetector
    engine: EpisodeEngine
    scheduler: Scheduler
    _unsubscribers: list[Unsubscribe] = field(default_factory=list)
    _consumer: asyncio.Task | None = None

    async def start(self) -> None:
        self._unsubscribers = [
            self.shake.attach(self.motion),
            self.voice.attach(self.speech),
            self.wearable.attach(self.link),
        ]
        self._consumer = asyncio.get_running_loop().create_task(self.engine.run())
        logger.info("Runtime started")

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.engine.tracker.stop()
        self.engine.escalator.cancel()
        if isinstance(self.scheduler, AsyncioScheduler):
            self.scheduler.cancel_all()
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
        logger.info("Runtime stopped")


def build_runtime(
    config: Settings,
    session_factory: sessionmaker,
    manager: ConnectionManager,
    scheduler: Scheduler | None = None,
) -> Runtime:
    scheduler = scheduler or AsyncioScheduler()
    store = ContactStore(session_factory)
    preferences = Preferences.load(session_factory)
    location = ReportedLocationProvider()
    bridge = DeviceBridge(manager)

    channel: NotificationChannel = bridge
    if config.sms_gateway_url:
        channel = HttpSmsGateway(
            config.sms_gateway_url,
            fallback=bridge,
            token=config.sms_gateway_token,
            timeout=config.sms_gateway_timeout_seconds,
        )
        logger.info("Silent SMS via gateway %s", config.sms_gateway_url)

    auxiliary = AuxiliaryControllers(recorder=bridge, torch=bridge, vibrator=bridge, notices=manager)
    engine = EpisodeEngine(
        store=store,
        preferences=preferences,
        location=location,
        dispatcher=NotificationDispatcher(channel, manager),
        dialer=bridge,
        auxiliary=auxiliary,
        notices=manager,
        scheduler=scheduler,
        composer=MessageComposer(
            map_service_url=config.map_service_url,
            app_signature=config.app_signature,
            live_interval_seconds=LIVE_UPDATE_INTERVAL_SECONDS,
        ),
        location_timeout=config.location_timeout_seconds,
    )

    return Runtime(
        config=config,
        session_factory=session_factory,
        store=store,
        preferences=preferences,
        location=location,
        bridge=bridge,
        auxiliary=auxiliary,
        motion=MotionStream(),
        speech=SpeechStream(recognizer=bridge),
        link=DeviceLinkStream(),
        shake=ShakeDetector(engine.post),
        voice=VoiceDetector(engine.post),
        wearable=WearableDetector(engine.post),
        engine=engine,
        scheduler=scheduler,
    )
