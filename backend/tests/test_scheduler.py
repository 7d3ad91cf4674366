"""Asyncio scheduler tests, alone and driving the episode engine in real time."""

import asyncio
import logging

from wsafe.core.scheduler import AsyncioScheduler
from wsafe.services.auxiliary import AuxiliaryControllers
from wsafe.services.episode_engine import EpisodeEngine
from wsafe.services.notifier import NotificationDispatcher


async def test_callback_runs_after_delay():
    scheduler = AsyncioScheduler()
    fired = []

    async def callback():
        fired.append(True)

    scheduler.schedule(0.01, callback)
    assert scheduler.pending == 1
    assert fired == []

    await asyncio.sleep(0.05)

    assert fired == [True]
    assert scheduler.pending == 0


async def test_cancelled_handle_never_fires():
    scheduler = AsyncioScheduler()
    fired = []

    async def callback():
        fired.append(True)

    handle = scheduler.schedule(0.01, callback)
    handle.cancel()
    await asyncio.sleep(0.05)

    assert fired == []
    assert scheduler.pending == 0


async def test_cancel_all_drops_every_timer():
    scheduler = AsyncioScheduler()
    fired = []

    async def callback():
        fired.append(True)

    for delay in (0.01, 0.02, 0.03):
        scheduler.schedule(delay, callback)
    assert scheduler.pending == 3

    scheduler.cancel_all()
    await asyncio.sleep(0.05)

    assert fired == []
    assert scheduler.pending == 0


async def test_failing_callback_is_logged(caplog):
    scheduler = AsyncioScheduler()

    async def callback():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="wsafe.core.scheduler"):
        scheduler.schedule(0, callback)
        await asyncio.sleep(0.02)

    assert "Scheduled callback failed" in caplog.text
    assert scheduler.pending == 0


# ---------- engine on real timers ----------


class HeldChannel:
    """Channel whose live updates block until released."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.held = asyncio.Event()
        self.release = asyncio.Event()

    async def send_silent(self, phone, text):
        if text.startswith("SOS Alert!"):
            self.held.set()
            await self.release.wait()
        self.sent.append(text)

    async def open_composer(self, phone, text):
        self.sent.append(text)


class HeldDialer:
    """Places the first call, then blocks every redial until released."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.held = asyncio.Event()
        self.release = asyncio.Event()

    async def call(self, phone):
        if self.calls:
            self.held.set()
            await self.release.wait()
        self.calls.append(phone)


def _engine(store, preferences, location, channel, dialer, device, notices, composer, scheduler, **timing):
    return EpisodeEngine(
        store=store,
        preferences=preferences,
        location=location,
        dispatcher=NotificationDispatcher(channel, notices),
        dialer=dialer,
        auxiliary=AuxiliaryControllers(recorder=device, torch=device, vibrator=device, notices=notices),
        notices=notices,
        scheduler=scheduler,
        composer=composer,
        **timing,
    )


async def test_stand_down_cancels_live_update_in_flight(
    store, preferences, location, dialer, device, notices, composer
):
    scheduler = AsyncioScheduler()
    channel = HeldChannel()
    engine = _engine(
        store, preferences, location, channel, dialer, device, notices, composer, scheduler,
        live_interval=0.01, call_retry_delay=10,
    )
    store.add("Mom", "555-0100")

    await engine.trigger("panic button")
    await asyncio.wait_for(channel.held.wait(), 1)

    assert await engine.stand_down() is True
    channel.release.set()
    await asyncio.sleep(0.05)

    assert [t.splitlines()[0] for t in channel.sent] == ["EMERGENCY SOS ALERT!", "PANIC MODE DEACTIVATED"]
    assert dialer.calls == ["555-0100"]
    assert scheduler.pending == 0


async def test_stand_down_cancels_redial_in_flight(
    store, preferences, location, channel, device, notices, composer
):
    scheduler = AsyncioScheduler()
    dialer = HeldDialer()
    engine = _engine(
        store, preferences, location, channel, dialer, device, notices, composer, scheduler,
        live_interval=10, call_retry_delay=0.01,
    )
    store.add("Mom", "555-0100")

    await engine.trigger("panic button")
    await asyncio.wait_for(dialer.held.wait(), 1)

    assert await engine.stand_down() is True
    dialer.release.set()
    await asyncio.sleep(0.05)

    assert dialer.calls == ["555-0100"]
    assert engine.escalator.target is None
    assert scheduler.pending == 0
