"""Pytest fixtures."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from wsafe.core.config import settings
from wsafe.core.errors import AuxiliaryControlFailed, LocationUnavailable, NotificationDeliveryFailed
from wsafe.db.base import Base
from wsafe.db.session import get_db
from wsafe.main import app
from wsafe.models import AppPreferences, Contact  # noqa: F401 - register for create_all
from wsafe.services.auxiliary import AuxiliaryControllers
from wsafe.services.contact_service import ContactStore, Preferences
from wsafe.services.episode_engine import EpisodeEngine
from wsafe.services.location import Fix
from wsafe.services.messages import MessageComposer
from wsafe.services.notifier import NotificationDispatcher

TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIX_TIME = datetime(2026, 3, 8, 21, 15, 0, tzinfo=timezone.utc)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# ---------- fakes ----------


class FakeHandle:
    def __init__(self, due: float, callback) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock: timers fire only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self.handles: list[FakeHandle] = []

    def schedule(self, delay, callback):
        handle = FakeHandle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = sorted((h for h in self.pending if h.due <= target), key=lambda h: h.due)
            if not due:
                break
            handle = due[0]
            self.now = handle.due
            handle.fired = True
            await handle.callback()
        self.now = target


class FakeLocation:
    def __init__(self, fix: Fix | None = None) -> None:
        self.fix = fix
        self.requests = 0

    async def get_current_fix(self, timeout: float) -> Fix:
        self.requests += 1
        if self.fix is None:
            raise LocationUnavailable("GPS timeout")
        return self.fix


class FakeChannel:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.composed: list[tuple[str, str]] = []
        self.silent_failures: set[str] = set()
        self.composer_failures: set[str] = set()

    async def send_silent(self, phone: str, text: str) -> None:
        if phone in self.silent_failures:
            raise NotificationDeliveryFailed(phone, "radio off")
        self.sent.append((phone, text))

    async def open_composer(self, phone: str, text: str) -> None:
        if phone in self.composer_failures:
            raise NotificationDeliveryFailed(phone, "no composer")
        self.composed.append((phone, text))

    def texts_to(self, phone: str) -> list[str]:
        return [t for p, t in self.sent if p == phone]


class FakeDialer:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fail = False

    async def call(self, phone: str) -> None:
        self.calls.append(phone)
        if self.fail:
            raise RuntimeError("dialer unavailable")


class FakeDevice:
    """Recorder, torch and vibrator in one."""

    def __init__(self) -> None:
        self.actions: list[str] = []
        self.fail = False

    async def _act(self, action: str) -> None:
        if self.fail:
            raise AuxiliaryControlFailed(f"{action} unavailable")
        self.actions.append(action)

    async def start_recording(self) -> None:
        await self._act("record:on")

    async def stop_recording(self) -> None:
        await self._act("record:off")

    async def set_illumination(self, on: bool) -> None:
        await self._act(f"torch:{'on' if on else 'off'}")

    async def vibrate(self, pattern) -> None:
        await self._act("vibrate")


class FakeNotices:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    async def publish(self, event: str, data) -> None:
        self.events.append((event, data))

    def named(self, event: str) -> list[object]:
        return [d for e, d in self.events if e == event]


# ---------- fixtures ----------


@pytest.fixture
def setup_db():
    """Fresh tables for each test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory(setup_db):
    return TestingSessionLocal


@pytest.fixture
def store(session_factory):
    return ContactStore(session_factory)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def location():
    return FakeLocation(Fix(lat=10, lng=20, accuracy=5, timestamp=FIX_TIME))


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def dialer():
    return FakeDialer()


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def notices():
    return FakeNotices()


@pytest.fixture
def preferences():
    return Preferences(auto_call_enabled=True)


@pytest.fixture
def composer():
    return MessageComposer(
        map_service_url="https://maps.google.com/",
        app_signature="W-Safe Pro",
        live_interval_seconds=10,
    )


@pytest.fixture
def sos_engine(store, preferences, location, channel, dialer, device, notices, scheduler, composer):
    """Episode engine wired to fakes and the SQLite contact store."""
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
    )


@pytest.fixture
def client(setup_db, monkeypatch):
    """Test client with overridden DB and a short location wait."""
    monkeypatch.setattr(settings, "location_timeout_seconds", 0.05)
    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = TestingSessionLocal
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    app.state.session_factory = None
