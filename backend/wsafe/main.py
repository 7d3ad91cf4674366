"""wsafe FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from wsafe.api import contacts, devices, health, sos, ws
from wsafe.api import settings as settings_api
from wsafe.core.config import settings
from wsafe.core.ws_manager import ws_manager
from wsafe.db.session import SessionLocal
from wsafe.runtime import build_runtime

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema comes from `alembic upgrade head`; tests swap in their own session factory
    session_factory = getattr(app.state, "session_factory", None) or SessionLocal

    runtime = build_runtime(settings, session_factory, ws_manager)
    app.state.runtime = runtime
    await runtime.start()
    try:
        yield
    finally:
        await runtime.stop()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(contacts.router)
app.include_router(settings_api.router)
app.include_router(sos.router)
app.include_router(devices.router)
app.include_router(ws.router)
