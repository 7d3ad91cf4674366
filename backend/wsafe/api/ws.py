"""WebSocket endpoint for the phone: device commands out, notices out."""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from wsafe.core.config import settings
from wsafe.core.ws_manager import ws_manager

logger = logging.getLogger(__name__)

router = APIRouter()


def _authorized(token: str | None) -> bool:
    if not settings.device_token:
        return True
    return token is not None and secrets.compare_digest(token, settings.device_token)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Device connects with ?token=<device_token> when one is configured.
    Server pushes: sms.send, sms.compose, call.place, recorder.start,
    recorder.stop, torch.set, vibrate, speech.start, speech.stop,
    episode.activated, episode.deactivated, contacts.required, notice
    """
    if not _authorized(websocket.query_params.get("token")):
        await websocket.close(code=4003, reason="Invalid device token")
        return

    await ws_manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            # Echo pong for heartbeat
            if data == "ping":
                await websocket.send_text('{"event":"pong"}')
    except WebSocketDisconnect:
        pass
    finally:
        ws_manager.disconnect(websocket)
