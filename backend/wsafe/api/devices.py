"""Device ingress: sensor readings and link events posted by the phone.

Handlers are async so detector callbacks post into the engine queue on the
event loop thread.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, status

from wsafe.core.deps import get_runtime
from wsafe.core.errors import AuxiliaryControlFailed
from wsafe.runtime import Runtime
from wsafe.schemas.device import (
    DetectorResponse,
    ListeningRequest,
    LocationReport,
    MotionBatch,
    SpeechResult,
    WearableConnected,
    WearableData,
    WearableDisconnect,
    WearableStatus,
)
from wsafe.schemas.sos import FixResponse, ToggleResponse

router = APIRouter(prefix="/devices", tags=["devices"])


@router.post("/motion", response_model=DetectorResponse)
async def post_motion(data: MotionBatch, runtime: Runtime = Depends(get_runtime)):
    """Accelerometer samples, oldest first."""
    fired = runtime.shake.fired
    for s in data.samples:
        runtime.motion.push(s.x, s.y, s.z)
    return DetectorResponse(triggered=runtime.shake.fired > fired, shake_count=runtime.shake.count)


@router.post("/speech", response_model=DetectorResponse)
async def post_speech(data: SpeechResult, runtime: Runtime = Depends(get_runtime)):
    """Speech recognition result."""
    fired = runtime.voice.fired
    runtime.speech.push(data.value)
    return DetectorResponse(triggered=runtime.voice.fired > fired)


@router.post("/speech/listening", response_model=ToggleResponse)
async def set_listening(data: ListeningRequest, runtime: Runtime = Depends(get_runtime)):
    """Start or stop voice SOS listening on the device."""
    try:
        if data.listening:
            await runtime.speech.start(data.locale or runtime.config.speech_locale)
        else:
            await runtime.speech.stop()
    except AuxiliaryControlFailed as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return ToggleResponse(enabled=runtime.speech.listening)


@router.post("/wearable", response_model=DetectorResponse)
async def post_wearable(data: WearableData, runtime: Runtime = Depends(get_runtime)):
    """Data read from the wearable's serial link."""
    fired = runtime.wearable.fired
    runtime.link.push(data.data)
    return DetectorResponse(triggered=runtime.wearable.fired > fired)


@router.get("/wearable", response_model=WearableStatus)
def get_wearable(runtime: Runtime = Depends(get_runtime)):
    return WearableStatus(connected=runtime.link.connected, device_name=runtime.link.device_name)


@router.post("/wearable/connected", response_model=WearableStatus)
async def wearable_connected(data: WearableConnected, runtime: Runtime = Depends(get_runtime)):
    runtime.link.mark_connected(data.device_name)
    return WearableStatus(connected=True, device_name=runtime.link.device_name)


@router.post("/wearable/disconnect", response_model=DetectorResponse)
async def wearable_disconnect(
    data: WearableDisconnect | None = Body(default=None),
    runtime: Runtime = Depends(get_runtime),
):
    """Link dropped. Only an unexpected drop triggers an SOS."""
    if data and data.expected:
        runtime.link.disconnect()
        return DetectorResponse(triggered=False)
    fired = runtime.wearable.fired
    runtime.link.connection_lost()
    return DetectorResponse(triggered=runtime.wearable.fired > fired)


@router.post("/location", response_model=FixResponse)
async def post_location(data: LocationReport, runtime: Runtime = Depends(get_runtime)):
    """GPS fix reported by the phone."""
    return runtime.location.report(data.latitude, data.longitude, data.accuracy)
