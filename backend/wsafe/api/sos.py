"""SOS episode API."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, HTTPException, status

from wsafe.core.deps import get_engine, get_runtime
from wsafe.core.errors import NoContactsConfigured
from wsafe.core.sos_policies import HELPLINES, SOURCE_MANUAL
from wsafe.runtime import Runtime
from wsafe.schemas.sos import (
    EpisodeResponse,
    HelplineResponse,
    NearbyResponse,
    StandDownResponse,
    ToggleRequest,
    ToggleResponse,
    TriggerResponse,
)
from wsafe.services.episode_engine import EpisodeEngine
from wsafe.services.location import nearby_search_link

router = APIRouter(tags=["sos"])


def _episode(engine: EpisodeEngine) -> EpisodeResponse:
    return EpisodeResponse.model_validate(engine.snapshot())


@router.get("/sos/status", response_model=EpisodeResponse)
def get_status(engine: EpisodeEngine = Depends(get_engine)):
    """Current episode state."""
    return _episode(engine)


@router.post("/sos", response_model=TriggerResponse)
async def trigger_manual(engine: EpisodeEngine = Depends(get_engine)):
    """Panic button. Absorbed while an episode is active."""
    try:
        outcome = await engine.trigger(SOURCE_MANUAL)
    except NoContactsConfigured as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return TriggerResponse(outcome=outcome.value, episode=_episode(engine))


@router.post("/sos/stand-down", response_model=StandDownResponse)
async def stand_down(engine: EpisodeEngine = Depends(get_engine)):
    """Stop the episode and tell every contact. No-op when idle."""
    stood_down = await engine.stand_down()
    return StandDownResponse(stood_down=stood_down, episode=_episode(engine))


@router.post("/sos/tracking", response_model=ToggleResponse)
async def toggle_tracking(
    data: ToggleRequest | None = Body(default=None),
    engine: EpisodeEngine = Depends(get_engine),
):
    """Start or stop live location updates by hand."""
    enable = data.enabled if data and data.enabled is not None else not engine.tracker.active
    active = engine.start_live_tracking() if enable else engine.stop_live_tracking()
    return ToggleResponse(enabled=active)


@router.post("/sos/flashlight", response_model=ToggleResponse)
async def toggle_flashlight(
    data: ToggleRequest | None = Body(default=None),
    runtime: Runtime = Depends(get_runtime),
):
    aux = runtime.auxiliary
    if data and data.enabled is not None:
        return ToggleResponse(enabled=await aux.set_illumination(data.enabled))
    return ToggleResponse(enabled=await aux.toggle_flashlight())


@router.post("/sos/recording", response_model=ToggleResponse)
async def toggle_recording(
    data: ToggleRequest | None = Body(default=None),
    runtime: Runtime = Depends(get_runtime),
):
    aux = runtime.auxiliary
    if data and data.enabled is not None:
        on = await aux.start_recording() if data.enabled else await aux.stop_recording()
        return ToggleResponse(enabled=on)
    return ToggleResponse(enabled=await aux.toggle_recording())


@router.get("/helplines", response_model=list[HelplineResponse])
def list_helplines():
    """National emergency helplines."""
    return [HelplineResponse(name=name, number=number) for name, number in HELPLINES]


@router.get("/nearby/{kind}", response_model=NearbyResponse)
def nearby(kind: str, runtime: Runtime = Depends(get_runtime)):
    """Map search for police stations or hospitals around the last known fix."""
    fix = runtime.location.latest or runtime.engine.last_known_fix
    if fix is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Please enable location services!")
    try:
        url = nearby_search_link(kind, fix)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return NearbyResponse(kind=kind, url=url)
