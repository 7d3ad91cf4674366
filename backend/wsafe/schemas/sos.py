"""SOS episode schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class FixResponse(BaseModel):
    lat: float
    lng: float
    accuracy: float | None
    timestamp: datetime

    model_config = {"from_attributes": True}


class CallTargetResponse(BaseModel):
    id: int
    name: str
    phone: str

    model_config = {"from_attributes": True}


class EpisodeResponse(BaseModel):
    active: bool
    trigger_source: str | None
    started_at: datetime | None
    last_fix: FixResponse | None
    tracking_active: bool
    call_attempt: int = Field(ge=0, le=3)
    current_call_target: CallTargetResponse | None

    model_config = {"from_attributes": True}


class TriggerResponse(BaseModel):
    outcome: str  # ACTIVATED | ALREADY_ACTIVE | STOOD_DOWN
    episode: EpisodeResponse


class StandDownResponse(BaseModel):
    stood_down: bool
    episode: EpisodeResponse


class ToggleRequest(BaseModel):
    enabled: bool | None = Field(default=None, description="Omit to flip the current state")


class ToggleResponse(BaseModel):
    enabled: bool


class HelplineResponse(BaseModel):
    name: str
    number: str


class NearbyResponse(BaseModel):
    kind: str
    url: str
