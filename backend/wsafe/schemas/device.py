"""Device ingress schemas: sensor readings posted by the phone."""

from pydantic import BaseModel, Field


class MotionSample(BaseModel):
    x: float
    y: float
    z: float


class MotionBatch(BaseModel):
    samples: list[MotionSample] = Field(..., min_length=1, max_length=500)


class SpeechResult(BaseModel):
    # Alternatives, best first
    value: list[str] = Field(default_factory=list)


class ListeningRequest(BaseModel):
    listening: bool
    locale: str | None = None


class WearableData(BaseModel):
    data: str


class WearableConnected(BaseModel):
    device_name: str | None = None


class LocationReport(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)


class DetectorResponse(BaseModel):
    triggered: bool
    shake_count: int | None = None


class WearableDisconnect(BaseModel):
    # True when the user closed the link on purpose
    expected: bool = False


class WearableStatus(BaseModel):
    connected: bool
    device_name: str | None
