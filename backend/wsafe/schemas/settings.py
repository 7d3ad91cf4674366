"""Preference schemas."""

from pydantic import BaseModel


class PreferencesUpdate(BaseModel):
    auto_call_enabled: bool | None = None


class PreferencesResponse(BaseModel):
    auto_call_enabled: bool
    primary_contact_id: int | None
