"""Preferences API: auto-call toggle."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wsafe.core.deps import get_runtime
from wsafe.db.session import get_db
from wsafe.runtime import Runtime
from wsafe.schemas.settings import PreferencesResponse, PreferencesUpdate
from wsafe.services.contact_service import get_auto_call_enabled, get_primary

router = APIRouter(tags=["settings"])


def _response(db: Session) -> PreferencesResponse:
    primary = get_primary(db)
    enabled = get_auto_call_enabled(db)
    db.commit()
    return PreferencesResponse(auto_call_enabled=enabled, primary_contact_id=primary.id if primary else None)


@router.get("/settings/me", response_model=PreferencesResponse)
def get_my_settings(db: Session = Depends(get_db)):
    """Current preferences."""
    return _response(db)


@router.put("/settings/me", response_model=PreferencesResponse)
def update_my_settings(
    data: PreferencesUpdate,
    db: Session = Depends(get_db),
    runtime: Runtime = Depends(get_runtime),
):
    """Update preferences. Saved immediately and applied to the next episode."""
    if data.auto_call_enabled is not None:
        runtime.preferences.auto_call_enabled = data.auto_call_enabled
        runtime.preferences.save(runtime.session_factory)
    return _response(db)
