"""Health check endpoint."""

from fastapi import APIRouter, Depends

from wsafe.core.deps import get_runtime
from wsafe.core.ws_manager import ws_manager
from wsafe.runtime import Runtime

router = APIRouter(tags=["health"])


@router.get("/health")
def health(runtime: Runtime = Depends(get_runtime)) -> dict:
    """Return service health and whether a device is listening."""
    return {
        "status": "ok",
        "episode_active": runtime.engine.is_active,
        "devices_connected": ws_manager.total_connections,
    }
