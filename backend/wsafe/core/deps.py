"""FastAPI dependencies."""

from fastapi import Depends, Request

from wsafe.runtime import Runtime
from wsafe.services.episode_engine import EpisodeEngine


def get_runtime(request: Request) -> Runtime:
    """The runtime built at startup."""
    return request.app.state.runtime


def get_engine(runtime: Runtime = Depends(get_runtime)) -> EpisodeEngine:
    return runtime.engine
