# backend/streamspawn/routes/admin.py
"""
Admin API Routes

Operator endpoints for a running server:
- Configuration hot-reload
- Synthetic test events for each kind
- Status (target, enabled kinds, online players, queue depth)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from ..config import ConfigError
from ..engine import EventKind, StreamEngine
from ..engine.payloads import resolve_kind_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ============================================================================
# Dependencies
# ============================================================================

def get_engine_from_request(request: Request) -> StreamEngine:
    """Get the StreamEngine from app.state."""
    engine = getattr(request.app.state, "stream_engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stream engine not initialized"
        )
    return engine


# ============================================================================
# Response Models
# ============================================================================

class ReloadResponse(BaseModel):
    status: str
    message: str


class TriggerResponse(BaseModel):
    status: str
    event_type: str
    data: dict


class StatusResponse(BaseModel):
    target_mode: str
    target_player: str | None
    enabled_events: list[str]
    online_players: list[str]
    pending_events: int


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/reload", response_model=ReloadResponse)
async def reload_config(engine: StreamEngine = Depends(get_engine_from_request)):
    """Re-read the configuration file."""
    try:
        engine.store.reload()
    except ConfigError as e:
        logger.error("Config reload failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )
    return ReloadResponse(status="success", message="Configuration reloaded")


@router.post("/test/{event_name}", response_model=TriggerResponse)
async def trigger_test_event(
    event_name: str,
    engine: StreamEngine = Depends(get_engine_from_request),
):
    """Queue a sample event. Accepts wire names and the aliases sub, gift and bits."""
    kind = resolve_kind_name(event_name)
    if kind is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown event type: {event_name}. "
                   "Available events: subscribe, gift, cheer, raid, follow",
        )
    event = engine.submit_sample(kind)
    return TriggerResponse(status="success", event_type=event.event_type, data=dict(event.fields))


@router.get("/status", response_model=StatusResponse)
async def get_status(engine: StreamEngine = Depends(get_engine_from_request)):
    config = engine.store.snapshot()
    enabled = [
        kind.value for kind in EventKind
        if config.get_bool(f"{kind.config_section}.enabled", False)
    ]
    return StatusResponse(
        target_mode=config.get_str("target.mode", "streamer"),
        target_player=config.get_str("target.streamer_username"),
        enabled_events=enabled,
        online_players=[a.name for a in engine.adapter.list_online_actors()],
        pending_events=engine.pending,
    )
