"""Read-only views of the room: layout, live counters and bus subscribers."""

from fastapi import APIRouter, Depends

from utils.clock import format_timestamp
from ui.auth import verify_basic_auth

router = APIRouter(prefix="/api/v1", tags=["api"])

_engine = None
_bus = None
_file_logger = None


def init(engine, bus, file_logger):
    global _engine, _bus, _file_logger
    _engine = engine
    _bus = bus
    _file_logger = file_logger


@router.get("/scene")
async def scene():
    """Room layout plus every ray and ghost ray of the current frame."""
    snapshot = await _engine.get_snapshot()
    scene = _engine.scene
    # The lists replace the summary's ray counts of the same name
    return {
        **snapshot.summary,
        "timestamp": snapshot.timestamp,
        "tick": snapshot.tick,
        "room": scene.room.to_dict(),
        "rays": [ray.to_dict() for ray in scene.rays],
        "ghost_rays": [ghost.to_dict() for ghost in scene.ghost_rays],
    }


@router.get("/stats")
async def stats(username=Depends(verify_basic_auth)):
    snapshot = await _engine.get_snapshot()
    return {
        "timestamp": format_timestamp(),
        "simulation": {**_engine.describe(snapshot), "paused": _engine.paused},
        "bus": _bus.get_stats(),
        "event_log": _file_logger.get_stats(),
    }


@router.get("/subscribers")
async def subscribers(username=Depends(verify_basic_auth)):
    return await _bus.get_subscriber_info()
