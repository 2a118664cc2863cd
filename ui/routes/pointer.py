"""Pointer input from the canvas page."""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(prefix="/api/v1/input", tags=["input"])

# Set by app.py
_engine = None


def init(engine):
    """Initialize with the engine reference."""
    global _engine
    _engine = engine


class DragMove(BaseModel):
    x: float
    gesture: Optional[int] = None


class Release(BaseModel):
    gesture: Optional[int] = None


@router.post("/press")
async def press():
    """Pointer went down; later drags and the release quote the returned gesture."""
    return {"gesture": await _engine.press()}


@router.post("/drag")
async def drag(move: DragMove):
    """Pointer moved while dragging; out-of-range or stale positions are ignored."""
    accepted = await _engine.drag(move.x, gesture=move.gesture)
    return {"accepted": accepted, "sight_x": _engine.scene.sight_ball.x}


@router.post("/release")
async def release(end: Optional[Release] = None):
    """Pointer released; relaunches the particle if the sight ball moved."""
    launched = await _engine.release(gesture=end.gesture if end else None)
    return {"launched": launched, "heading": _engine.scene.particle.heading}
