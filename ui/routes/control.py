"""Operator routes: freeze, resume, rebuild the room or fire a scripted launch."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from simulation.engine import EVENT_TOPIC
from ui.auth import verify_basic_auth
from utils.clock import format_timestamp

router = APIRouter(prefix="/api/v1/control", tags=["control"])

_engine = None
_bus = None


def init(engine, bus):
    global _engine, _bus
    _engine = engine
    _bus = bus


class Aim(BaseModel):
    x: float


async def _announce(kind, operator, **fields):
    event = {"kind": kind, "tick": _engine.tick, "operator": operator,
             "timestamp": format_timestamp(), **fields}
    await _bus.publish(event, topic=EVENT_TOPIC)
    return {"ok": True, "tick": _engine.tick, **fields}


@router.post("/pause")
async def pause(operator=Depends(verify_basic_auth)):
    await _engine.pause()
    return await _announce("paused", operator)


@router.post("/resume")
async def resume(operator=Depends(verify_basic_auth)):
    await _engine.resume()
    return await _announce("resumed", operator)


@router.post("/reset")
async def reset(operator=Depends(verify_basic_auth)):
    """Rebuild the room from config; every ray and ghost is cleared."""
    await _engine.rebuild()
    return await _announce("reset", operator)


@router.post("/aim")
async def aim(target: Aim, operator=Depends(verify_basic_auth)):
    """Move the sight ball to ``x`` and launch in one step, as a drag and release would."""
    launched = await _engine.aim(target.x)
    return await _announce("aimed", operator, x=target.x, launched=launched,
                           heading=_engine.scene.particle.heading)
