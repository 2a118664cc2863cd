"""Liveness routes: full component health and a cheap heartbeat for the page."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from internal.health import Status
from utils.clock import format_timestamp

router = APIRouter(prefix="/api/v1", tags=["health"])

_engine = None
_health_checker = None


def init(engine, health_checker):
    global _engine, _health_checker
    _engine = engine
    _health_checker = health_checker


@router.get("/health")
async def health():
    """Run every registered check; 503 when a critical one fails."""
    report = await _health_checker.check()
    code = 503 if report.status == Status.FAIL else 200
    return JSONResponse(content=report.to_dict(), status_code=code)


@router.get("/heartbeat")
async def heartbeat():
    snapshot = await _engine.get_snapshot()
    return {"status": "ok", "timestamp": format_timestamp(), **_engine.describe(snapshot)}
