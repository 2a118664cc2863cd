"""Component health for the mirror room server.

Each check is an async callable returning a ``CheckResult``. The checker runs
them in registration order and caches the combined report for ``ttl`` seconds
so that polling pages cannot drive the checks faster than that.
"""

import asyncio
import time
from enum import Enum
from internal.errors import HealthCheckError
from utils.clock import format_timestamp

class Status(Enum):
    OK = "healthy"
    DEGRADED = "degraded"
    FAIL = "unhealthy"

class CheckResult:
    __slots__ = ("name", "status", "msg")

    def __init__(self, name, status, msg=""):
        self.name = name
        self.status = status
        self.msg = msg

    def to_dict(self):
        return {"name": self.name, "status": self.status.value, "msg": self.msg}

class HealthReport:
    __slots__ = ("status", "checks", "uptime", "timestamp")

    def __init__(self, status, checks, uptime=0):
        self.status = status
        self.checks = checks
        self.uptime = uptime
        self.timestamp = format_timestamp()

    @classmethod
    def combine(cls, outcomes, uptime):
        """Worst critical result wins; non-critical failures only degrade."""
        status = Status.OK
        for result, critical in outcomes:
            if result.status == Status.FAIL and critical:
                status = Status.FAIL
            elif result.status != Status.OK and status == Status.OK:
                status = Status.DEGRADED
        return cls(status, [result for result, _ in outcomes], uptime)

    def to_dict(self):
        return {"status": self.status.value,
                "timestamp": self.timestamp,
                "uptime": round(self.uptime, 1),
                "checks": [check.to_dict() for check in self.checks]}

class HealthChecker:
    def __init__(self, ttl=1.0, timeout=5.0):
        self._checks = {}
        self._cache = None
        self._cache_time = 0
        self._ttl = ttl
        self._timeout = timeout
        self._started = time.time()

    def register(self, name, check_fn, critical=True):
        if name in self._checks:
            raise HealthCheckError("check already registered", component=name)
        self._checks[name] = (check_fn, critical)

    def names(self):
        return list(self._checks)

    async def _run_one(self, name, check_fn):
        try:
            return await asyncio.wait_for(check_fn(), timeout=self._timeout)
        except asyncio.TimeoutError:
            return CheckResult(name, Status.FAIL, "timeout")
        except Exception as exc:
            return CheckResult(name, Status.FAIL, str(exc))

    async def check(self):
        now = time.time()
        if self._cache and now - self._cache_time < self._ttl:
            return self._cache

        outcomes = []
        for name, (check_fn, critical) in self._checks.items():
            outcomes.append((await self._run_one(name, check_fn), critical))

        self._cache = HealthReport.combine(outcomes, now - self._started)
        self._cache_time = now
        return self._cache


async def check_event_loop():
    await asyncio.sleep(0)
    return CheckResult("loop", Status.OK)

def create_bus_check(bus, max_drop_ratio=0.1):
    async def check():
        stats = bus.get_stats()
        published = stats["total_published"]
        # Viewers that cannot keep up with the frame rate show up as drops
        if published and stats["total_dropped"] / published > max_drop_ratio:
            return CheckResult("bus", Status.DEGRADED, f"drops {stats['total_dropped']}/{published}")
        return CheckResult("bus", Status.OK, f"{stats['subscriber_count']}sub")
    return check

def create_engine_check(engine, threshold=5.0):
    """FAIL when a running engine has not advanced a frame for ``threshold`` seconds."""
    seen = {"tick": None, "at": time.time()}

    async def check():
        snapshot = await engine.get_snapshot()
        now = time.time()

        if engine.state == "stopped":
            return CheckResult("engine", Status.DEGRADED, "stopped")
        if engine.state == "paused":
            seen["tick"], seen["at"] = snapshot.tick, now
            return CheckResult("engine", Status.OK, f"paused@{snapshot.tick}")
        if snapshot.tick == seen["tick"] and now - seen["at"] > threshold:
            return CheckResult("engine", Status.FAIL, f"stuck@{snapshot.tick}")

        seen["tick"], seen["at"] = snapshot.tick, now
        return CheckResult("engine", Status.OK, f"t{snapshot.tick}")
    return check

def create_frame_rate_check(engine, max_overrun_ratio=0.2):
    """DEGRADED when too many frames started after their slot."""
    async def check():
        stats = engine.clock.stats()
        frames, overruns = stats["frames"], stats["overruns"]
        if frames and overruns / frames > max_overrun_ratio:
            return CheckResult("frames", Status.DEGRADED, f"late {overruns}/{frames}")
        return CheckResult("frames", Status.OK, f"{engine.last_frame_ms}ms")
    return check

def create_flight_check(engine, max_ticks=None):
    """DEGRADED when the particle has been moving longer than any path in the room allows.

    Every flight ends at the diamond, the wall or the room edge, so a particle
    still moving after ``max_ticks`` frames means a guard was missed.
    """
    async def check():
        snapshot = await engine.get_snapshot()
        particle = snapshot.summary["particle"]
        if particle["motion"] != "moving":
            return CheckResult("flight", Status.OK, particle["motion"])

        limit = max_ticks
        if limit is None:
            scene = engine.config.scene
            limit = int(4 * (scene.width + scene.height) / engine.config.simulation.particle_speed)
        flown = snapshot.tick - engine.launched_at
        if flown > limit:
            return CheckResult("flight", Status.DEGRADED, f"runaway {flown}t")
        return CheckResult("flight", Status.OK, f"moving {flown}t")
    return check

def create_logger_check(logger):
    async def check():
        queued, capacity = logger.queue.qsize(), logger.queue.maxsize
        if queued / capacity > 0.9:
            return CheckResult("log", Status.DEGRADED, f"{queued}/{capacity}")
        if logger.dropped:
            return CheckResult("log", Status.DEGRADED, f"{logger.dropped} dropped")
        return CheckResult("log", Status.OK, f"{logger.written}w")
    return check
