import asyncio
import time
from config import load_config
from internal.logging import get_logger
from simulation.scene import MirrorScene
from simulation.state import FrameSnapshot
from utils.clock import FrameClock, elapsed_ms

FRAME_TOPIC = "frame"
EVENT_TOPIC = "event"

class EngineState:
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"

class SimulationEngine:
    """Runs the mirror scene at a fixed frame rate and publishes every frame.

    Pointer input goes through ``press``, ``drag`` and ``release``, which take
    the same lock as a frame, so input always lands between two frames. A
    gesture number handed out by ``press`` ties drags to one pointer gesture:
    once that gesture is released, a drag still carrying its number is stale
    and ignored.
    """

    def __init__(self, bus, config=None):
        self.bus = bus
        self.config = config or load_config()
        self._lock = asyncio.Lock()
        self._log = get_logger(component="engine")
        self.tick = 0
        self.sim_time = 0.0
        self.last_frame_ms = 0.0
        self.launched_at = 0
        self._state = EngineState.STOPPED
        self.scene = None
        self.clock = FrameClock(self.config.simulation.frame_interval)
        self._task = None
        self._stop = asyncio.Event()
        self._last_publish_tick = -1
        self._dirty = False
        self._gesture = 0
        self._open_gesture = None
        self.reset()

    @property
    def paused(self):
        return self._state == EngineState.PAUSED

    @property
    def state(self):
        return self._state

    def reset(self):
        self.tick = 0
        self.sim_time = 0.0
        self.launched_at = 0
        self._last_publish_tick = -1
        self.scene = MirrorScene.from_config(self.config)

    async def rebuild(self):
        async with self._lock:
            self.reset()
        self._log.info("scene rebuilt")

    async def start(self):
        if self._task:
            return
        self._stop.clear()
        self._state = EngineState.RUNNING
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None
        self._state = EngineState.STOPPED
        await self.bus.publish({"kind": "engine_stopped", "tick": self.tick}, topic=EVENT_TOPIC)

    async def pause(self):
        async with self._lock:
            self._state = EngineState.PAUSED
            self._log.info("engine paused", tick=self.tick)

    async def resume(self):
        async with self._lock:
            self._state = EngineState.RUNNING
            self._log.info("engine resumed", tick=self.tick)

    async def get_snapshot(self):
        async with self._lock:
            return FrameSnapshot.capture(self.tick, self.sim_time, self.scene)

    def describe(self, snapshot):
        """Counters shared by the heartbeat and the stats route."""
        summary = snapshot.summary
        return {
            "engine_state": self._state,
            "tick": snapshot.tick,
            "sim_time_s": snapshot.sim_time_s,
            "last_frame_ms": self.last_frame_ms,
            "particle": summary["particle"]["motion"],
            "rays": summary["rays"],
            "ghost_rays": summary["ghost_rays"],
            "diamond_hit": summary["diamond_hit"],
            "frames": self.clock.stats(),
        }

    async def press(self):
        """Open a new pointer gesture and return its number."""
        async with self._lock:
            self._gesture += 1
            self._open_gesture = self._gesture
            return self._gesture

    def _is_stale(self, gesture):
        return gesture is not None and gesture != self._open_gesture

    async def drag(self, x, gesture=None):
        async with self._lock:
            if self._is_stale(gesture):
                self._log.debug("stale drag ignored", x=x, gesture=gesture)
                return False
            accepted = self.scene.drag_move(x)
            self._dirty = self._dirty or accepted
        if accepted:
            self._log.debug("sight moved", x=x)
        return accepted

    def _launch(self):
        launched = self.scene.drag_end()
        # Release also clears the diamond hit, so the frame changes either way
        self._dirty = True
        if launched:
            self.launched_at = self.tick
        return launched, {"kind": "launched", "tick": self.tick, "heading": self.scene.particle.heading,
                          "sight_x": self.scene.sight_ball.x}

    async def _announce_launch(self, event):
        self._log.info("particle launched", heading=round(event["heading"], 3), tick=event["tick"])
        await self.bus.publish(event, topic=EVENT_TOPIC)

    async def release(self, gesture=None):
        async with self._lock:
            if self._is_stale(gesture):
                return False
            self._open_gesture = None
            launched, event = self._launch()
        if launched:
            await self._announce_launch(event)
        return launched

    async def aim(self, x):
        """Drag the sight ball to ``x`` and release it before the next frame."""
        async with self._lock:
            if not self.scene.drag_move(x):
                return False
            launched, event = self._launch()
        if launched:
            await self._announce_launch(event)
        return launched

    def step(self):
        """Run one frame of the scene. Returns the transition event, if any."""
        started = time.perf_counter()
        transition = self.scene.step()
        self.tick += 1
        self.sim_time += self.config.simulation.frame_interval
        self.last_frame_ms = elapsed_ms(started)
        if transition is None:
            return None
        particle = self.scene.particle
        return {"kind": transition, "tick": self.tick, "x": particle.x, "y": particle.y,
                "heading": particle.heading, "rays": len(self.scene.rays)}

    async def _loop(self):
        self.clock = FrameClock(self.config.simulation.frame_interval)
        self._log.info("engine start", dt=self.clock.interval)

        while not self._stop.is_set():
            wait_time = self.clock.until_next()
            if wait_time > 0:
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=wait_time)
                    break
                except asyncio.TimeoutError:
                    pass
            self.clock.advance()

            event = None
            try:
                async with self._lock:
                    if self._state == EngineState.RUNNING:
                        event = self.step()
                    snapshot = FrameSnapshot.capture(self.tick, self.sim_time, self.scene)
                    dirty, self._dirty = self._dirty, False
            except Exception as exc:
                self._log.error("tick fail", error=exc, tick=self.tick)
                continue

            if event:
                self._log.debug("transition", **event)
                await self.bus.publish(event, topic=EVENT_TOPIC)

            # Publish on a new tick or after input; a paused, untouched scene stays quiet
            if dirty or self.tick != self._last_publish_tick:
                await self.bus.publish(snapshot, topic=FRAME_TOPIC)
                self._last_publish_tick = self.tick

        self._log.info("engine stop", tick=self.tick)
