"""FastAPI application factory for the mirror room."""

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles

from communication.bus import EventBus
from config import load_config
from internal.health import (
    HealthChecker,
    check_event_loop,
    create_bus_check,
    create_engine_check,
    create_flight_check,
    create_frame_rate_check,
    create_logger_check,
)
from internal.logging import get_logger, parse_level, StructuredLogger, AsyncFileLogger
from utils.crash import create_async_handler
from simulation.engine import SimulationEngine, EVENT_TOPIC, FRAME_TOPIC
from simulation.state import FrameSnapshot
from ui.routes import control, api, health, pointer

VERSION = "1.0.0"
STATIC_DIR = Path(__file__).parent / "static"
RECORDER = "event-recorder"


def format_sse(event, data):
    """Format data as Server-Sent Event."""
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def register_checks(checker, engine, bus, file_logger):
    # name, check, critical
    for name, check_fn, critical in (
        ("event_loop", check_event_loop, True),
        ("event_bus", create_bus_check(bus), True),
        ("simulation_engine", create_engine_check(engine), True),
        ("frame_rate", create_frame_rate_check(engine), False),
        ("flight", create_flight_check(engine), False),
        ("event_log", create_logger_check(file_logger), False),
    ):
        checker.register(name, check_fn, critical=critical)


async def record_events(subscriber, file_logger, log):
    """Copy scene events (launches, hits, reflections) into the event log file."""
    while True:
        event = await subscriber.queue.get()
        if not file_logger.try_log(event.get("kind", "event"), event):
            log.warn("event log full", kind=event.get("kind"))


async def stream_scene(request, bus, engine):
    """Yield the current frame, then every published frame and event, as SSE."""
    name = f"ui-{uuid.uuid4().hex[:8]}"
    subscriber = await bus.subscribe(name, max_queue_size=10, topics=[FRAME_TOPIC, EVENT_TOPIC])
    try:
        snapshot = await engine.get_snapshot()
        yield format_sse(FRAME_TOPIC, snapshot.to_dict())

        while not await request.is_disconnected():
            try:
                item = await asyncio.wait_for(subscriber.queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            if isinstance(item, FrameSnapshot):
                yield format_sse(FRAME_TOPIC, item.to_dict())
            else:
                yield format_sse(EVENT_TOPIC, item)
    finally:
        await bus.unsubscribe(name)


def create_app(config=None):
    """Build the app around one engine, one bus and one event log."""
    config = config or load_config()

    StructuredLogger.configure(min_level=parse_level(config.logging.level))
    log = get_logger(component="app")

    bus = EventBus(queue_size=100, conflate=(FRAME_TOPIC,))
    engine = SimulationEngine(bus=bus, config=config)
    file_logger = AsyncFileLogger(file_path=config.logging.file)
    health_checker = HealthChecker()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("mirror room starting", version=VERSION,
                 room=f"{config.scene.width}x{config.scene.height}")
        asyncio.get_running_loop().set_exception_handler(create_async_handler(log))

        await file_logger.start()
        recorder_sub = await bus.subscribe(RECORDER, max_queue_size=200, topics=[EVENT_TOPIC])
        recorder = asyncio.create_task(record_events(recorder_sub, file_logger, log))
        register_checks(health_checker, engine, bus, file_logger)
        await engine.start()
        log.info("mirror room started", checks=health_checker.names())

        yield

        log.info("mirror room shutting down", tick=engine.tick)
        await engine.stop()
        recorder.cancel()
        try:
            await recorder
        except asyncio.CancelledError:
            pass
        await bus.unsubscribe(RECORDER)
        await file_logger.stop()
        log.info("mirror room stopped", events_written=file_logger.written)

    app = FastAPI(
        title="Mirror Room",
        version=VERSION,
        description="real-time mirror reflection visualization",
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.bus = bus
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    control.init(engine, bus)
    api.init(engine, bus, file_logger)
    health.init(engine, health_checker)
    pointer.init(engine)
    for module in (control, api, health, pointer):
        app.include_router(module.router)

    @app.get("/", response_class=HTMLResponse)
    async def index():
        """Serve the canvas page."""
        return (STATIC_DIR / "index.html").read_text(encoding="utf-8")

    @app.get("/events")
    async def events(request: Request):
        return StreamingResponse(stream_scene(request, bus, engine), media_type="text/event-stream")

    return app
