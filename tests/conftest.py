"""Pytest fixtures for all tests."""

import pytest
from httpx import AsyncClient, ASGITransport

from ui.app import create_app
from communication.bus import EventBus
from simulation.engine import SimulationEngine
from simulation.scene import MirrorScene
from config import Config, SceneConfig, SimulationConfig


def run_until(scene, wanted=None, limit=2000):
    """Step the scene until a transition fires (or the wanted one). Returns it."""
    for _ in range(limit):
        transition = scene.step()
        if transition is not None and (wanted is None or transition == wanted):
            return transition
    raise AssertionError(f"no {wanted or 'transition'} within {limit} frames")


def aim(scene, x):
    """Drag the sight ball to x and let go."""
    assert scene.drag_move(x)
    assert scene.drag_end()


@pytest.fixture
def config():
    """Reference room layout."""
    return Config()


@pytest.fixture
def scene(config):
    """Create a fresh mirror room."""
    return MirrorScene.from_config(config)


@pytest.fixture
def clear_scene():
    """Room with the diamond moved out of the straight-ahead line of sight."""
    return MirrorScene.from_config(Config(scene=SceneConfig(diamond_x=900, diamond_y=500)))


@pytest.fixture
def fast_config():
    """Config with a frame rate high enough for timing tests."""
    return Config(simulation=SimulationConfig(frame_rate=100))


@pytest.fixture
async def bus():
    """Create test event bus."""
    return EventBus(queue_size=10)


@pytest.fixture
async def engine(bus, fast_config):
    """Create test simulation engine."""
    eng = SimulationEngine(bus=bus, config=fast_config)
    yield eng
    if eng._task:
        await eng.stop()


@pytest.fixture
async def app():
    """Create test FastAPI app."""
    return create_app()


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
