import json
from pathlib import Path

from internal.errors import ConfigError

_DEFAULT_CONFIG = Path(__file__).parent / "config.json"


class SimulationConfig:
    __slots__ = ("frame_rate", "particle_speed", "ghost_speed", "reflection_clearance", "animation_step")

    def __init__(self, frame_rate=60, particle_speed=3.0, ghost_speed=3.0, reflection_clearance=10.0,
                 animation_step=0.15):
        self.frame_rate = frame_rate
        self.particle_speed = particle_speed
        self.ghost_speed = ghost_speed
        self.reflection_clearance = reflection_clearance
        self.animation_step = animation_step

    @property
    def frame_interval(self):
        return 1.0 / self.frame_rate


class SceneConfig:
    """Room layout in canvas coordinates (y grows downwards)."""

    __slots__ = ("width", "height", "left_mirror_x", "right_mirror_x", "mirror_top", "mirror_bottom",
                 "diamond_x", "diamond_y", "diamond_radius", "observer_x", "observer_y",
                 "sight_offset", "sight_size", "max_lateral_offset")

    def __init__(self, width=1000, height=600, left_mirror_x=350, right_mirror_x=550, mirror_top=100,
                 mirror_bottom=300, diamond_x=450, diamond_y=150, diamond_radius=10, observer_x=450,
                 observer_y=325, sight_offset=20, sight_size=10, max_lateral_offset=75):
        self.width = width
        self.height = height
        self.left_mirror_x = left_mirror_x
        self.right_mirror_x = right_mirror_x
        self.mirror_top = mirror_top
        self.mirror_bottom = mirror_bottom
        self.diamond_x = diamond_x
        self.diamond_y = diamond_y
        self.diamond_radius = diamond_radius
        self.observer_x = observer_x
        self.observer_y = observer_y
        self.sight_offset = sight_offset
        self.sight_size = sight_size
        self.max_lateral_offset = max_lateral_offset


class ServerConfig:
    __slots__ = ("host", "port")

    def __init__(self, host="127.0.0.1", port=8080):
        self.host = host
        self.port = port


class LoggingConfig:
    __slots__ = ("level", "file", "crash_file")

    def __init__(self, level="INFO", file="logs/mirrors.log", crash_file="logs/crash.log"):
        self.level = level
        self.file = file
        self.crash_file = crash_file


class Config:
    __slots__ = ("simulation", "scene", "server", "logging")

    def __init__(self, simulation=None, scene=None, server=None, logging=None):
        self.simulation = simulation or SimulationConfig()
        self.scene = scene or SceneConfig()
        self.server = server or ServerConfig()
        self.logging = logging or LoggingConfig()

    @classmethod
    def from_dict(cls, d):
        try:
            config = cls(
                SimulationConfig(**d.get("simulation", {})),
                SceneConfig(**d.get("scene", {})),
                ServerConfig(**d.get("server", {})),
                LoggingConfig(**d.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigError("unknown config key", cause=exc) from exc
        validate(config)
        return config


def validate(config):
    """Reject layouts the scene cannot be built from."""
    sim, scene = config.simulation, config.scene
    if sim.frame_rate <= 0:
        raise ConfigError("frame_rate must be positive", key="simulation.frame_rate")
    if sim.particle_speed <= 0 or sim.ghost_speed <= 0:
        raise ConfigError("speeds must be positive", key="simulation.particle_speed")
    if scene.left_mirror_x >= scene.right_mirror_x:
        raise ConfigError("left mirror must sit left of the right mirror", key="scene.left_mirror_x")
    if scene.mirror_top >= scene.mirror_bottom:
        raise ConfigError("mirror_top must be above mirror_bottom", key="scene.mirror_top")
    if scene.max_lateral_offset <= 0:
        raise ConfigError("max_lateral_offset must be positive", key="scene.max_lateral_offset")
    if scene.diamond_radius <= 0:
        raise ConfigError("diamond_radius must be positive", key="scene.diamond_radius")
    return config


def load_config(path=None):
    config_path = Path(path) if path else _DEFAULT_CONFIG

    if not config_path.exists():
        return Config()

    with open(config_path) as file:
        try:
            data = json.load(file)
        except json.JSONDecodeError as exc:
            raise ConfigError("config is not valid JSON", key=str(config_path), cause=exc) from exc
    return Config.from_dict(data)
