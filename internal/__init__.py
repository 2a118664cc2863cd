from utils.ksuid import generate_ksuid
from utils.clock import now_micros, format_timestamp
from internal.errors import SimError, ConfigError, BusError, HealthCheckError

__all__ = [
    "generate_ksuid",
    "now_micros",
    "format_timestamp",
    "SimError",
    "ConfigError",
    "BusError",
    "HealthCheckError",
]
