from utils.ksuid import generate_ksuid
from utils.clock import format_timestamp


class FrameSnapshot:
    """Immutable view of one rendered frame, safe to hand to bus subscribers."""
    __slots__ = ("id", "timestamp", "tick", "time", "commands", "summary")

    def __init__(self, tick, time, commands, summary, id=None, timestamp=None):
        self.id = id or generate_ksuid()
        self.timestamp = timestamp or format_timestamp()
        self.tick = tick
        self.time = time
        self.commands = tuple(command.to_dict() for command in commands)
        self.summary = summary

    @classmethod
    def capture(cls, tick, time, scene):
        return cls(tick, time, scene.render_list(), scene.summary())

    @property
    def sim_time_s(self):
        return self.time

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "tick": self.tick,
            "sim_time_s": round(self.time, 4),
            "commands": list(self.commands),
            **self.summary,
        }
