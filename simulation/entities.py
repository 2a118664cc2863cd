from enum import Enum

from simulation.geometry import angle_between, distance, reflect_heading, step_along


class Segment:
    """Immutable straight piece of the room: a mirror or the back wall."""
    __slots__ = ("p1", "p2", "name")

    def __init__(self, p1, p2, name=""):
        object.__setattr__(self, "p1", tuple(p1))
        object.__setattr__(self, "p2", tuple(p2))
        object.__setattr__(self, "name", name)

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self):
        return f"{type(self).__name__}({self.p1}, {self.p2})"

    def to_dict(self):
        return {"name": self.name, "p1": list(self.p1), "p2": list(self.p2)}


class Mirror(Segment):
    __slots__ = ()


class Wall(Segment):
    __slots__ = ()


class Diamond:
    """Target the line of sight may strike."""

    def __init__(self, x, y, radius=10):
        self.x = x
        self.y = y
        self.radius = radius
        self.hit = False

    @property
    def position(self):
        return self.x, self.y

    def contains(self, x, y):
        return distance((x, y), self.position) < self.radius


class Observer:
    __slots__ = ("x", "y")

    def __init__(self, x, y):
        self.x = x
        self.y = y

    @property
    def position(self):
        return self.x, self.y


class SightState(str, Enum):
    RESTING = "resting"
    DRAGGING = "dragging"


class SightBall:
    """User-draggable aim point above the observer.

    Its x is confined to ``observer.x +/- max_lateral_offset``; the pulse
    ``animation_phase`` is cosmetic and wraps in [0, 10).
    """

    PHASE_PERIOD = 10

    def __init__(self, observer, offset=20, size=10, max_lateral_offset=75, animation_step=0.15):
        self.observer = observer
        self.x = observer.x
        self.y = observer.y - offset
        self.heading = self._aim()
        self.size = size
        self.max_lateral_offset = max_lateral_offset
        self.animation_step = animation_step
        self.animation_phase = 0.0
        self.state = SightState.RESTING
        self._moved = False

    @property
    def position(self):
        return self.x, self.y

    @property
    def selected(self):
        return self.state == SightState.DRAGGING

    @property
    def moved_since_release(self):
        return self._moved

    @property
    def bounds(self):
        return self.observer.x - self.max_lateral_offset, self.observer.x + self.max_lateral_offset

    def in_window(self, x):
        low, high = self.bounds
        return low < x < high

    def set_position(self, x):
        low, high = self.bounds
        self.x = min(max(x, low), high)
        return self.x

    def begin_drag(self, x):
        self.set_position(x)
        self.heading = self._aim()
        self.state = SightState.DRAGGING
        self._moved = True

    def end_drag(self):
        """Leave the drag state; True when the ball moved since the last release."""
        self.state = SightState.RESTING
        moved, self._moved = self._moved, False
        return moved

    def _aim(self):
        return angle_between(self.observer.x, self.observer.y, self.x, self.y)

    def tick_animation(self):
        self.animation_phase = (self.animation_phase + self.animation_step) % self.PHASE_PERIOD

    def to_dict(self):
        return {"x": self.x, "y": self.y, "state": self.state.value, "heading": self.heading,
                "phase": round(self.animation_phase, 3)}


class Motion(str, Enum):
    IDLE = "idle"
    MOVING = "moving"


class Ray:
    """Permanent trail segment flown between two origin points."""
    __slots__ = ("p1", "p2")

    def __init__(self, p1, p2):
        self.p1 = tuple(p1)
        self.p2 = tuple(p2)

    def to_dict(self):
        return {"p1": list(self.p1), "p2": list(self.p2)}


class GhostRay:
    """Apparent-image path: the tip recedes from a fixed anchor on a frozen heading."""

    def __init__(self, x, y, heading, speed=3.0):
        self.x = x
        self.y = y
        self.anchor = (x, y)
        self.heading = heading
        self.speed = speed
        self.moving = True
        self.hit = False

    @property
    def tip(self):
        return self.x, self.y

    def advance(self):
        self.x, self.y = step_along(self.x, self.y, self.heading, self.speed)

    def to_dict(self):
        return {"tip": list(self.tip), "anchor": list(self.anchor), "heading": self.heading, "hit": self.hit}


class Particle:
    """The moving point that traces the line of sight through the room."""

    def __init__(self, x, y, heading=90, speed=3.0):
        self.x = x
        self.y = y
        # Previous position; the last step prev -> current is tested against walls
        self.prev_x = x
        self.prev_y = y
        # Start of the current straight flight
        self.origin_x = x
        self.origin_y = y
        self.heading = heading
        self.speed = speed
        self.motion = Motion.IDLE

    @property
    def position(self):
        return self.x, self.y

    @property
    def previous(self):
        return self.prev_x, self.prev_y

    @property
    def origin(self):
        return self.origin_x, self.origin_y

    @property
    def moving(self):
        return self.motion == Motion.MOVING

    def launch(self, x, y, heading):
        self.x = self.prev_x = self.origin_x = x
        self.y = self.prev_y = self.origin_y = y
        self.heading = heading
        self.motion = Motion.MOVING

    def advance(self):
        self.prev_x, self.prev_y = self.x, self.y
        self.x, self.y = step_along(self.x, self.y, self.heading, self.speed)

    def stop(self):
        self.motion = Motion.IDLE

    def cleared_origin(self, clearance):
        return abs(self.x - self.origin_x) > clearance

    def reflect(self, ghost_speed=None):
        """Bounce off a vertical mirror at the current position.

        Returns the finished Ray and a GhostRay that keeps the incoming heading.
        """
        ray = Ray(self.origin, self.position)
        ghost = GhostRay(self.x, self.y, self.heading, self.speed if ghost_speed is None else ghost_speed)
        self.origin_x, self.origin_y = self.x, self.y
        self.heading = reflect_heading(self.heading)
        return ray, ghost

    def to_dict(self):
        return {"x": self.x, "y": self.y, "heading": self.heading, "motion": self.motion.value,
                "origin": list(self.origin)}
