"""Render commands the browser canvas draws, one flat list per frame.

Each command is a tagged value (``kind`` is ``"line"`` or ``"circle"``);
the page switches on the tag instead of knowing about scene entities.
"""

# RGB colors
BACKGROUND = (235, 235, 235)
MIRROR = (0, 200, 255)
WALL = (0, 0, 0)
DIAMOND = (255, 0, 0)
OBSERVER = (0, 0, 255)
RAY = (255, 0, 0)
GHOST_RAY = (255, 180, 180)
GHOST_HIT = (255, 150, 150)
SIGHT_PULSE = (0, 200, 255)
SIGHT_BALL = (0, 150, 255)


class LineCommand:
    __slots__ = ("p1", "p2", "color", "weight")
    kind = "line"

    def __init__(self, p1, p2, color, weight=2):
        self.p1, self.p2, self.color, self.weight = tuple(p1), tuple(p2), color, weight

    def to_dict(self):
        return {"kind": self.kind, "p1": _round(self.p1), "p2": _round(self.p2),
                "color": list(self.color), "weight": self.weight}


class CircleCommand:
    __slots__ = ("center", "diameter", "color")
    kind = "circle"

    def __init__(self, center, diameter, color):
        self.center, self.diameter, self.color = tuple(center), diameter, color

    def to_dict(self):
        return {"kind": self.kind, "center": _round(self.center), "diameter": round(self.diameter, 2),
                "color": list(self.color)}


def _round(point):
    return [round(point[0], 2), round(point[1], 2)]


def render_scene(scene):
    """Back-to-front render list: trails first, solid shapes on top."""
    room, particle, sight = scene.room, scene.particle, scene.sight_ball
    commands = []

    if not sight.selected:
        commands.append(LineCommand(particle.origin, particle.position, RAY, 2))

    for ray in scene.rays:
        commands.append(LineCommand(ray.p1, ray.p2, RAY, 2))

    for ghost in scene.ghost_rays:
        commands.append(LineCommand(ghost.tip, ghost.anchor, GHOST_RAY, 2))
        if ghost.hit:
            commands.append(CircleCommand(ghost.tip, 20, GHOST_HIT))

    for mirror in room.mirrors:
        commands.append(LineCommand(mirror.p1, mirror.p2, MIRROR, 4))
    commands.append(CircleCommand(room.diamond.position, room.diamond.radius * 2, DIAMOND))
    commands.append(CircleCommand(room.observer.position, 20, OBSERVER))
    commands.append(LineCommand(room.wall.p1, room.wall.p2, WALL, 4))
    commands.append(CircleCommand(sight.position, sight.size + sight.animation_phase, SIGHT_PULSE))
    commands.append(CircleCommand(sight.position, sight.size, SIGHT_BALL))
    return commands
