"""The mirror room: every entity plus the per-frame update and input handling."""

from simulation.entities import Particle, SightBall
from simulation.geometry import segments_intersect
from simulation.render import render_scene
from simulation.world import Room


class Transition:
    DIAMOND = "diamond_hit"
    REFLECT = "reflection"
    WALL = "wall_hit"
    ESCAPED = "escaped"


class Guard:
    __slots__ = ("name", "applies", "resolve")

    def __init__(self, name, applies, resolve):
        self.name = name
        self.applies = applies
        self.resolve = resolve


class MirrorScene:
    """Owns the room, the sight ball, the particle and the ray trails.

    ``step`` runs one frame. Collisions are checked as an ordered guard chain
    (diamond, mirror, wall, escape) and only the first matching guard fires,
    so a frame never both stops the particle and flips its heading.
    """

    def __init__(self, room, config):
        self.room = room
        self.config = config
        observer = room.observer
        self.sight_ball = SightBall(observer, offset=config.scene.sight_offset, size=config.scene.sight_size,
                                    max_lateral_offset=config.scene.max_lateral_offset,
                                    animation_step=config.simulation.animation_step)
        self.particle = Particle(observer.x, observer.y, self.aim_heading(), config.simulation.particle_speed)
        self.rays = []
        self.ghost_rays = []
        self._guards = (
            Guard(Transition.DIAMOND, self._touches_diamond, self._stop_at_diamond),
            Guard(Transition.REFLECT, self._crosses_mirror, self._reflect),
            Guard(Transition.WALL, self._crosses_wall, self.particle.stop),
            Guard(Transition.ESCAPED, self._left_room, self.particle.stop),
        )

    @classmethod
    def from_config(cls, config):
        return cls(Room.from_config(config.scene), config)

    def aim_heading(self):
        return self.sight_ball.heading

    def step(self):
        """Advance one frame. Returns the transition that fired, if any."""
        self.sight_ball.tick_animation()
        if not self.particle.moving:
            return None

        self.particle.advance()
        for ghost in self.ghost_rays:
            ghost.advance()

        for guard in self._guards:
            if guard.applies():
                guard.resolve()
                return guard.name
        return None

    def drag_move(self, x):
        """Move the sight ball while dragging. Pointer positions outside the window are ignored."""
        if not self.sight_ball.in_window(x):
            return False
        self.sight_ball.begin_drag(x)
        self.rays.clear()
        self.ghost_rays.clear()
        return True

    def drag_end(self):
        """Finish a drag; relaunch the particle only if the sight ball moved."""
        self.room.diamond.hit = False
        if not self.sight_ball.end_drag():
            return False
        observer = self.room.observer
        self.particle.launch(observer.x, observer.y, self.aim_heading())
        return True

    def render_list(self):
        return render_scene(self)

    def summary(self):
        return {
            "particle": self.particle.to_dict(),
            "sight_ball": self.sight_ball.to_dict(),
            "rays": len(self.rays),
            "ghost_rays": len(self.ghost_rays),
            "diamond_hit": self.room.diamond.hit,
        }

    # Guards

    def _step_crosses(self, segment):
        return segments_intersect(self.particle.position, self.particle.previous, segment.p1, segment.p2)

    def _touches_diamond(self):
        return self.room.diamond.contains(self.particle.x, self.particle.y)

    def _stop_at_diamond(self):
        self.particle.stop()
        self.room.diamond.hit = True
        for ghost in self.ghost_rays:
            ghost.hit = True

    def _crosses_mirror(self):
        # Right after a bounce the step still straddles the same mirror
        if not self.particle.cleared_origin(self.config.simulation.reflection_clearance):
            return False
        return any(self._step_crosses(mirror) for mirror in self.room.mirrors)

    def _reflect(self):
        ray, ghost = self.particle.reflect(self.config.simulation.ghost_speed)
        self.rays.append(ray)
        self.ghost_rays.append(ghost)

    def _crosses_wall(self):
        return self._step_crosses(self.room.wall)

    def _left_room(self):
        return not self.room.contains(self.particle.x, self.particle.y)
