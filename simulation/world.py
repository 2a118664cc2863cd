"""Room defines the fixed geometry of the scene."""

from simulation.entities import Diamond, Mirror, Observer, Wall


class Room:
    """Two vertical mirrors joined at the top by the back wall, a diamond and the observer."""

    def __init__(self, width, height, left_mirror, right_mirror, wall, diamond, observer):
        self.width = width
        self.height = height
        self.left_mirror = left_mirror
        self.right_mirror = right_mirror
        self.wall = wall
        self.diamond = diamond
        self.observer = observer

    @property
    def mirrors(self):
        return self.left_mirror, self.right_mirror

    def contains(self, x, y):
        return 0 <= x <= self.width and 0 <= y <= self.height

    @classmethod
    def from_config(cls, scene):
        top, bottom = scene.mirror_top, scene.mirror_bottom
        return cls(
            scene.width,
            scene.height,
            Mirror((scene.left_mirror_x, top), (scene.left_mirror_x, bottom), "left"),
            Mirror((scene.right_mirror_x, top), (scene.right_mirror_x, bottom), "right"),
            Wall((scene.left_mirror_x, top), (scene.right_mirror_x, top), "back"),
            Diamond(scene.diamond_x, scene.diamond_y, scene.diamond_radius),
            Observer(scene.observer_x, scene.observer_y),
        )

    def to_dict(self):
        return {
            "width": self.width,
            "height": self.height,
            "mirrors": [mirror.to_dict() for mirror in self.mirrors],
            "wall": self.wall.to_dict(),
            "diamond": {"x": self.diamond.x, "y": self.diamond.y, "radius": self.diamond.radius},
            "observer": {"x": self.observer.x, "y": self.observer.y},
        }
