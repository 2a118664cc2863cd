"""Plane geometry helpers shared by the scene entities.

Points are ``(x, y)`` tuples in canvas coordinates, so y grows downwards and
a heading of -90 degrees points up the screen.
"""

import math


def segments_intersect(a1, a2, b1, b2):
    """True when segment a1-a2 touches segment b1-b2.

    Parallel segments only count as intersecting in the degenerate case where
    both numerators vanish. Collinear segments that overlap without satisfying
    that exact test are reported as disjoint, which is accepted for a particle
    whose step is much shorter than any wall.
    """
    (ax, ay), (bx, by) = a1, a2
    (cx, cy), (dx, dy) = b1, b2

    denominator = ((bx - ax) * (dy - cy)) - ((by - ay) * (dx - cx))
    numerator1 = ((ay - cy) * (dx - cx)) - ((ax - cx) * (dy - cy))
    numerator2 = ((ay - cy) * (bx - ax)) - ((ax - cx) * (by - ay))

    if denominator == 0:
        return numerator1 == 0 and numerator2 == 0

    r = numerator1 / denominator
    s = numerator2 / denominator
    return 0 <= r <= 1 and 0 <= s <= 1


def angle_between(origin_x, origin_y, target_x, target_y):
    """Heading in degrees from origin to target, in (-180, 180]."""
    return math.degrees(math.atan2(target_y - origin_y, target_x - origin_x))


def reflect_heading(heading):
    """Outgoing heading off a vertical mirror."""
    return 180 - heading


def step_along(x, y, heading, speed):
    """Point reached after moving ``speed`` units along ``heading`` degrees."""
    radians = math.radians(heading)
    return x + speed * math.cos(radians), y + speed * math.sin(radians)


def distance(a, b):
    return math.hypot(a[0] - b[0], a[1] - b[1])
