"""Pure curve evaluation for slider paths.

Every function takes 2D points as ``(x, y)`` pairs of any real number type,
works in floats, and converts the result back to the type of the first
input's coordinates (integral types are rounded to nearest). ``lam`` is
clamped into [0, 1] before use.
"""

import math
import numbers
from typing import Sequence

from osu_decode.errors import StructuralError

Point = tuple[float, float]

# Below this the three points of a circle fit are treated as collinear
COLLINEAR_EPSILON = 1e-9


def _clamp(lam: float) -> float:
    return min(max(float(lam), 0.0), 1.0)


def _as_float(point) -> Point:
    return float(point[0]), float(point[1])


def _like(value: float, template):
    if isinstance(template, numbers.Integral):
        return int(round(value))
    return type(template)(value)


def _cast_point(point: Point, template) -> tuple:
    return _like(point[0], template[0]), _like(point[1], template[1])


def _lerp(start: Point, end: Point, lam: float) -> Point:
    return (
        end[0] * lam + start[0] * (1.0 - lam),
        end[1] * lam + start[1] * (1.0 - lam),
    )


def interpolate_linear(start, end, lam: float) -> tuple:
    """Point at *lam* along the segment start -> end."""
    lam = _clamp(lam)
    return _cast_point(_lerp(_as_float(start), _as_float(end), lam), start)


def interpolate_bezier(points: Sequence, lam: float) -> tuple:
    """Bézier curve through *points* evaluated with De Casteljau's algorithm.

    Raises:
        StructuralError: if fewer than two control points are given.
    """
    if len(points) < 2:
        raise StructuralError(
            "bezier", f"need at least 2 control points, got {len(points)}"
        )
    lam = _clamp(lam)

    work = [_as_float(p) for p in points]
    while len(work) > 1:
        work = [_lerp(work[i], work[i + 1], lam) for i in range(len(work) - 1)]

    return _cast_point(work[0], points[0])


def _blend(a: Point, b: Point, t: float, t_a: float, t_b: float) -> Point:
    """Affine blend of a (at knot t_a) and b (at knot t_b) evaluated at t."""
    span = t_b - t_a
    wa = (t_b - t) / span
    wb = (t - t_a) / span
    return a[0] * wa + b[0] * wb, a[1] * wa + b[1] * wb


def interpolate_centripetal_catmull(p0, p1, p2, p3, lam: float) -> tuple:
    """Centripetal Catmull-Rom span from p1 (lam=0) to p2 (lam=1).

    Uses the Barry–Goldman pyramidal formulation with knots spaced by the
    square root of the distance between consecutive points.

    Raises:
        StructuralError: if two consecutive points coincide, which makes a
            knot interval zero.
    """
    lam = _clamp(lam)
    pts = [_as_float(p) for p in (p0, p1, p2, p3)]

    knots = [0.0]
    for a, b in zip(pts, pts[1:]):
        interval = math.sqrt(math.hypot(b[0] - a[0], b[1] - a[1]))
        if interval == 0.0:
            raise StructuralError(
                "catmull_rom", f"duplicate consecutive points {a} give a zero knot interval"
            )
        knots.append(knots[-1] + interval)
    t0, t1, t2, t3 = knots

    t = t1 + lam * (t2 - t1)

    a1 = _blend(pts[0], pts[1], t, t0, t1)
    a2 = _blend(pts[1], pts[2], t, t1, t2)
    a3 = _blend(pts[2], pts[3], t, t2, t3)

    b1 = _blend(a1, a2, t, t0, t2)
    b2 = _blend(a2, a3, t, t1, t3)

    c = _blend(b1, b2, t, t1, t2)
    return _cast_point(c, p1)


def interpolate_perfect_circle(start, end, center, radius, lam: float) -> tuple:
    """Point on the circle around *center* between the angles of start and end.

    The angle is interpolated linearly between ``atan2`` of start and end
    relative to the centre.
    """
    lam = _clamp(lam)
    s = _as_float(start)
    e = _as_float(end)
    c = _as_float(center)
    r = float(radius)

    start_angle = math.atan2(s[1] - c[1], s[0] - c[0])
    end_angle = math.atan2(e[1] - c[1], e[0] - c[0])
    angle = end_angle * lam + start_angle * (1.0 - lam)

    return _cast_point((c[0] + math.cos(angle) * r, c[1] + math.sin(angle) * r), start)


def find_circle(p0, p1, p2) -> tuple[Point, float]:
    """Centre and radius of the circle through three points.

    Intersects the perpendicular bisectors of p0-p1 and p1-p2. Always
    returns floats.

    Raises:
        StructuralError: if the points are collinear (no finite circle).
    """
    ax, ay = _as_float(p0)
    bx, by = _as_float(p1)
    cx, cy = _as_float(p2)

    d = 2.0 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    if abs(d) < COLLINEAR_EPSILON:
        raise StructuralError(
            "find_circle", f"points {p0}, {p1}, {p2} are collinear"
        )

    a_sq = ax * ax + ay * ay
    b_sq = bx * bx + by * by
    c_sq = cx * cx + cy * cy

    center_x = (a_sq * (by - cy) + b_sq * (cy - ay) + c_sq * (ay - by)) / d
    center_y = (a_sq * (cx - bx) + b_sq * (ax - cx) + c_sq * (bx - ax)) / d
    radius = math.hypot(ax - center_x, ay - center_y)

    return (center_x, center_y), radius
