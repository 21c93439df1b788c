"""Turn a slider's control points into a continuous, measurable path.

The curve type picks the interpolation from ``osu_decode.geometry.curves``;
the result is sampled into a polyline so that positions can be looked up by
travelled distance rather than by raw curve parameter.

    L  straight segments between consecutive control points
    B  Bézier segments, split wherever a control point is repeated
    C  centripetal Catmull-Rom spans, ends padded with mirrored points
    P  circular arc through three points; anything else is drawn as B
"""

from __future__ import annotations

import logging
import math

import numpy as np

from osu_decode.errors import StructuralError
from osu_decode.geometry.curves import (
    find_circle,
    interpolate_bezier,
    interpolate_centripetal_catmull,
)
from osu_decode.schemas.beatmap import HitObject, Slider, SliderData
from osu_decode.schemas.enums import SliderCurveType

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES_PER_SEGMENT = 50

# Sample points closer than this are the same joint
JOINT_EPSILON = 1e-6


def control_points(hit_object: HitObject) -> list[tuple[float, float]]:
    """The object's own position followed by the slider's curve points."""
    if not isinstance(hit_object.data, Slider):
        raise StructuralError("slider", f"hit object at {hit_object.time} is a {hit_object.kind}")
    points = [hit_object.position, *hit_object.data.slider.curve_points]
    return [(float(x), float(y)) for x, y in points]


def _bezier_segments(points: list[tuple[float, float]]) -> list[list[tuple[float, float]]]:
    """Split at repeated points; each repeat ends one segment and starts the next."""
    segments = []
    current = [points[0]]
    for point in points[1:]:
        if point == current[-1]:
            if len(current) > 1:
                segments.append(current)
            current = [point]
        else:
            current.append(point)
    if len(current) > 1:
        segments.append(current)
    return segments


def _append_samples(path: list, samples: list) -> None:
    # consecutive pieces share their joint
    if path and samples and math.dist(path[-1], samples[0]) < JOINT_EPSILON:
        samples = samples[1:]
    path.extend(samples)


def _bezier_path(points, n: int) -> list[tuple[float, float]]:
    path: list[tuple[float, float]] = []
    lams = np.linspace(0.0, 1.0, n)
    for segment in _bezier_segments(points):
        if len(segment) == 2:
            _append_samples(path, segment)
            continue
        _append_samples(path, [interpolate_bezier(segment, lam) for lam in lams])
    return path or points[:1]


def _catmull_path(points, n: int) -> list[tuple[float, float]]:
    pts = [points[0]]
    for point in points[1:]:
        if point != pts[-1]:
            pts.append(point)
    if len(pts) < 2:
        return pts

    path: list[tuple[float, float]] = []
    lams = np.linspace(0.0, 1.0, n)
    for i in range(len(pts) - 1):
        p1, p2 = pts[i], pts[i + 1]
        p0 = pts[i - 1] if i > 0 else (2 * p1[0] - p2[0], 2 * p1[1] - p2[1])
        p3 = pts[i + 2] if i + 2 < len(pts) else (2 * p2[0] - p1[0], 2 * p2[1] - p1[1])
        _append_samples(
            path, [interpolate_centripetal_catmull(p0, p1, p2, p3, lam) for lam in lams]
        )
    return path


def _arc_path(points, n: int) -> list[tuple[float, float]]:
    """Arc from the first to the last point passing through the middle one."""
    start, middle, end = points
    (cx, cy), radius = find_circle(start, middle, end)

    a_start = math.atan2(start[1] - cy, start[0] - cx)
    a_middle = math.atan2(middle[1] - cy, middle[0] - cx)
    a_end = math.atan2(end[1] - cy, end[0] - cx)

    tau = 2 * math.pi
    sweep = (a_end - a_start) % tau
    if (a_middle - a_start) % tau > sweep:
        # middle is not on the counter-clockwise side, go the other way round
        sweep -= tau

    angles = a_start + sweep * np.linspace(0.0, 1.0, n)
    return [(cx + radius * math.cos(a), cy + radius * math.sin(a)) for a in angles]


def sample_slider_path(
    hit_object: HitObject, samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> np.ndarray:
    """Sample the slider's full (untruncated) curve as an ``(N, 2)`` array."""
    points = control_points(hit_object)
    curve_type = hit_object.data.slider.curve_type
    n = max(samples_per_segment, 2)

    if curve_type is SliderCurveType.LINEAR:
        path = points
    elif curve_type is SliderCurveType.CENTRIPETAL_CATMULL_ROM:
        path = _catmull_path(points, n)
    elif curve_type is SliderCurveType.PERFECT_CIRCLE and len(points) == 3:
        try:
            path = _arc_path(points, n)
        except StructuralError:
            logger.debug("Collinear perfect-circle slider at %d, drawing as Bézier", hit_object.time)
            path = _bezier_path(points, n)
    else:
        path = _bezier_path(points, n)

    return np.asarray(path, dtype=np.float64)


def slide_progress(progress: float, slides: int) -> float:
    """Map progress over all slides to progress along the path.

    Even slides run head to tail, odd slides run back.
    """
    progress = min(max(progress, 0.0), 1.0)
    slides = max(slides, 1)
    span = progress * slides
    index = min(int(span), slides - 1)
    local = span - index
    return 1.0 - local if index % 2 else local


class SliderPath:
    """Arc-length parametrised slider path.

    The path is truncated to the slider's declared length, or extended in a
    straight line along its final direction if the curve is shorter.
    """

    def __init__(self, slider: SliderData, points: np.ndarray):
        self.slider = slider
        self.points = points
        if len(points) > 1:
            steps = np.hypot(*np.diff(points, axis=0).T)
        else:
            steps = np.zeros(0)
        self.cumulative = np.concatenate([[0.0], np.cumsum(steps)])
        self.curve_length = float(self.cumulative[-1])
        self.length = slider.length if slider.length > 0 else self.curve_length

    @classmethod
    def from_hit_object(
        cls, hit_object: HitObject, samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
    ) -> SliderPath:
        points = sample_slider_path(hit_object, samples_per_segment)
        return cls(hit_object.data.slider, points)

    def position(self, progress: float) -> tuple[float, float]:
        """Position after travelling ``progress * length`` along the path."""
        progress = min(max(progress, 0.0), 1.0)
        distance = progress * self.length

        if len(self.points) < 2 or self.curve_length == 0.0:
            x, y = self.points[0]
            return float(x), float(y)

        if distance > self.curve_length:
            tail = self.points[-1] - self.points[-2]
            norm = float(np.hypot(*tail))
            if norm == 0.0:
                x, y = self.points[-1]
                return float(x), float(y)
            x, y = self.points[-1] + tail / norm * (distance - self.curve_length)
            return float(x), float(y)

        x = np.interp(distance, self.cumulative, self.points[:, 0])
        y = np.interp(distance, self.cumulative, self.points[:, 1])
        return float(x), float(y)

    def position_at(self, progress: float) -> tuple[float, float]:
        """Position for progress over the whole object, all slides included."""
        return self.position(slide_progress(progress, self.slider.slides))


def path_position(
    hit_object: HitObject,
    progress: float,
    samples_per_segment: int = DEFAULT_SAMPLES_PER_SEGMENT,
) -> tuple[float, float]:
    """Position along one slide of *hit_object*'s path."""
    return SliderPath.from_hit_object(hit_object, samples_per_segment).position(progress)
