"""Intersection engine: rays, line segments and arcs against glyph shapes.

The exact routine ``intersect`` solves line/line, line/quadratic and
line/cubic pairs in closed form (roots of the Bernstein polynomial
projected onto the line normal) and line/arc pairs through the circle
equation. Curve/arc and curve/curve pairs are handled by flattening one
side into short lines.

``safe_intersect`` wraps the exact routine. If it raises or produces a
non-finite coordinate, both operands are tessellated into polylines and
intersected again. If that fails too the result carries an ERROR status
and no points. Nothing in this module raises out of ``safe_intersect``,
``ray_hits`` or ``arc_hits``.

Segment parameters on the shape side are half-open ([0, 1)), so a probe
through the vertex shared by two segments is counted once.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

import structlog

from glyphanatomy.config import DetectionConfig, get_default_config
from glyphanatomy.core import _bezier
from glyphanatomy.core.geometry import segment_parameters
from glyphanatomy.core.shape import ShapeHandle, tessellate
from glyphanatomy.domain import BBox, Point2D, Segment, SegmentKind
from glyphanatomy.exceptions import IntersectionError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Parameter slack when deciding whether a root lies on a segment
_PARAM_EPS = 1e-9


class IntersectionStatus(str, Enum):
    """Outcome of an intersection query."""

    INTERSECTION = "intersection"
    NO_INTERSECTION = "no_intersection"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Hit:
    """A single intersection point.

    Attributes:
        point: Intersection point in font units
        segment_index: Index of the piece of the second operand that was hit
            (for a ShapeHandle, the index into shape.segments)
        t: Parameter of the hit on that piece, in [0, 1)
    """

    point: Point2D
    segment_index: int
    t: float


@dataclass(frozen=True, slots=True)
class IntersectionResult:
    """Result of safe_intersect.

    Attributes:
        status: INTERSECTION, NO_INTERSECTION or ERROR
        hits: Intersection records (empty unless status is INTERSECTION)
        used_fallback: True when the tessellation fallback produced the hits
    """

    status: IntersectionStatus
    hits: tuple[Hit, ...] = ()
    used_fallback: bool = False

    @property
    def points(self) -> list[Point2D]:
        return [hit.point for hit in self.hits]


@dataclass(frozen=True, slots=True)
class LineProbe:
    """Straight probe from start to end."""

    start: Point2D
    end: Point2D

    @classmethod
    def from_angle(cls, origin: Point2D, angle: float, length: float) -> "LineProbe":
        """Probe of the given length leaving origin at angle (radians)."""
        end = Point2D(
            origin.x + length * math.cos(angle),
            origin.y + length * math.sin(angle),
        )
        return cls(origin, end)

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    def bbox(self) -> BBox:
        return BBox.from_points((self.start, self.end))


@dataclass(frozen=True, slots=True)
class ArcProbe:
    """Circular arc probe.

    Angles are in degrees, counter-clockwise from the positive X axis, and
    the arc runs from start to end with end >= start.
    """

    cx: float
    cy: float
    r: float
    start: float
    end: float

    @classmethod
    def from_sweep(
        cls, cx: float, cy: float, r: float, start_deg: float, sweep_deg: float
    ) -> "ArcProbe":
        if sweep_deg < 0:
            start_deg += sweep_deg
            sweep_deg = -sweep_deg
        return cls(cx, cy, r, start_deg, start_deg + sweep_deg)

    @property
    def sweep(self) -> float:
        return self.end - self.start

    @property
    def length(self) -> float:
        return abs(self.r) * math.radians(self.sweep)

    def fraction_of(self, angle_deg: float) -> float | None:
        """Position of an angle along the arc in [0, 1], or None if outside."""
        if self.sweep >= 360:
            return ((angle_deg - self.start) % 360) / 360
        offset = (angle_deg - self.start) % 360
        if offset > self.sweep + _PARAM_EPS:
            return None
        return offset / self.sweep

    def point_at(self, fraction: float) -> Point2D:
        angle = math.radians(self.start + self.sweep * fraction)
        return Point2D(self.cx + self.r * math.cos(angle), self.cy + self.r * math.sin(angle))

    def to_polyline(self, tolerance: float) -> list[Point2D]:
        """Approximate the arc with chords deviating at most tolerance."""
        if self.r <= 0 or self.sweep <= 0:
            raise IntersectionError("Degenerate arc probe")
        ratio = max(-1.0, min(1.0, 1 - tolerance / self.r))
        max_step = 2 * math.acos(ratio) if ratio < 1 else math.radians(1.0)
        max_step = max(max_step, math.radians(0.5))
        steps = max(2, math.ceil(math.radians(self.sweep) / max_step))
        return [self.point_at(i / steps) for i in range(steps + 1)]

    def bbox(self) -> BBox:
        return BBox(self.cx - self.r, self.cy - self.r, self.cx + self.r, self.cy + self.r)


@dataclass(frozen=True, slots=True)
class PolylineProbe:
    """Open polyline probe through the given points."""

    points: tuple[Point2D, ...]

    def bbox(self) -> BBox:
        return BBox.from_points(self.points)


Intersectable = LineProbe | ArcProbe | PolylineProbe | ShapeHandle
_Piece = Segment | ArcProbe


# ---------------------------------------------------------------------------
# Exact routine
# ---------------------------------------------------------------------------


def _pieces(obj: Intersectable) -> list[_Piece]:
    if isinstance(obj, ShapeHandle):
        return list(obj.segments)
    if isinstance(obj, LineProbe):
        if obj.start == obj.end:
            raise IntersectionError("Zero-length line probe")
        return [Segment(SegmentKind.LINE, (obj.start, obj.end))]
    if isinstance(obj, ArcProbe):
        if obj.r <= 0 or obj.sweep <= 0:
            raise IntersectionError("Degenerate arc probe")
        return [obj]
    if isinstance(obj, PolylineProbe):
        lines = [
            Segment(SegmentKind.LINE, (a, b))
            for a, b in zip(obj.points, obj.points[1:])
            if a != b
        ]
        if not lines:
            raise IntersectionError("Degenerate polyline probe")
        return lines
    raise IntersectionError(f"Cannot intersect {type(obj).__name__}")


def _piece_bbox(piece: _Piece) -> BBox:
    if isinstance(piece, ArcProbe):
        return piece.bbox()
    return piece.control_bbox()


def _closed(t: float) -> bool:
    return -_PARAM_EPS <= t <= 1 + _PARAM_EPS


def _half_open(t: float) -> bool:
    return -_PARAM_EPS <= t < 1 - _PARAM_EPS


def _clamp(t: float) -> float:
    return max(0.0, min(1.0, t))


def _line_line(
    p0: Point2D, p1: Point2D, q0: Point2D, q1: Point2D
) -> list[tuple[Point2D, float, float]]:
    params = segment_parameters(p0, p1, q0, q1)
    if params is None:
        return []
    u, t = params
    point = Point2D(p0.x + u * (p1.x - p0.x), p0.y + u * (p1.y - p0.y))
    return [(point, u, t)]


def _line_curve(
    p0: Point2D, p1: Point2D, curve: Sequence[Point2D]
) -> list[tuple[Point2D, float, float]]:
    """Hits of the infinite line p0-p1 with a Bezier curve.

    Returns:
        Tuples (point, u on the line, t on the curve) for curve roots in [0, 1]
    """
    dx = p1.x - p0.x
    dy = p1.y - p0.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        raise IntersectionError("Zero-length line")

    # Signed distance of each control point from the line (scaled)
    distances = [(p.x - p0.x) * dy - (p.y - p0.y) * dx for p in curve]
    roots = _bezier.solve_polynomial(_bezier.power_coefficients(distances))

    hits = []
    for t in roots:
        if not _closed(t):
            continue
        t = _clamp(t)
        point = _bezier.point_at(curve, t)
        u = ((point.x - p0.x) * dx + (point.y - p0.y) * dy) / length_sq
        hits.append((point, u, t))
    return hits


def _line_arc(
    p0: Point2D, p1: Point2D, arc: ArcProbe
) -> list[tuple[Point2D, float, float]]:
    """Hits of the infinite line p0-p1 with an arc.

    Returns:
        Tuples (point, u on the line, fraction along the arc)
    """
    dx = p1.x - p0.x
    dy = p1.y - p0.y
    fx = p0.x - arc.cx
    fy = p0.y - arc.cy

    a = dx * dx + dy * dy
    if a == 0:
        raise IntersectionError("Zero-length line")
    b = 2 * (fx * dx + fy * dy)
    c = fx * fx + fy * fy - arc.r * arc.r

    hits = []
    for u in _bezier.solve_quadratic(c, b, a):
        point = Point2D(p0.x + u * dx, p0.y + u * dy)
        angle = math.degrees(math.atan2(point.y - arc.cy, point.x - arc.cx))
        fraction = arc.fraction_of(angle)
        if fraction is not None:
            hits.append((point, u, fraction))
    return hits


def _as_lines(piece: _Piece, tolerance: float) -> list[tuple[Point2D, Point2D]]:
    if isinstance(piece, ArcProbe):
        points = piece.to_polyline(tolerance)
    else:
        points = _bezier.flatten(piece.points, tolerance)
    return [(a, b) for a, b in zip(points, points[1:]) if a != b]


def _pair_hits(a: _Piece, b: _Piece, tolerance: float) -> list[tuple[Point2D, float]]:
    """Intersections of two pieces as (point, parameter on b)."""
    a_line = isinstance(a, Segment) and a.kind == SegmentKind.LINE
    b_line = isinstance(b, Segment) and b.kind == SegmentKind.LINE

    if a_line and b_line:
        return [
            (pt, t)
            for pt, u, t in _line_line(a.start, a.end, b.start, b.end)
            if _closed(u) and _half_open(t)
        ]
    if a_line:
        if isinstance(b, ArcProbe):
            found = _line_arc(a.start, a.end, b)
        else:
            found = _line_curve(a.start, a.end, b.points)
        return [(pt, _clamp(t)) for pt, u, t in found if _closed(u) and _half_open(t)]
    if b_line:
        if isinstance(a, ArcProbe):
            found = _line_arc(b.start, b.end, a)
        else:
            found = _line_curve(b.start, b.end, a.points)
        return [(pt, _clamp(u)) for pt, u, t in found if _half_open(u) and _closed(t)]

    # Curve/arc pairs: flatten the first operand
    hits = []
    for start, end in _as_lines(a, tolerance):
        line = Segment(SegmentKind.LINE, (start, end))
        hits.extend(_pair_hits(line, b, tolerance))
    return hits


def intersect(
    a: Intersectable, b: Intersectable, tolerance: float | None = None
) -> list[Hit]:
    """Exact intersection of two shapes or probes.

    Args:
        a: First operand (usually the probe)
        b: Second operand (usually the glyph shape)
        tolerance: Flattening tolerance for curve/arc pairs

    Returns:
        Unsorted hits, indexed by the pieces of b

    Raises:
        IntersectionError: On degenerate operands or non-finite results
    """
    if tolerance is None:
        tolerance = get_default_config().geometry.tessellation_tolerance_units

    pieces_a = _pieces(a)
    pieces_b = _pieces(b)

    hits: list[Hit] = []
    for pa in pieces_a:
        box_a = _piece_bbox(pa)
        for index, pb in enumerate(pieces_b):
            if not box_a.overlaps(_piece_bbox(pb)):
                continue
            for point, t in _pair_hits(pa, pb, tolerance):
                if not point.is_finite():
                    raise IntersectionError("Non-finite intersection point")
                hits.append(Hit(point, index, t))
    return hits


# ---------------------------------------------------------------------------
# Tessellation fallback
# ---------------------------------------------------------------------------


def _polylines(obj: Intersectable, tolerance: float) -> Sequence[Sequence[Point2D]]:
    if isinstance(obj, ShapeHandle):
        return tessellate(obj, tolerance)
    if isinstance(obj, LineProbe):
        return [(obj.start, obj.end)]
    if isinstance(obj, ArcProbe):
        return [obj.to_polyline(tolerance)]
    return [obj.points]


def _intersect_tessellated(a: Intersectable, b: Intersectable, tolerance: float) -> list[Hit]:
    lines_a = [
        (p, q)
        for polyline in _polylines(a, tolerance)
        for p, q in zip(polyline, polyline[1:])
        if p != q
    ]
    if not lines_a:
        raise IntersectionError("Degenerate tessellation")

    hits: list[Hit] = []
    for index, polyline in enumerate(_polylines(b, tolerance)):
        count = len(polyline) - 1
        for k in range(count):
            q0, q1 = polyline[k], polyline[k + 1]
            if q0 == q1:
                continue
            for p0, p1 in lines_a:
                for point, u, t in _line_line(p0, p1, q0, q1):
                    if _closed(u) and _half_open(t):
                        if not point.is_finite():
                            raise IntersectionError("Non-finite tessellated intersection")
                        hits.append(Hit(point, index, (k + _clamp(t)) / count))
    return hits


def _result(hits: list[Hit], used_fallback: bool = False) -> IntersectionResult:
    if not hits:
        return IntersectionResult(IntersectionStatus.NO_INTERSECTION, (), used_fallback)
    return IntersectionResult(IntersectionStatus.INTERSECTION, tuple(hits), used_fallback)


def safe_intersect(
    a: Intersectable, b: Intersectable, tolerance: float | None = None
) -> IntersectionResult:
    """Intersect two operands without ever raising.

    Args:
        a: First operand (usually the probe)
        b: Second operand (usually the glyph shape)
        tolerance: Tessellation tolerance (defaults to the configured value)

    Returns:
        IntersectionResult; ERROR with no hits when both the exact routine
        and the tessellation fallback fail
    """
    if tolerance is None:
        tolerance = get_default_config().geometry.tessellation_tolerance_units

    try:
        return _result(intersect(a, b, tolerance))
    except (IntersectionError, ArithmeticError, ValueError) as e:
        logger.warning("Exact intersection failed, using tessellation", error=str(e))

    try:
        return _result(_intersect_tessellated(a, b, tolerance), used_fallback=True)
    except (IntersectionError, ArithmeticError, ValueError) as e:
        logger.warning(
            "Tessellated intersection failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        return IntersectionResult(IntersectionStatus.ERROR)


# ---------------------------------------------------------------------------
# Rays and arcs
# ---------------------------------------------------------------------------


def _merge_sorted(
    records: list[tuple[float, Hit]], merge_distance: float
) -> list[Hit]:
    records.sort(key=lambda item: item[0])
    merged: list[Hit] = []
    for _, hit in records:
        if merged and hit.point.distance_to(merged[-1].point) < merge_distance:
            continue
        merged.append(hit)
    return merged


def ray_hit_records(
    shape: ShapeHandle,
    origin: Point2D,
    angle: float,
    length: float,
    config: DetectionConfig | None = None,
) -> list[Hit]:
    """Hits of a ray against a shape, sorted along the ray and deduplicated.

    Args:
        shape: Glyph shape
        origin: Ray start
        angle: Ray direction in radians
        length: Ray length (callers pass at least the overshoot)
        config: Detection config (defaults to the process config)

    Returns:
        Hits ordered by distance from origin
    """
    if shape.is_empty or length <= 0:
        return []

    geometry = (config or get_default_config()).geometry
    probe = LineProbe.from_angle(origin, angle, length)
    result = safe_intersect(probe, shape, geometry.tessellation_tolerance_units)
    if result.status != IntersectionStatus.INTERSECTION:
        return []

    dx = math.cos(angle)
    dy = math.sin(angle)
    records = [
        ((hit.point.x - origin.x) * dx + (hit.point.y - origin.y) * dy, hit)
        for hit in result.hits
    ]
    return _merge_sorted(records, geometry.merge_distance(length))


def ray_hits(
    shape: ShapeHandle,
    origin: Point2D,
    angle: float,
    length: float,
    config: DetectionConfig | None = None,
) -> list[Point2D]:
    """Points where a ray crosses a shape, nearest first.

    Hits closer than max(ray_merge_min_units, length * ray_merge_ratio) to
    the previous kept hit are merged, which removes the duplicate hit two
    segments produce at a shared vertex.
    """
    return [hit.point for hit in ray_hit_records(shape, origin, angle, length, config)]


def arc_hits(
    shape: ShapeHandle,
    cx: float,
    cy: float,
    r: float,
    start_deg: float,
    sweep_deg: float,
    config: DetectionConfig | None = None,
) -> list[Point2D]:
    """Points where an arc crosses a shape, ordered along the sweep.

    Args:
        shape: Glyph shape
        cx: Arc centre X
        cy: Arc centre Y
        r: Arc radius
        start_deg: Start angle in degrees
        sweep_deg: Sweep in degrees (counter-clockwise when positive)

    Returns:
        Deduplicated hit points
    """
    if shape.is_empty:
        return []

    geometry = (config or get_default_config()).geometry
    probe = ArcProbe.from_sweep(cx, cy, r, start_deg, sweep_deg)
    result = safe_intersect(probe, shape, geometry.tessellation_tolerance_units)
    if result.status != IntersectionStatus.INTERSECTION:
        return []

    records = []
    for hit in result.hits:
        angle = math.degrees(math.atan2(hit.point.y - cy, hit.point.x - cx))
        fraction = probe.fraction_of(angle)
        records.append((fraction if fraction is not None else 1.0, hit))
    merged = _merge_sorted(records, geometry.merge_distance(probe.length))
    return [hit.point for hit in merged]


# ---------------------------------------------------------------------------
# Scanlines
# ---------------------------------------------------------------------------


def _pair_up(values: list[float]) -> list[tuple[float, float]]:
    return [(values[i], values[i + 1]) for i in range(0, len(values) - 1, 2)]


def horizontal_spans(
    shape: ShapeHandle,
    y: float,
    overshoot: float,
    config: DetectionConfig | None = None,
) -> list[tuple[float, float]]:
    """Ink intervals (x0, x1) along the horizontal line at y, left to right.

    An odd hit count (a grazed vertex or tangent) is retried with a tiny
    vertical offset; if it stays odd the last hit is dropped.
    """
    if shape.is_empty or overshoot <= 0:
        return []

    geometry = (config or get_default_config()).geometry
    margin = overshoot * geometry.probe_margin_ratio
    x0 = shape.bbox.min_x - margin

    xs = [p.x for p in ray_hits(shape, Point2D(x0, y), 0.0, overshoot, config)]
    if len(xs) % 2:
        jittered = y + geometry.inside_jitter_units
        xs = [p.x for p in ray_hits(shape, Point2D(x0, jittered), 0.0, overshoot, config)]
    return _pair_up(xs)


def vertical_runs(
    shape: ShapeHandle,
    x: float,
    overshoot: float,
    config: DetectionConfig | None = None,
) -> list[tuple[float, float]]:
    """Ink intervals (y0, y1) along the vertical line at x, bottom to top."""
    if shape.is_empty or overshoot <= 0:
        return []

    geometry = (config or get_default_config()).geometry
    margin = overshoot * geometry.probe_margin_ratio
    y0 = shape.bbox.min_y - margin

    ys = [p.y for p in ray_hits(shape, Point2D(x, y0), math.pi / 2, overshoot, config)]
    if len(ys) % 2:
        jittered = x + geometry.inside_jitter_units
        ys = [
            p.y for p in ray_hits(shape, Point2D(jittered, y0), math.pi / 2, overshoot, config)
        ]
    return _pair_up(ys)


@dataclass(frozen=True, slots=True)
class ScanlineGrid:
    """Evenly spaced scanline positions over a bounding box.

    Attributes:
        rows: Y positions of horizontal scanlines, bottom to top
        columns: X positions of vertical scanlines, left to right
        overshoot: Ray length to use with the grid
    """

    rows: tuple[float, ...]
    columns: tuple[float, ...]
    overshoot: float


def precompute_scanlines(bbox: BBox, overshoot: float, bands: int = 8) -> ScanlineGrid:
    """Lay out bands horizontal and bands vertical scanlines over a bbox.

    Scanlines sit at band centres, never on the bbox edges.
    """
    if bands <= 0:
        return ScanlineGrid((), (), overshoot)
    rows = tuple(bbox.min_y + bbox.height * (i + 0.5) / bands for i in range(bands))
    columns = tuple(bbox.min_x + bbox.width * (i + 0.5) / bands for i in range(bands))
    return ScanlineGrid(rows, columns, overshoot)


def batch_scanlines(items: Iterable[T], batch_size: int = 4) -> list[list[T]]:
    """Split scanline work into consecutive batches.

    Raises:
        ValueError: If batch_size is not positive
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    batches: list[list[T]] = []
    current: list[T] = []
    for item in items:
        current.append(item)
        if len(current) == batch_size:
            batches.append(current)
            current = []
    if current:
        batches.append(current)
    return batches
