"""Shape adapter: turns glyph path commands into intersection-ready shapes.

Every derived value is cached per outline object (and geometry config) in a
``weakref.WeakKeyDictionary``. Entries vanish as soon as the caller drops
the outline, and two structurally identical outlines never share an entry.

Key functions:
- shape_for: Segments, contour ranges and bbox of an outline
- overshoot_for: Ray length guaranteed to exit the outline's bbox
- segments_for: Per-segment tangent/normal/direction metadata
- tessellate: Cached polyline approximation of a shape
- flatten_contours: One closed polygon per contour
"""

import math
import weakref
from dataclasses import dataclass

import structlog

from glyphanatomy.config import DetectionConfig, GeometryConfig, get_default_config
from glyphanatomy.core._bezier import flatten, is_degenerate, start_tangent
from glyphanatomy.domain import (
    BBox,
    CommandType,
    GlyphOutline,
    Point2D,
    Segment,
    SegmentKind,
    SegmentMeta,
)
from glyphanatomy.exceptions import OutlineError

logger = structlog.get_logger(__name__)

_CURVE_KINDS = {
    CommandType.QUAD: SegmentKind.QUAD,
    CommandType.CUBIC: SegmentKind.CUBIC,
}


@dataclass(eq=False)
class ShapeHandle:
    """Intersection-ready form of one glyph outline.

    Attributes:
        segments: Line/quad/cubic segments in outline order
        contours: Half-open (start, end) index ranges into segments, one per
            contour
        bbox: Bounding box of the source outline (None for an empty shape)
    """

    segments: tuple[Segment, ...]
    contours: tuple[tuple[int, int], ...]
    bbox: BBox | None

    @classmethod
    def empty(cls) -> "ShapeHandle":
        return cls(segments=(), contours=(), bbox=None)

    @property
    def is_empty(self) -> bool:
        return not self.segments or self.bbox is None

    def contour_segments(self, index: int) -> tuple[Segment, ...]:
        """Segments of a single contour."""
        start, end = self.contours[index]
        return self.segments[start:end]

    def __repr__(self) -> str:
        return f"ShapeHandle(segments={len(self.segments)}, contours={len(self.contours)})"


_shapes: "weakref.WeakKeyDictionary[GlyphOutline, dict[GeometryConfig, ShapeHandle]]" = (
    weakref.WeakKeyDictionary()
)
_overshoots: "weakref.WeakKeyDictionary[GlyphOutline, dict[GeometryConfig, float]]" = (
    weakref.WeakKeyDictionary()
)
_segment_meta: "weakref.WeakKeyDictionary[ShapeHandle, list[SegmentMeta]]" = (
    weakref.WeakKeyDictionary()
)
_tessellations: "weakref.WeakKeyDictionary[ShapeHandle, dict[float, tuple[tuple[Point2D, ...], ...]]]" = (
    weakref.WeakKeyDictionary()
)


def clear_caches() -> None:
    """Drop every cached shape, overshoot, segment list and tessellation."""
    _shapes.clear()
    _overshoots.clear()
    _segment_meta.clear()
    _tessellations.clear()


class _ContourBuilder:
    """Accumulates segments command by command."""

    def __init__(self, degenerate_tolerance: float) -> None:
        self._tolerance = degenerate_tolerance
        self.segments: list[Segment] = []
        self.contours: list[tuple[int, int]] = []
        self._contour = -1
        self._start: Point2D | None = None
        self._current: Point2D | None = None
        self._first_index = 0

    def move(self, point: Point2D) -> None:
        self.close()
        self._contour += 1
        self._start = point
        self._current = point
        self._first_index = len(self.segments)

    def line(self, target: Point2D) -> None:
        current = self._require_current()
        if target != current:
            self.segments.append(Segment(SegmentKind.LINE, (current, target), self._contour))
        self._current = target

    def curve(self, kind: SegmentKind, points: tuple[Point2D, ...]) -> None:
        current = self._require_current()
        control = (current, *points)
        if is_degenerate(control, self._tolerance):
            self.line(points[-1])
            return
        self.segments.append(Segment(kind, control, self._contour))
        self._current = points[-1]

    def close(self) -> None:
        if self._start is None or self._current is None:
            return
        if self._current != self._start:
            self.line(self._start)
        if len(self.segments) > self._first_index:
            self.contours.append((self._first_index, len(self.segments)))
        self._start = None
        self._current = None

    def _require_current(self) -> Point2D:
        if self._current is None:
            raise OutlineError("Drawing command without a preceding move")
        return self._current


def _geometry_config(config: DetectionConfig | None) -> GeometryConfig:
    return (config or get_default_config()).geometry


def _per_outline(cache: weakref.WeakKeyDictionary, outline: GlyphOutline) -> dict:
    per_outline = cache.get(outline)
    if per_outline is None:
        per_outline = {}
        cache[outline] = per_outline
    return per_outline


def _build_shape(outline: GlyphOutline, geometry: GeometryConfig) -> ShapeHandle:
    if not outline.is_usable():
        return ShapeHandle.empty()

    builder = _ContourBuilder(geometry.degenerate_tolerance_units)

    for cmd in outline.commands:
        if not cmd.is_well_formed():
            raise OutlineError(f"Malformed {cmd.kind.name} command")
        if cmd.kind == CommandType.MOVE:
            builder.move(cmd.points[0])
        elif cmd.kind == CommandType.LINE:
            builder.line(cmd.points[0])
        elif cmd.kind in _CURVE_KINDS:
            builder.curve(_CURVE_KINDS[cmd.kind], cmd.points)
        else:
            builder.close()
    builder.close()

    if not builder.segments:
        return ShapeHandle.empty()

    return ShapeHandle(
        segments=tuple(builder.segments),
        contours=tuple(builder.contours),
        bbox=outline.bbox,
    )


def shape_for(outline: GlyphOutline, config: DetectionConfig | None = None) -> ShapeHandle:
    """Get the cached intersection-ready shape of an outline.

    Open contours are closed with an implicit line, curves whose control
    points collapse onto their endpoints become lines, and zero-length
    lines are dropped. A pathological outline yields an empty shape.

    Args:
        outline: Glyph outline (cached by identity)
        config: Detection config supplying the degenerate-curve tolerance

    Returns:
        ShapeHandle for the outline
    """
    geometry = _geometry_config(config)
    per_outline = _per_outline(_shapes, outline)
    cached = per_outline.get(geometry)
    if cached is not None:
        return cached

    try:
        shape = _build_shape(outline, geometry)
    except OutlineError as e:
        logger.warning("Unusable outline", glyph=outline.name, error=str(e))
        shape = ShapeHandle.empty()

    per_outline[geometry] = shape
    return shape


def overshoot_for(outline: GlyphOutline, config: DetectionConfig | None = None) -> float:
    """Ray length guaranteed to leave the outline's bounding box.

    Returns:
        overshoot_factor * max(width, height), or 0.0 without a usable bbox
    """
    geometry = _geometry_config(config)
    per_outline = _per_outline(_overshoots, outline)
    cached = per_outline.get(geometry)
    if cached is not None:
        return cached

    bbox = outline.bbox
    if bbox is None or not bbox.is_finite():
        value = 0.0
    else:
        value = geometry.overshoot_factor * max(bbox.width, bbox.height)

    per_outline[geometry] = value
    return value


def _segment_meta_for(segment: Segment) -> SegmentMeta:
    tx, ty = start_tangent(segment.points)
    direction = int(math.copysign(1, tx)) if tx != 0 else 1
    return SegmentMeta(
        segment=segment,
        tangent=Point2D(tx, ty),
        normal=Point2D(ty, -tx),
        direction=direction,
    )


def segments_for(
    outline: GlyphOutline, config: DetectionConfig | None = None
) -> list[SegmentMeta]:
    """Get cached per-segment metadata, aligned with shape_for(outline, config).segments."""
    shape = shape_for(outline, config)
    cached = _segment_meta.get(shape)
    if cached is not None:
        return cached

    metas = [_segment_meta_for(seg) for seg in shape.segments]
    _segment_meta[shape] = metas
    return metas


def tessellate(
    shape: ShapeHandle,
    tolerance: float | None = None,
    config: DetectionConfig | None = None,
) -> tuple[tuple[Point2D, ...], ...]:
    """Polyline approximation of every segment of a shape.

    Args:
        shape: Shape to tessellate
        tolerance: Maximum deviation from the true curves (defaults to the
            configured tessellation tolerance)
        config: Detection config used when tolerance is None

    Returns:
        One polyline per segment, aligned with shape.segments
    """
    if tolerance is None:
        tolerance = _geometry_config(config).tessellation_tolerance_units

    per_shape = _tessellations.get(shape)
    if per_shape is None:
        per_shape = {}
        _tessellations[shape] = per_shape

    cached = per_shape.get(tolerance)
    if cached is not None:
        return cached

    polylines = tuple(
        tuple(flatten(seg.points, tolerance)) if seg.is_curve else seg.points
        for seg in shape.segments
    )
    per_shape[tolerance] = polylines
    return polylines


def flatten_contours(
    outline: GlyphOutline,
    tolerance: float | None = None,
    config: DetectionConfig | None = None,
) -> list[list[Point2D]]:
    """Flatten each contour of an outline into a closed polygon.

    The closing point is not repeated.

    Args:
        outline: Glyph outline
        tolerance: Flattening tolerance (defaults to analysis_flatten_units)
        config: Detection config supplying the shape and default tolerance

    Returns:
        One list of points per contour, aligned with shape_for(outline).contours
    """
    if tolerance is None:
        tolerance = _geometry_config(config).analysis_flatten_units

    shape = shape_for(outline, config)
    polylines = tessellate(shape, tolerance)

    polygons: list[list[Point2D]] = []
    for start, end in shape.contours:
        polygon: list[Point2D] = []
        for i in range(start, end):
            polygon.extend(polylines[i][:-1])
        polygons.append(polygon)
    return polygons
