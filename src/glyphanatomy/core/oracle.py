"""Inside/outside oracle for glyph outlines.

A point is inside an outline when a probe from the point to beyond the
outline's bounding box crosses the outline an odd number of times. The
signed winding number is the sum of the horizontal direction of every
segment the probe crosses.
"""

import math

import structlog

from glyphanatomy.config import DetectionConfig, get_default_config
from glyphanatomy.core.intersection import Hit, IntersectionStatus, LineProbe, safe_intersect
from glyphanatomy.core.shape import ShapeHandle, overshoot_for, segments_for, shape_for
from glyphanatomy.domain import GlyphOutline, Point2D, SegmentMeta

logger = structlog.get_logger(__name__)


def _unique_hits(probe: LineProbe, shape: ShapeHandle, tolerance: float) -> list[Hit]:
    result = safe_intersect(probe, shape, tolerance)
    if result.status == IntersectionStatus.ERROR:
        logger.warning("Winding probe failed", start=probe.start.to_tuple())
        return []
    seen = set()
    hits = []
    for hit in result.hits:
        key = (hit.segment_index, round(hit.t, 9))
        if key in seen:
            continue
        seen.add(key)
        hits.append(hit)
    return hits


def winding_number(
    shape: ShapeHandle,
    probe: LineProbe,
    segments: list[SegmentMeta] | None = None,
    config: DetectionConfig | None = None,
) -> int:
    """Signed crossing count of a probe through a shape.

    Args:
        shape: Glyph shape
        probe: Line probe from the query point outward
        segments: Segment metadata aligned with shape.segments; each crossing
            counts +1 when unavailable
        config: Detection config (defaults to the process config)

    Returns:
        Sum of the direction of every crossed segment
    """
    if shape.is_empty:
        return 0

    tolerance = (config or get_default_config()).geometry.tessellation_tolerance_units
    total = 0
    for hit in _unique_hits(probe, shape, tolerance):
        if segments is not None and hit.segment_index < len(segments):
            total += segments[hit.segment_index].direction
        else:
            total += 1
    return total


def crossing_count(
    shape: ShapeHandle,
    probe: LineProbe,
    config: DetectionConfig | None = None,
) -> int:
    """Unsigned number of times a probe crosses a shape."""
    if shape.is_empty:
        return 0
    tolerance = (config or get_default_config()).geometry.tessellation_tolerance_units
    return len(_unique_hits(probe, shape, tolerance))


def is_inside(
    outline: GlyphOutline,
    point: Point2D,
    *,
    angle: float = math.pi,
    length: float | None = None,
    config: DetectionConfig | None = None,
) -> bool:
    """Check whether a point lies inside the ink of an outline.

    The probe leaves the point along angle (towards the left by default),
    offset perpendicular to its direction by inside_jitter_units so that it
    does not graze outline vertices.

    Args:
        outline: Glyph outline
        point: Query point
        angle: Probe direction in radians
        length: Probe length (defaults to overshoot plus the distance from
            the point to the bbox centre)
        config: Detection config (defaults to the process config)

    Returns:
        True when the winding number is odd
    """
    if not outline.is_usable():
        return False

    config = config or get_default_config()
    shape = shape_for(outline, config)
    if shape.is_empty:
        return False

    if length is None:
        length = overshoot_for(outline, config) + point.distance_to(shape.bbox.center)

    jitter = config.geometry.inside_jitter_units
    origin = Point2D(
        point.x - jitter * math.sin(angle),
        point.y + jitter * math.cos(angle),
    )
    probe = LineProbe.from_angle(origin, angle, length)
    return abs(winding_number(shape, probe, segments_for(outline, config), config)) % 2 == 1
