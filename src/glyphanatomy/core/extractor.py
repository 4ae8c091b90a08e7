"""Outline segments that make up a detected feature.

Each extractor re-derives the zone its detector probes and keeps the path
segments that fall in it, filtered by orientation and curvature. A clip
boundary, where the feature has one, then removes segments whose midpoint
lies on the wrong side.
"""

from collections.abc import Callable, Iterable

import structlog

from glyphanatomy.config import DetectionConfig
from glyphanatomy.core._bezier import point_at
from glyphanatomy.core.analysis import ContourClass, DetectionContext
from glyphanatomy.core.detectors._common import find_openings, find_stems
from glyphanatomy.core.detectors.cavities import get_counter
from glyphanatomy.core.detectors.marks import get_tittle
from glyphanatomy.core.detectors.stems import find_bar, find_cross_stroke, find_serifs
from glyphanatomy.core.detectors.terminals import find_stroke_ends
from glyphanatomy.core.orchestrator import resolve_feature
from glyphanatomy.domain import (
    BBox,
    CircleShape,
    ClipBoundary,
    FeatureHighlight,
    FeatureName,
    FontInfo,
    GlyphOutline,
    HorizontalClip,
    Metrics,
    Point2D,
    PolygonClip,
    PolylineShape,
    Segment,
)

Extractor = Callable[[DetectionContext], FeatureHighlight | None]

EXTRACTORS: dict[FeatureName, Extractor] = {}

logger = structlog.get_logger(__name__)


def extractor(feature: FeatureName) -> Callable[[Extractor], Extractor]:
    """Register a function as the segment extractor for a feature."""

    def register(func: Extractor) -> Extractor:
        if feature in EXTRACTORS:
            raise ValueError(f"Duplicate extractor for {feature.value}")
        EXTRACTORS[feature] = func
        return func

    return register


# ---------------------------------------------------------------------------
# Segment filters
# ---------------------------------------------------------------------------


def _is_horizontal(seg: Segment, ratio: float) -> bool:
    box = seg.control_bbox()
    return box.width >= ratio * box.height and box.width > 0


def _is_vertical(seg: Segment, ratio: float) -> bool:
    box = seg.control_bbox()
    return box.height >= ratio * box.width and box.height > 0


def _in_zone(segments: Iterable[Segment], zone: BBox) -> list[Segment]:
    return [seg for seg in segments if seg.control_bbox().overlaps(zone)]


def _highlight(segments: Iterable[Segment], closed: bool = False) -> FeatureHighlight | None:
    kept = tuple(segments)
    if not kept:
        return None
    return FeatureHighlight(segments=kept, closed=closed)


def _padded(box: BBox, pad: float) -> BBox:
    return BBox(box.min_x - pad, box.min_y - pad, box.max_x + pad, box.max_y + pad)


def _contour_highlight(ctx: DetectionContext, index: int) -> FeatureHighlight | None:
    return _highlight(ctx.shape.contour_segments(index), closed=True)


def clip_segments(segments: Iterable[Segment], boundary: ClipBoundary | None) -> list[Segment]:
    """Keep the segments whose midpoint (t = 0.5) the boundary keeps."""
    if boundary is None:
        return list(segments)
    return [seg for seg in segments if boundary.keeps(point_at(seg.points, 0.5))]


# ---------------------------------------------------------------------------
# Clip boundaries
# ---------------------------------------------------------------------------


def _rectangle(x0: float, y0: float, x1: float, y1: float) -> PolygonClip:
    return PolygonClip(
        (Point2D(x0, y0), Point2D(x1, y0), Point2D(x1, y1), Point2D(x0, y1))
    )


def _bar_clip(ctx: DetectionContext) -> PolygonClip:
    """Rectangle around the detected bar, or a band at mid base-to-cap height."""
    bbox = ctx.bbox
    pad = ctx.scale.eps + ctx.config.extractor.near_ratio * ctx.scale.stem_width
    bar = find_bar(ctx)
    if bar is not None:
        return _rectangle(bar.x0 - pad, bar.y0 - pad, bar.x1 + pad, bar.y1 + pad)

    metrics = ctx.metrics
    mid = metrics.baseline + (metrics.cap_height - metrics.baseline) / 2
    half = ctx.config.extractor.zone_ratio * bbox.height / 2
    return _rectangle(bbox.min_x - pad, mid - half, bbox.max_x + pad, mid + half)


def _clip_for(ctx: DetectionContext, feature: FeatureName) -> ClipBoundary | None:
    cfg = ctx.config.extractor
    metrics = ctx.metrics
    bbox = ctx.bbox
    base = metrics.baseline
    x_span = metrics.x_height - base

    if feature == FeatureName.APEX:
        y = metrics.cap_height + cfg.apex_clip_ratio * (metrics.ascent - metrics.cap_height)
        if y >= bbox.max_y:
            y = bbox.max_y - cfg.zone_ratio * bbox.height
        return HorizontalClip(y, keep_above=True)
    if feature == FeatureName.BAR:
        return _bar_clip(ctx)
    if feature == FeatureName.CROSS_STROKE:
        return HorizontalClip(metrics.x_height, keep_above=True)
    if feature == FeatureName.TAIL:
        return HorizontalClip(base, keep_above=False)
    if feature == FeatureName.CROTCH:
        return HorizontalClip(base + cfg.crotch_clip_ratio * x_span, keep_above=False)
    if feature == FeatureName.VERTEX:
        return HorizontalClip(base + cfg.vertex_clip_ratio * x_span, keep_above=False)
    return None


def feature_clip_boundary(
    name: str | FeatureName,
    outline: GlyphOutline,
    metrics: Metrics,
    font: FontInfo | None = None,
    config: DetectionConfig | None = None,
) -> ClipBoundary | None:
    """Clip boundary used when extracting a feature's segments.

    Returns:
        The boundary, or None for unknown names, unusable outlines and
        features without one
    """
    feature = resolve_feature(name)
    if feature is None:
        return None
    ctx = DetectionContext.create(outline, metrics, font, config, logger)
    if not ctx.usable:
        return None
    return _clip_for(ctx, feature)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def _top_zone(ctx: DetectionContext) -> BBox:
    bbox = ctx.bbox
    depth = ctx.config.extractor.zone_ratio * bbox.height
    return BBox(bbox.min_x, bbox.max_y - depth, bbox.max_x, bbox.max_y)


def _bottom_zone(ctx: DetectionContext) -> BBox:
    bbox = ctx.bbox
    depth = ctx.config.extractor.zone_ratio * bbox.height
    return BBox(bbox.min_x, bbox.min_y, bbox.max_x, bbox.min_y + depth)


@extractor(FeatureName.APEX)
def _apex(ctx: DetectionContext) -> FeatureHighlight | None:
    return _highlight(_in_zone(ctx.shape.segments, _top_zone(ctx)))


@extractor(FeatureName.VERTEX)
def _vertex(ctx: DetectionContext) -> FeatureHighlight | None:
    return _highlight(_in_zone(ctx.shape.segments, _bottom_zone(ctx)))


@extractor(FeatureName.TAIL)
def _tail(ctx: DetectionContext) -> FeatureHighlight | None:
    bbox = ctx.bbox
    zone = BBox(bbox.min_x, bbox.min_y, bbox.max_x, ctx.metrics.baseline)
    return _highlight(_in_zone(ctx.shape.segments, zone))


@extractor(FeatureName.STEM)
def _stem(ctx: DetectionContext) -> FeatureHighlight | None:
    ratio = ctx.config.extractor.aspect_ratio
    pad = ctx.scale.eps
    kept = []
    for stem in find_stems(ctx):
        zone = BBox(stem.x0 - pad, ctx.bbox.min_y, stem.x1 + pad, ctx.bbox.max_y)
        kept.extend(
            seg
            for seg in _in_zone(ctx.shape.segments, zone)
            if _is_vertical(seg, ratio) and seg not in kept
        )
    return _highlight(kept)


@extractor(FeatureName.BAR)
def _bar(ctx: DetectionContext) -> FeatureHighlight | None:
    ratio = ctx.config.extractor.loose_aspect_ratio
    return _highlight(seg for seg in ctx.shape.segments if _is_horizontal(seg, ratio))


@extractor(FeatureName.CROSS_STROKE)
def _cross_stroke(ctx: DetectionContext) -> FeatureHighlight | None:
    y = find_cross_stroke(ctx)
    if y is None:
        return None
    bbox = ctx.bbox
    reach = ctx.scale.stem_width + ctx.scale.eps
    zone = BBox(bbox.min_x, y - reach, bbox.max_x, y + reach)
    ratio = ctx.config.extractor.loose_aspect_ratio
    return _highlight(s for s in _in_zone(ctx.shape.segments, zone) if _is_horizontal(s, ratio))


@extractor(FeatureName.SERIF)
def _serif(ctx: DetectionContext) -> FeatureHighlight | None:
    cfg = ctx.config.extractor
    bbox = ctx.bbox
    edge = cfg.edge_zone_ratio * bbox.height
    max_length = cfg.serif_max_length_ratio * bbox.height

    kept: list[Segment] = []
    for serif in find_serifs(ctx):
        if serif.at_head:
            zone = BBox(serif.x0, bbox.max_y - edge, serif.x1, bbox.max_y)
        else:
            zone = BBox(serif.x0, bbox.min_y, serif.x1, bbox.min_y + edge)
        for seg in _in_zone(ctx.shape.segments, zone):
            short = seg.chord_length() <= max_length
            if (short or _is_horizontal(seg, cfg.aspect_ratio)) and seg not in kept:
                kept.append(seg)
    return _highlight(kept)


@extractor(FeatureName.FOOT)
def _foot(ctx: DetectionContext) -> FeatureHighlight | None:
    cfg = ctx.config.extractor
    bbox = ctx.bbox
    base = ctx.metrics.baseline
    edge = cfg.edge_zone_ratio * bbox.height
    zone = BBox(bbox.min_x, base - ctx.scale.eps, bbox.max_x, base + edge)
    return _highlight(
        s for s in _in_zone(ctx.shape.segments, zone) if _is_horizontal(s, cfg.aspect_ratio)
    )


@extractor(FeatureName.EAR)
def _ear(ctx: DetectionContext) -> FeatureHighlight | None:
    cfg = ctx.config.wedge
    bbox = ctx.bbox
    metrics = ctx.metrics
    cx = bbox.max_x - cfg.ear_center_x_ratio * bbox.width
    cy = metrics.x_height + cfg.ear_center_y_ratio * (metrics.ascent - metrics.x_height)
    r = cfg.ear_radius_ratio * bbox.width
    zone = BBox(cx - r, cy, cx + r, cy + r)
    return _highlight(_in_zone(ctx.shape.segments, zone))


@extractor(FeatureName.CROTCH)
def _crotch(ctx: DetectionContext) -> FeatureHighlight | None:
    cfg = ctx.config.wedge
    bbox = ctx.bbox
    metrics = ctx.metrics
    cx = bbox.center.x
    cy = metrics.baseline + cfg.crotch_center_y_ratio * (metrics.x_height - metrics.baseline)
    r = cfg.crotch_radius_ratio * bbox.width
    zone = BBox(cx - r, cy, cx + r, cy + r)
    return _highlight(_in_zone(ctx.shape.segments, zone))


@extractor(FeatureName.ARM)
def _arm(ctx: DetectionContext) -> FeatureHighlight | None:
    cfg = ctx.config.extractor
    bbox = ctx.bbox
    right = bbox.max_x - cfg.edge_zone_ratio * bbox.width
    return _highlight(
        seg
        for seg in ctx.shape.segments
        if _is_horizontal(seg, cfg.aspect_ratio) and seg.control_bbox().max_x >= right
    )


@extractor(FeatureName.BOWL)
def _bowl(ctx: DetectionContext) -> FeatureHighlight | None:
    holes = ctx.geometry.holes()
    curves = [seg for seg in ctx.shape.segments if seg.is_curve]
    if not holes:
        return _highlight(curves)
    hole = max(holes, key=lambda h: abs(h.area))
    zone = _padded(hole.bbox, ctx.scale.stem_width + ctx.scale.eps)
    return _highlight(_in_zone(curves, zone) or _in_zone(ctx.shape.segments, zone))


@extractor(FeatureName.EYE)
def _eye(ctx: DetectionContext) -> FeatureHighlight | None:
    center_y = ctx.bbox.center.y
    upper = [h for h in ctx.geometry.holes() if h.center.y > center_y]
    if not upper:
        return None
    return _contour_highlight(ctx, max(upper, key=lambda h: abs(h.area)).index)


@extractor(FeatureName.COUNTER)
def _counter(ctx: DetectionContext) -> FeatureHighlight | None:
    holes = ctx.geometry.holes()
    if holes:
        return _contour_highlight(ctx, max(holes, key=lambda h: abs(h.area)).index)

    result = get_counter(ctx)
    if not isinstance(result.shape, PolylineShape):
        return None
    zone = BBox.from_points(result.shape.points)
    return _highlight(_in_zone(ctx.shape.segments, zone))


@extractor(FeatureName.TITTLE)
def _tittle(ctx: DetectionContext) -> FeatureHighlight | None:
    x_height = ctx.metrics.x_height
    marks = [
        c
        for c in ctx.geometry.contours
        if c.kind == ContourClass.MARK and c.bbox.min_y > x_height
    ]
    if marks:
        return _contour_highlight(ctx, max(marks, key=lambda c: c.bbox.max_y).index)

    result = get_tittle(ctx)
    if not isinstance(result.shape, CircleShape):
        return None
    c = result.shape
    zone = BBox(c.cx - c.r, c.cy - c.r, c.cx + c.r, c.cy + c.r)
    return _highlight(_in_zone(ctx.shape.segments, zone))


def _stroke_end_segments(ctx: DetectionContext) -> FeatureHighlight | None:
    reach = ctx.config.extractor.near_ratio * ctx.bbox.width
    kept: list[Segment] = []
    for end in find_stroke_ends(ctx):
        c = end.center
        zone = BBox(c.x - reach, c.y - end.thickness, c.x + reach, c.y + end.thickness)
        kept.extend(seg for seg in _in_zone(ctx.shape.segments, zone) if seg not in kept)
    return _highlight(kept)


@extractor(FeatureName.TERMINAL)
def _terminal(ctx: DetectionContext) -> FeatureHighlight | None:
    return _stroke_end_segments(ctx)


@extractor(FeatureName.FINIAL)
def _finial(ctx: DetectionContext) -> FeatureHighlight | None:
    return _stroke_end_segments(ctx)


@extractor(FeatureName.APERTURE)
def _aperture(ctx: DetectionContext) -> FeatureHighlight | None:
    openings = find_openings(ctx)
    if not openings:
        return None

    bbox = ctx.bbox
    reach = ctx.config.extractor.near_ratio * bbox.width
    kept: list[Segment] = []
    for side in ("left", "right"):
        found = [o for o in openings if o.side == side]
        if not found:
            continue
        y0 = min(o.y for o in found)
        y1 = max(o.y for o in found)
        if side == "right":
            zone = BBox(min(o.edge for o in found) - reach, y0, bbox.max_x, y1)
        else:
            zone = BBox(bbox.min_x, y0, max(o.edge for o in found) + reach, y1)
        kept.extend(seg for seg in _in_zone(ctx.shape.segments, zone) if seg not in kept)
    return _highlight(kept)


@extractor(FeatureName.ARC)
def _arc(ctx: DetectionContext) -> FeatureHighlight | None:
    base = ctx.metrics.baseline
    top = ctx.top_line
    bbox = ctx.bbox
    limit = base + ctx.config.stroke.arc_open_ratio * (top - base)
    zone = BBox(bbox.min_x, bbox.min_y, bbox.max_x, limit)
    return _highlight(seg for seg in _in_zone(ctx.shape.segments, zone) if seg.is_curve)


@extractor(FeatureName.LOOP)
def _loop(ctx: DetectionContext) -> FeatureHighlight | None:
    base = ctx.metrics.baseline
    return _highlight(seg for seg in ctx.shape.segments if seg.control_bbox().max_y < base)


@extractor(FeatureName.SHOULDER)
def _shoulder(ctx: DetectionContext) -> FeatureHighlight | None:
    cfg = ctx.config.extractor
    bbox = ctx.bbox
    base = ctx.metrics.baseline
    top = ctx.top_line
    zone = BBox(
        bbox.min_x,
        base + cfg.shoulder_low_ratio * (top - base),
        bbox.max_x,
        base + cfg.shoulder_high_ratio * (top - base),
    )
    return _highlight(seg for seg in _in_zone(ctx.shape.segments, zone) if seg.is_curve)


@extractor(FeatureName.SPINE)
def _spine(ctx: DetectionContext) -> FeatureHighlight | None:
    bbox = ctx.bbox
    half = ctx.config.extractor.zone_ratio * bbox.height / 2
    center_y = bbox.center.y
    zone = BBox(bbox.min_x, center_y - half, bbox.max_x, center_y + half)
    return _highlight(_in_zone(ctx.shape.segments, zone))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def extract(
    name: str | FeatureName,
    outline: GlyphOutline,
    metrics: Metrics,
    font: FontInfo | None = None,
    config: DetectionConfig | None = None,
) -> FeatureHighlight | None:
    """Segments of the outline that belong to a feature.

    Returns:
        FeatureHighlight, or None for unknown names, unusable outlines,
        features without an extractor and failures
    """
    feature = resolve_feature(name)
    if feature is None or feature not in EXTRACTORS:
        return None

    ctx = DetectionContext.create(outline, metrics, font, config, logger).bind(
        feature=feature.value
    )
    if not ctx.usable:
        return None

    try:
        highlight = EXTRACTORS[feature](ctx)
        if highlight is None:
            return None
        boundary = _clip_for(ctx, feature)
        if boundary is None:
            return highlight
        return _highlight(clip_segments(highlight.segments, boundary), highlight.closed)
    except Exception as e:
        ctx.log.warning("Extractor failed", error=str(e), error_type=type(e).__name__)
        return None
