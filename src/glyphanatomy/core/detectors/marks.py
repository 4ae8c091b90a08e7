"""Tittle detection (the dot of 'i' and 'j')."""

from glyphanatomy.core.analysis import ContourClass, DetectionContext
from glyphanatomy.core.detectors._common import band_levels, span_width
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.domain import CircleShape, FeatureName, FeatureResult, Point2D


def _mark_circle(ctx: DetectionContext) -> CircleShape | None:
    """Circle from the highest separate mark contour above the x-height."""
    cfg = ctx.config.tittle
    x_height = ctx.metrics.x_height
    marks = [
        c
        for c in ctx.geometry.contours
        if c.kind == ContourClass.MARK and c.bbox.min_y > x_height
    ]
    if not marks:
        return None

    mark = max(marks, key=lambda c: c.bbox.max_y)
    r = max(cfg.min_radius_units, min(mark.bbox.width, mark.bbox.height) / 2)
    center = mark.bbox.center
    return CircleShape(center.x, center.y, r)


def _scanned_circle(ctx: DetectionContext) -> CircleShape | None:
    """Circle from narrow ink found by scanning the band above the x-height.

    Used when the dot is drawn as part of a larger contour or the contour
    classifier missed it.
    """
    cfg = ctx.config.tittle
    bbox = ctx.bbox
    low = ctx.metrics.x_height + cfg.min_gap_ratio * bbox.height
    if bbox.max_y <= low:
        return None

    best: CircleShape | None = None
    for y in band_levels(low, bbox.max_y, cfg.bands):
        narrow = [s for s in ctx.spans(y) if span_width(s) < cfg.max_width_ratio * bbox.width]
        if not narrow:
            continue
        x0, x1 = min(narrow, key=span_width)
        cx = (x0 + x1) / 2
        runs = [run for run in ctx.runs(cx) if run[0] <= y <= run[1]]
        # Ink continuing down into the body is an ascender, not a dot
        if not runs or runs[0][0] <= ctx.metrics.x_height:
            continue
        y0, y1 = runs[0]
        r = max(cfg.min_radius_units, min(x1 - x0, y1 - y0) / 2)
        if best is None or r > best.r:
            best = CircleShape(cx, (y0 + y1) / 2, r)
    return best


@detector(FeatureName.TITTLE)
def get_tittle(ctx: DetectionContext) -> FeatureResult:
    """Small mark above the x-height, returned as a circle."""
    if not ctx.usable:
        return FeatureResult.not_found()

    circle = _mark_circle(ctx) or _scanned_circle(ctx)
    if circle is None:
        return FeatureResult.not_found()
    return FeatureResult(found=True, shape=circle, location=Point2D(circle.cx, circle.cy))
