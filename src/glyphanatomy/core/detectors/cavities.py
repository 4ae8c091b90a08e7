"""Cavity detectors: counter, bowl, eye, aperture, loop, link, neck.

All of these look for white space bounded by ink. Counters and bowls come
with a traced polyline so callers can draw the region.
"""

from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.core.detectors._common import (
    band_levels,
    find_openings,
    find_stems,
    ink_extent,
    span_width,
    trace_region,
)
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.domain import FeatureName, FeatureResult, Point2D, PolylineShape


def _enclosed_gaps(ctx: DetectionContext, y: float) -> list[tuple[float, float]]:
    """Gaps between spans at y whose middle column has ink above or below."""
    spans = ctx.spans(y)
    gaps = []
    for (_, left), (right, _) in zip(spans, spans[1:]):
        if right <= left:
            continue
        runs = ctx.runs((left + right) / 2)
        if any(y0 > y for y0, _ in runs) or any(y1 < y for _, y1 in runs):
            gaps.append((left, right))
    return gaps


def find_counter_seed(ctx: DetectionContext) -> Point2D | None:
    """A point in white space enclosed left and right by ink.

    Scans counter_bands levels over the bbox. At least counter_min_bands of
    them must hold an enclosed gap; the widest gap of the level closest to
    the bbox centre supplies the seed, nudged sideways until the oracle
    confirms it is outside the ink.
    """
    cavity = ctx.config.cavity
    bbox = ctx.bbox
    levels = band_levels(bbox.min_y, bbox.max_y, cavity.counter_bands)

    candidates = []
    for y in levels:
        gaps = _enclosed_gaps(ctx, y)
        if gaps:
            candidates.append((y, max(gaps, key=span_width)))
    if len(candidates) < cavity.counter_min_bands:
        return None

    center_y = bbox.center.y
    y, (left, right) = min(candidates, key=lambda item: abs(item[0] - center_y))
    mid = (left + right) / 2
    nudge = cavity.nudge_ratio * bbox.width
    for step in cavity.nudge_steps:
        seed = Point2D(mid + step * nudge, y)
        if left < seed.x < right and not ctx.inside(seed):
            return seed
    ctx.log.debug("Counter seed rejected by oracle", y=round(y, 1))
    return None


@detector(FeatureName.COUNTER)
def get_counter(ctx: DetectionContext) -> FeatureResult:
    """Enclosed or partly enclosed white space, traced as a polyline."""
    if not ctx.usable:
        return FeatureResult.not_found()

    seed = find_counter_seed(ctx)
    if seed is None:
        return FeatureResult.not_found()

    cavity = ctx.config.cavity
    points = trace_region(ctx, seed, cavity.trace_step_degrees)
    if len(points) < cavity.min_trace_points:
        return FeatureResult.not_found()
    return FeatureResult(found=True, shape=PolylineShape(tuple(points)), location=seed)


@detector(FeatureName.BOWL)
def has_bowl(ctx: DetectionContext) -> FeatureResult:
    """Curved stroke enclosing a counter.

    Columns inside the bbox margin must cross the outline at least
    bowl_min_hits times in bowl_min_columns places, and the glyph must either
    have a hole or be built from curves.
    """
    if not ctx.usable:
        return FeatureResult.not_found()

    cavity = ctx.config.cavity
    bbox = ctx.bbox
    margin = cavity.bowl_margin_ratio * bbox.width
    columns = band_levels(bbox.min_x + margin, bbox.max_x - margin, cavity.bowl_columns)
    crossing = sum(1 for x in columns if 2 * len(ctx.runs(x)) >= cavity.bowl_min_hits)
    if crossing < cavity.bowl_min_columns:
        return FeatureResult.not_found()

    holes = ctx.geometry.holes()
    if not holes and not any(seg.is_curve for seg in ctx.shape.segments):
        return FeatureResult.not_found()

    if holes:
        seed = max(holes, key=lambda h: abs(h.area)).center
    else:
        seed = find_counter_seed(ctx)
    if seed is None:
        return FeatureResult(found=True)

    points = trace_region(ctx, seed, cavity.bowl_trace_step_degrees, outermost=True)
    if len(points) < cavity.bowl_min_outline_points:
        return FeatureResult(found=True, location=seed)
    return FeatureResult(found=True, shape=PolylineShape(tuple(points)), location=seed)


def _aperture_sides(ctx: DetectionContext) -> dict[str, int]:
    counts: dict[str, int] = {}
    for opening in find_openings(ctx):
        counts[opening.side] = counts.get(opening.side, 0) + 1
    return counts


@detector(FeatureName.APERTURE)
def has_aperture(ctx: DetectionContext) -> bool:
    """A partly enclosed side opening seen at several levels."""
    if not ctx.usable:
        return False
    counts = _aperture_sides(ctx)
    return any(n >= ctx.config.cavity.aperture_min_levels for n in counts.values())


@detector(FeatureName.EYE)
def get_eye(ctx: DetectionContext) -> FeatureResult:
    """The closed upper counter of an 'e': a hole above centre next to an aperture."""
    if not ctx.usable:
        return FeatureResult.not_found()

    center_y = ctx.bbox.center.y
    upper = [h for h in ctx.geometry.holes() if h.center.y > center_y]
    if not upper or not has_aperture(ctx):
        return FeatureResult.not_found()

    hole = max(upper, key=lambda h: abs(h.area))
    points = trace_region(ctx, hole.center, ctx.config.cavity.trace_step_degrees)
    return FeatureResult(found=True, shape=PolylineShape(tuple(points)), location=hole.center)


@detector(FeatureName.LOOP)
def has_loop(ctx: DetectionContext) -> bool:
    """A closed or nearly closed stroke below the baseline."""
    if not ctx.usable:
        return False

    cavity = ctx.config.cavity
    base = ctx.metrics.baseline
    bbox = ctx.bbox
    if bbox.min_y >= base - ctx.scale.eps:
        return False

    if any(h.bbox.max_y < base for h in ctx.geometry.holes()):
        return True
    for y in band_levels(bbox.min_y, base, cavity.loop_bands):
        if 2 * len(ctx.spans(y)) >= cavity.loop_min_hits:
            return True
    for x in band_levels(bbox.min_x, bbox.max_x, cavity.loop_bands - 1):
        # Runs that start and end below the baseline
        below = [run for run in ctx.runs(x) if run[1] < base]
        if 2 * len(below) >= cavity.loop_min_hits:
            return True
    return False


@detector(FeatureName.LINK)
def has_link(ctx: DetectionContext) -> bool:
    """A narrow stroke near the baseline joining a bowl above to a loop below."""
    if not ctx.usable:
        return False

    cavity = ctx.config.cavity
    metrics = ctx.metrics
    bbox = ctx.bbox
    depth = metrics.baseline - metrics.descent
    if depth <= 0 or bbox.min_y > metrics.baseline - cavity.link_min_descent_ratio * depth:
        return False

    low = metrics.baseline - 0.5 * depth
    high = metrics.baseline + 0.5 * (metrics.x_height - metrics.baseline)
    max_width = cavity.link_max_width_ratio * bbox.width
    profile = [(y, ctx.spans(y)) for y in band_levels(bbox.min_y, bbox.max_y, 2 * cavity.link_bands)]

    def wider(spans: list[tuple[float, float]], width: float) -> bool:
        return len(spans) >= 2 or ink_extent(spans) > cavity.link_extent_ratio * width

    for i, (y, spans) in enumerate(profile):
        if not low <= y <= high or len(spans) != 1:
            continue
        width = span_width(spans[0])
        if width >= max_width:
            continue
        below = any(wider(s, width) for _, s in profile[:i])
        above = any(wider(s, width) for _, s in profile[i + 1 :])
        if below and above:
            return True
    return False


@detector(FeatureName.NECK)
def has_neck(ctx: DetectionContext) -> bool:
    """A pinch on the stem where two diagonal strokes meet it, as in 'K'."""
    if not ctx.usable:
        return False

    stroke = ctx.config.stroke
    base = ctx.metrics.baseline
    top = ctx.bbox.max_y
    levels = band_levels(
        base + stroke.neck_zone_low_ratio * (top - base),
        base + stroke.neck_zone_high_ratio * (top - base),
        stroke.neck_bands,
    )
    stems = find_stems(ctx)
    if not stems:
        return False

    profile = [ctx.spans(y) for y in levels]
    for i, spans in enumerate(profile):
        if len(spans) != 1:
            continue
        x0, x1 = spans[0]
        if not any(x0 <= stem.center <= x1 for stem in stems):
            continue
        below = [ink_extent(s) for s in profile[:i] if len(s) >= 2]
        above = [ink_extent(s) for s in profile[i + 1 :] if len(s) >= 2]
        if not below or not above:
            continue
        if x1 - x0 < stroke.neck_width_ratio * min(max(below), max(above)):
            return True
    return False
