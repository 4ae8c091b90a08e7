"""Directional stroke detectors: tail, hook, arc, beak, arm, leg, shoulder, spine.

These read asymmetry in the probe pattern: ink on one side only, a run that
thickens at a free end, an edge that drifts as the scan moves down.
"""

from glyphanatomy.core.analysis import DetectionContext, span_containing
from glyphanatomy.core.detectors._common import (
    band_levels,
    find_openings,
    find_stems,
    has_curves,
)
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.core.detectors.cavities import has_loop
from glyphanatomy.domain import BBox, FeatureName


@detector(FeatureName.TAIL)
def has_tail(ctx: DetectionContext) -> bool:
    """Ink reaching well below the baseline without closing into a loop."""
    if not ctx.usable:
        return False

    metrics = ctx.metrics
    depth = metrics.baseline - metrics.descent
    if depth <= 0:
        return False
    if ctx.bbox.min_y > metrics.baseline - ctx.config.stroke.tail_min_depth_ratio * depth:
        return False
    return not has_loop(ctx)


def _free_space(runs: list[tuple[float, float]], y: float, downward: bool, floor: float) -> float:
    """White space between the run containing y and the next ink (or floor)."""
    containing = [run for run in runs if run[0] <= y <= run[1]]
    if not containing:
        return 0.0
    y0, y1 = containing[0]
    if downward:
        lower = [r[1] for r in runs if r[1] < y0]
        return y0 - (max(lower) if lower else floor)
    upper = [r[0] for r in runs if r[0] > y1]
    return (min(upper) if upper else floor) - y1


@detector(FeatureName.HOOK)
def has_hook(ctx: DetectionContext) -> bool:
    """A curved one-sided extension off a stem in the top or descender zone.

    The extension must reach hook_min_extension_ratio of the width past the
    stem on one side only, stop short of any other stem, and leave at least
    hook_clearance_ratio of the height open beneath (top zone) or above
    (descender zone).
    """
    if not ctx.usable:
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    stems = find_stems(ctx)
    if not stems:
        return False

    zone_height = cfg.hook_zone_ratio * bbox.height
    min_extension = cfg.hook_min_extension_ratio * bbox.width
    clearance = cfg.hook_clearance_ratio * bbox.height

    zones = [(BBox(bbox.min_x, bbox.max_y - zone_height, bbox.max_x, bbox.max_y), True)]
    if bbox.min_y < ctx.metrics.baseline:
        zones.append((BBox(bbox.min_x, bbox.min_y, bbox.max_x, bbox.min_y + zone_height), False))

    for zone, at_top in zones:
        if not has_curves(ctx, zone):
            continue
        for y in band_levels(zone.min_y, zone.max_y, cfg.hook_bands):
            spans = ctx.spans(y)
            for stem in stems:
                span = span_containing(spans, stem.center)
                if span is None:
                    continue
                others = [s for s in stems if s is not stem]
                if any(span[0] <= other.center <= span[1] for other in others):
                    continue
                right = span[1] - stem.x1
                left = stem.x0 - span[0]
                if right >= min_extension and left < min_extension / 2:
                    probe_x = (stem.x1 + span[1]) / 2
                elif left >= min_extension and right < min_extension / 2:
                    probe_x = (span[0] + stem.x0) / 2
                else:
                    continue
                floor = bbox.min_y if at_top else bbox.max_y
                space = _free_space(ctx.runs(probe_x), y, downward=at_top, floor=floor)
                if space >= clearance:
                    return True
    return False


@detector(FeatureName.ARC)
def has_arc(ctx: DetectionContext) -> bool:
    """A curved bottom stroke joining two uprights, open at the top (as in 'u')."""
    if not ctx.usable:
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    base = ctx.metrics.baseline
    top = ctx.top_line
    open_below = base + cfg.arc_open_ratio * (top - base)

    bowls = 0
    for ratio in cfg.arc_column_ratios:
        runs = ctx.runs(bbox.min_x + ratio * bbox.width)
        if len(runs) == 1 and runs[0][1] < open_below:
            bowls += 1
    if bowls < 2:
        return False

    uprights = ctx.spans(base + cfg.arc_upright_ratio * (top - base))
    if len(uprights) < 2:
        return False
    return has_curves(ctx, BBox(bbox.min_x, bbox.min_y, bbox.max_x, open_below))


@detector(FeatureName.BEAK)
def has_beak(ctx: DetectionContext) -> bool:
    """An arm's free end that thickens vertically, like a half serif."""
    if not ctx.usable:
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    end_runs = ctx.runs(bbox.max_x - cfg.beak_end_ratio * bbox.width)
    body_runs = ctx.runs(bbox.max_x - cfg.beak_body_ratio * bbox.width)
    if not end_runs or not body_runs:
        return False

    end = end_runs[-1]
    if end[1] < bbox.max_y - cfg.beak_zone_ratio * bbox.height:
        return False
    body = body_runs[-1]
    body_thickness = body[1] - body[0]
    return body_thickness > 0 and end[1] - end[0] >= cfg.beak_ratio * body_thickness


@detector(FeatureName.ARM)
def has_arm(ctx: DetectionContext) -> bool:
    """A thin horizontal stroke reaching inward from the right edge."""
    if not ctx.usable:
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    step = cfg.arm_step_ratio * bbox.width
    max_thickness = cfg.arm_max_thickness_ratio * bbox.height
    reach = bbox.max_x - cfg.arm_min_length_ratio * bbox.width

    x = bbox.max_x - step
    runs = ctx.runs(x)
    while not runs and x > bbox.min_x:
        x -= step
        runs = ctx.runs(x)

    for y0, y1 in runs:
        if y1 - y0 > max_thickness:
            continue
        span = span_containing(ctx.spans((y0 + y1) / 2), x)
        if span is not None and span[0] <= reach:
            return True
    return False


@detector(FeatureName.LEG)
def has_leg(ctx: DetectionContext) -> bool:
    """A stroke whose right edge moves steadily outward down the lower half."""
    if not ctx.usable:
        return False
    if not find_stems(ctx):
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    levels = band_levels(bbox.min_y, bbox.center.y, cfg.leg_bands)

    # Right edges from the middle downwards
    edges = []
    for y in reversed(levels):
        spans = ctx.spans(y)
        if spans:
            edges.append(spans[-1][1])

    eps = ctx.scale.eps
    run_start = 0
    for i in range(1, len(edges)):
        if edges[i] > edges[i - 1] + eps:
            length = i - run_start + 1
            shift = edges[i] - edges[run_start]
            if length >= cfg.leg_min_bands and shift >= cfg.leg_min_shift_ratio * bbox.width:
                return True
        else:
            run_start = i
    return False


@detector(FeatureName.SHOULDER)
def has_shoulder(ctx: DetectionContext) -> bool:
    """A curved arch leaving a stem, as in 'n' and 'h'."""
    if not ctx.usable:
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    base = ctx.metrics.baseline
    top = ctx.top_line
    mid = base + 0.5 * (top - base)
    arch_floor = base + cfg.shoulder_arch_ratio * (top - base)

    spans = ctx.spans(mid)
    if len(spans) < 2:
        return False
    gap_left, gap_right = spans[0][1], spans[1][0]
    if gap_right <= gap_left:
        return False

    arched = 0
    for ratio in cfg.shoulder_column_ratios:
        runs = ctx.runs(gap_left + ratio * (gap_right - gap_left))
        if runs and runs[0][0] > arch_floor:
            arched += 1
    if arched < cfg.shoulder_min_columns:
        return False
    return has_curves(ctx, BBox(gap_left, mid, gap_right, bbox.max_y))


@detector(FeatureName.SPINE)
def has_spine(ctx: DetectionContext) -> bool:
    """The diagonal middle stroke of 'S': openings on opposite sides, one span between."""
    if not ctx.usable:
        return False

    cfg = ctx.config.stroke
    bbox = ctx.bbox
    levels = [bbox.min_y + ratio * bbox.height for ratio in cfg.spine_level_ratios]
    center_y = bbox.center.y

    upper = {o.side for o in find_openings(ctx, [y for y in levels if y > center_y])}
    lower = {o.side for o in find_openings(ctx, [y for y in levels if y < center_y])}
    opposite = ("right" in upper and "left" in lower) or ("left" in upper and "right" in lower)
    if not opposite:
        return False

    if len(ctx.spans(center_y)) != 1:
        return False
    return any(seg.is_curve for seg in ctx.shape.segments)
