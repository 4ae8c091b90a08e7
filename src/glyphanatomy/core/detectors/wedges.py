"""Wedge-probe detectors: ear, spur, crotch.

Each casts an arc at a fixed spot relative to the bbox and metrics and
counts how often the outline crosses it.
"""

from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.domain import FeatureName


def wedge_hits(
    ctx: DetectionContext, cx: float, cy: float, r: float, start: float, sweep: float
) -> int:
    """Number of outline crossings on the arc."""
    hits = ctx.arc(cx, cy, r, start, sweep)
    ctx.log.debug(
        "Wedge probe",
        center=(round(cx, 1), round(cy, 1)),
        radius=round(r, 1),
        hits=len(hits),
    )
    return len(hits)


@detector(FeatureName.EAR)
def has_ear(ctx: DetectionContext) -> bool:
    """Small stroke at the top right, probed by an upward wedge above the x-height."""
    if not ctx.usable:
        return False

    cfg = ctx.config.wedge
    bbox = ctx.bbox
    metrics = ctx.metrics
    cx = bbox.max_x - cfg.ear_center_x_ratio * bbox.width
    cy = metrics.x_height + cfg.ear_center_y_ratio * (metrics.ascent - metrics.x_height)
    r = cfg.ear_radius_ratio * bbox.width
    hits = wedge_hits(ctx, cx, cy, r, cfg.ear_start_degrees, cfg.ear_sweep_degrees)
    return hits >= cfg.ear_min_hits


@detector(FeatureName.SPUR)
def has_spur(ctx: DetectionContext) -> bool:
    """Small projection at the bottom left, probed by a downward wedge."""
    if not ctx.usable:
        return False

    cfg = ctx.config.wedge
    bbox = ctx.bbox
    metrics = ctx.metrics
    cx = bbox.min_x + cfg.spur_center_x_ratio * bbox.width
    cy = metrics.descent + cfg.spur_center_y_ratio * (metrics.baseline - metrics.descent)
    r = cfg.spur_radius_ratio * bbox.width
    hits = wedge_hits(ctx, cx, cy, r, cfg.spur_start_degrees, cfg.spur_sweep_degrees)
    return hits >= cfg.spur_min_hits


@detector(FeatureName.CROTCH)
def has_crotch(ctx: DetectionContext) -> bool:
    """Interior angle between two limbs, probed by a narrow upward wedge."""
    if not ctx.usable:
        return False

    cfg = ctx.config.wedge
    bbox = ctx.bbox
    metrics = ctx.metrics
    cx = bbox.center.x
    cy = metrics.baseline + cfg.crotch_center_y_ratio * (metrics.x_height - metrics.baseline)
    r = cfg.crotch_radius_ratio * bbox.width
    hits = wedge_hits(ctx, cx, cy, r, cfg.crotch_start_degrees, cfg.crotch_sweep_degrees)
    return hits >= cfg.crotch_min_hits
