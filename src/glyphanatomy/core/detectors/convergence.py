"""Apex and vertex detection.

Both look for two strokes meeting in a point: at the top of the glyph for an
apex, at the bottom for a vertex. The probe is the same, mirrored:

1. Pick grid points inside the ink near the tip.
2. Cast two rays from each, angled away from each other towards the tip.
3. The last hits of the pair must be level and close together.
4. The ink must narrow towards the tip and end at a corner.
"""

import math
from dataclasses import dataclass

from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.core.detectors._common import corner_points, ink_extent
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.domain import FeatureName, FeatureResult, Point2D


@dataclass(frozen=True, slots=True)
class Convergence:
    """Two ray hits meeting near the tip."""

    left: Point2D
    right: Point2D

    @property
    def midpoint(self) -> Point2D:
        return Point2D((self.left.x + self.right.x) / 2, (self.left.y + self.right.y) / 2)

    @property
    def x_diff(self) -> float:
        return abs(self.right.x - self.left.x)

    @property
    def y_diff(self) -> float:
        return abs(self.right.y - self.left.y)


def _narrows(ctx: DetectionContext, tip_y: float, body_y: float) -> bool:
    tip = ink_extent(ctx.spans(tip_y))
    body = ink_extent(ctx.spans(body_y))
    return body > 0 and tip < ctx.config.convergence.convergence_ratio * body


def find_convergence(ctx: DetectionContext, upward: bool) -> Convergence | None:
    """Search for strokes converging at the top (upward) or bottom of the glyph.

    Returns:
        The tightest qualifying pair of hits, or None
    """
    cfg = ctx.config.convergence
    bbox = ctx.bbox
    width, height = bbox.width, bbox.height
    sign = 1 if upward else -1
    tip = bbox.max_y if upward else bbox.min_y

    if not _narrows(
        ctx,
        tip - sign * cfg.tip_level_ratio * height,
        tip - sign * cfg.body_level_ratio * height,
    ):
        return None

    italic = ctx.font.italic_angle
    spread = cfg.ray_angle_degrees
    if upward:
        angles = (math.radians(spread + italic), math.radians(180 - spread + italic))
    else:
        angles = (math.radians(180 + spread + italic), math.radians(360 - spread + italic))

    # Hits may land slightly past the tip (overshoot) but not deep in the body
    inward = cfg.band_ratio * height
    outward = cfg.band_ratio / 2 * height
    band_low = tip - inward if upward else tip - outward
    band_high = tip + outward if upward else tip + inward
    y_tolerance = max(ctx.scale.eps * cfg.y_tolerance_eps, cfg.y_tolerance_ratio * height)
    length = cfg.ray_length_ratio * max(width, height)

    best: Convergence | None = None
    for level in cfg.probe_level_ratios:
        y = tip - sign * level * height
        for ratio in cfg.probe_x_ratios:
            origin = Point2D(bbox.min_x + ratio * width, y)
            if not ctx.inside(origin):
                continue
            first = ctx.ray(origin, angles[0], length)
            second = ctx.ray(origin, angles[1], length)
            if not first or not second:
                continue
            a, b = first[-1], second[-1]
            pair = Convergence(left=min(a, b, key=lambda p: p.x), right=max(a, b, key=lambda p: p.x))
            if not all(band_low <= p.y <= band_high for p in (a, b)):
                continue
            if pair.y_diff >= y_tolerance or pair.x_diff >= cfg.ridge_ratio * width:
                continue
            if best is None or pair.x_diff < best.x_diff:
                best = pair
    return best


def _corner_near(ctx: DetectionContext, point: Point2D) -> bool:
    cfg = ctx.config.convergence
    radius = max(ctx.scale.eps * cfg.corner_radius_eps, cfg.corner_radius_ratio * ctx.bbox.width)
    return any(corner.distance_to(point) <= radius for corner in corner_points(ctx))


def _label(ctx: DetectionContext, found: Convergence) -> str:
    cfg = ctx.config.convergence
    sharp = max(ctx.scale.eps * cfg.sharp_eps, cfg.sharp_ratio * ctx.bbox.width)
    return "sharp" if found.x_diff < sharp else "ridge"


def _converging(ctx: DetectionContext, upward: bool) -> FeatureResult:
    found = find_convergence(ctx, upward)
    if found is None or not _corner_near(ctx, found.midpoint):
        return FeatureResult.not_found()
    label = _label(ctx, found)
    ctx.log.debug("Convergence found", upward=upward, label=label, x_diff=round(found.x_diff, 2))
    return FeatureResult(found=True, location=found.midpoint, label=label)


@detector(FeatureName.APEX)
def has_apex(ctx: DetectionContext) -> FeatureResult:
    """Strokes meeting at the top, labelled "sharp" or "ridge"."""
    if not ctx.usable:
        return FeatureResult.not_found()
    return _converging(ctx, upward=True)


@detector(FeatureName.VERTEX)
def has_vertex(ctx: DetectionContext) -> FeatureResult:
    """Strokes meeting at the bottom, labelled "sharp" or "ridge"."""
    if not ctx.usable:
        return FeatureResult.not_found()
    return _converging(ctx, upward=False)
