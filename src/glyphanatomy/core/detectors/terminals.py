"""Stroke-end classification: terminal and finial.

Stroke ends are found next to an aperture: a vertical probe close to the
open side of the glyph meets the stroke just above and just below the
opening. Each end is compared with the same stroke further in.
"""

import math
import statistics
from dataclasses import dataclass

from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.core.detectors._common import find_openings
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.core.intersection import ray_hits
from glyphanatomy.domain import CircleShape, FeatureName, FeatureResult, Point2D


@dataclass(frozen=True, slots=True)
class StrokeEnd:
    """A stroke end beside an opening.

    Attributes:
        center: Middle of the vertical run at the end probe column
        thickness: Height of that run
        body_thickness: Height of the same stroke body_offset_ratio further in
        outward: Direction (radians) pointing out through the opening side
    """

    center: Point2D
    thickness: float
    body_thickness: float
    outward: float


def _nearest_run(runs: list[tuple[float, float]], y: float) -> tuple[float, float] | None:
    if not runs:
        return None
    return min(runs, key=lambda run: abs((run[0] + run[1]) / 2 - y))


def find_stroke_ends(ctx: DetectionContext) -> list[StrokeEnd]:
    """Stroke ends above and below the first opening found on each side."""
    cfg = ctx.config.terminal
    bbox = ctx.bbox
    levels = [bbox.min_y + ratio * bbox.height for ratio in cfg.opening_level_ratios]
    max_run = cfg.max_run_ratio * bbox.height

    ends: list[StrokeEnd] = []
    seen_sides: set[str] = set()
    for opening in find_openings(ctx, levels):
        if opening.side in seen_sides:
            continue
        seen_sides.add(opening.side)

        if opening.side == "right":
            x = bbox.max_x - cfg.region_x_ratio * bbox.width
            body_x = x - cfg.body_offset_ratio * bbox.width
            outward = 0.0
        else:
            x = bbox.min_x + cfg.region_x_ratio * bbox.width
            body_x = x + cfg.body_offset_ratio * bbox.width
            outward = math.pi

        runs = ctx.runs(x)
        above = [r for r in runs if r[0] > opening.y]
        below = [r for r in runs if r[1] < opening.y]
        candidates = []
        if above:
            candidates.append(above[0])
        if below:
            candidates.append(below[-1])

        body_runs = ctx.runs(body_x)
        for y0, y1 in candidates:
            thickness = y1 - y0
            if thickness <= 0 or thickness > max_run:
                continue
            mid = (y0 + y1) / 2
            body = _nearest_run(body_runs, mid)
            if body is None:
                continue
            ends.append(
                StrokeEnd(
                    center=Point2D(x, mid),
                    thickness=thickness,
                    body_thickness=body[1] - body[0],
                    outward=outward,
                )
            )
    ctx.log.debug("Stroke ends", count=len(ends))
    return ends


def _ball_radius(ctx: DetectionContext, end: StrokeEnd) -> float | None:
    """Mean radius when radial probes from the end centre are evenly long."""
    cfg = ctx.config.terminal
    distances = []
    for k in range(cfg.ball_rays):
        hits = ctx.ray(end.center, 2 * math.pi * k / cfg.ball_rays)
        if not hits:
            return None
        distances.append(hits[0].distance_to(end.center))

    mean = statistics.fmean(distances)
    if mean <= 0:
        return None
    if statistics.pstdev(distances) / mean >= cfg.ball_roundness:
        return None
    if mean >= cfg.ball_max_radius_ratio * ctx.bbox.height:
        return None
    if 2 * mean < cfg.ball_min_thickness_ratio * end.body_thickness:
        return None
    return mean


def classify_end(ctx: DetectionContext, end: StrokeEnd) -> FeatureResult:
    """Classify a stroke end as ball, teardrop or clean; the first match wins."""
    cfg = ctx.config.terminal
    center = end.center

    radius = _ball_radius(ctx, end)
    if radius is not None:
        return FeatureResult(
            found=True, shape=CircleShape(center.x, center.y, radius), location=center, label="ball"
        )

    if end.body_thickness > 0 and end.thickness >= cfg.teardrop_ratio * end.body_thickness:
        return FeatureResult(
            found=True,
            shape=CircleShape(center.x, center.y, end.thickness / 2),
            location=center,
            label="teardrop",
        )

    length = cfg.clean_probe_ratio * ctx.bbox.width
    hits = ray_hits(ctx.shape, center, end.outward, length, ctx.config)
    if len(hits) <= cfg.clean_max_hits:
        return FeatureResult(found=True, location=center, label="clean")
    return FeatureResult.not_found()


@detector(FeatureName.TERMINAL)
def get_terminal(ctx: DetectionContext) -> FeatureResult:
    """First classifiable stroke end."""
    if not ctx.usable:
        return FeatureResult.not_found()

    for end in find_stroke_ends(ctx):
        result = classify_end(ctx, end)
        if result.found:
            return result
    return FeatureResult.not_found()


@detector(FeatureName.FINIAL)
def has_finial(ctx: DetectionContext) -> bool:
    """A stroke end thinner than finial_taper_ratio of the stroke body."""
    if not ctx.usable:
        return False

    taper = ctx.config.terminal.finial_taper_ratio
    return any(end.thickness < taper * end.body_thickness for end in find_stroke_ends(ctx))
