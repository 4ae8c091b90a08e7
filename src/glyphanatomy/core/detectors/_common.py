"""Probing helpers shared by several detector families.

- band_levels: Evenly spaced scan positions strictly between two lines
- find_stems: Thick vertical spans grouped across consecutive bands
- find_openings: Side gaps enclosed by ink above and below (apertures)
- trace_region: Radial sweep from a seed point
- corner_points: Outline junctions where the tangent turns sharply
"""

import math
from dataclasses import dataclass

from glyphanatomy.core._bezier import start_tangent
from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.domain import BBox, Point2D


@dataclass(frozen=True, slots=True)
class Stem:
    """A vertical stroke seen as thick spans in consecutive bands.

    Attributes:
        x0: Mean left edge
        x1: Mean right edge
        levels: Band Y positions where the stem was seen, bottom to top
    """

    x0: float
    x1: float
    levels: tuple[float, ...]

    @property
    def center(self) -> float:
        return (self.x0 + self.x1) / 2

    @property
    def width(self) -> float:
        return self.x1 - self.x0


@dataclass(frozen=True, slots=True)
class Opening:
    """A side gap between the outermost ink and the bbox edge.

    Attributes:
        side: "left" or "right"
        y: Scan level
        edge: X of the ink edge facing the gap
        gap: Gap width
    """

    side: str
    y: float
    edge: float
    gap: float


def band_levels(low: float, high: float, count: int) -> list[float]:
    """count evenly spaced levels strictly between low and high."""
    if count <= 0 or high <= low:
        return []
    step = (high - low) / (count + 1)
    return [low + step * (i + 1) for i in range(count)]


def span_width(span: tuple[float, float]) -> float:
    return span[1] - span[0]


def ink_extent(spans: list[tuple[float, float]]) -> float:
    """Distance from the first span's left edge to the last span's right edge."""
    if not spans:
        return 0.0
    return spans[-1][1] - spans[0][0]


def stem_threshold(ctx: DetectionContext) -> float:
    """Minimum span width that counts as a stem."""
    upm = ctx.font.units_per_em
    ratio = ctx.config.stem.thickness_upm_ratio
    return upm * ratio * ctx.font.transform_scale + ctx.scale.upm_eps


def find_stems(ctx: DetectionContext) -> list[Stem]:
    """Group thick spans whose centres line up across consecutive bands.

    Bands run between the baseline and the glyph's top line (cap height for
    tall glyphs, x-height otherwise).
    """
    cfg = ctx.config.stem
    thick = stem_threshold(ctx)
    tolerance = max(ctx.scale.eps, cfg.group_tolerance_ratio * ctx.scale.stem_width)
    levels = band_levels(ctx.metrics.baseline, ctx.top_line, cfg.bands)

    # Each group: list of (band index, y, x0, x1)
    groups: list[list[tuple[int, float, float, float]]] = []
    for index, y in enumerate(levels):
        for x0, x1 in ctx.spans(y):
            if x1 - x0 <= thick:
                continue
            mid = (x0 + x1) / 2
            for group in groups:
                last_index, _, gx0, gx1 = group[-1]
                if last_index == index - 1 and abs((gx0 + gx1) / 2 - mid) <= tolerance:
                    group.append((index, y, x0, x1))
                    break
            else:
                groups.append([(index, y, x0, x1)])

    stems = []
    for group in groups:
        if len(group) < cfg.min_bands:
            continue
        stems.append(
            Stem(
                x0=sum(g[2] for g in group) / len(group),
                x1=sum(g[3] for g in group) / len(group),
                levels=tuple(g[1] for g in group),
            )
        )
    ctx.log.debug("Stems found", count=len(stems), threshold=round(thick, 2))
    return stems


def enclosed_vertically(ctx: DetectionContext, x: float, y: float) -> bool:
    """True when the vertical line at x has ink both above and below y."""
    runs = ctx.runs(x)
    above = any(y0 > y for y0, _ in runs)
    below = any(y1 < y for _, y1 in runs)
    return above and below


def find_openings(ctx: DetectionContext, levels: list[float] | None = None) -> list[Opening]:
    """Side gaps at least max(stem * gap_stem_ratio, W * gap_width_ratio) wide.

    A gap only counts when the column through its middle has ink above and
    below the scan level.
    """
    cavity = ctx.config.cavity
    bbox = ctx.bbox
    min_gap = max(
        ctx.scale.stem_width * cavity.aperture_gap_stem_ratio,
        bbox.width * cavity.aperture_gap_width_ratio,
    )
    if levels is None:
        levels = band_levels(bbox.min_y, bbox.max_y, cavity.aperture_levels)

    openings = []
    for y in levels:
        spans = ctx.spans(y)
        if not spans:
            continue

        right_edge = spans[-1][1]
        right_gap = bbox.max_x - right_edge
        if right_gap >= min_gap and enclosed_vertically(ctx, (right_edge + bbox.max_x) / 2, y):
            openings.append(Opening("right", y, right_edge, right_gap))

        left_edge = spans[0][0]
        left_gap = left_edge - bbox.min_x
        if left_gap >= min_gap and enclosed_vertically(ctx, (bbox.min_x + left_edge) / 2, y):
            openings.append(Opening("left", y, left_edge, left_gap))
    return openings


def _exit_point(origin: Point2D, angle: float, bbox: BBox) -> Point2D:
    dx = math.cos(angle)
    dy = math.sin(angle)
    limits = []
    if dx > 1e-12:
        limits.append((bbox.max_x - origin.x) / dx)
    elif dx < -1e-12:
        limits.append((bbox.min_x - origin.x) / dx)
    if dy > 1e-12:
        limits.append((bbox.max_y - origin.y) / dy)
    elif dy < -1e-12:
        limits.append((bbox.min_y - origin.y) / dy)
    t = max(0.0, min(limits)) if limits else 0.0
    return Point2D(origin.x + t * dx, origin.y + t * dy)


def trace_region(
    ctx: DetectionContext,
    seed: Point2D,
    step_degrees: float,
    outermost: bool = False,
) -> list[Point2D]:
    """Sweep rays from a seed and record one boundary point per ray.

    Args:
        ctx: Detection context
        seed: Start point of every ray
        step_degrees: Angle between consecutive rays
        outermost: Record the last hit on each ray instead of the first

    Returns:
        Closed polyline (first point not repeated); rays that hit nothing
        end at the bbox edge
    """
    steps = max(1, int(round(360 / step_degrees)))
    points = []
    for k in range(steps):
        angle = math.radians(k * 360 / steps)
        hits = ctx.ray(seed, angle)
        if hits:
            points.append(hits[-1] if outermost else hits[0])
        else:
            points.append(_exit_point(seed, angle, ctx.bbox))
    return points


def _end_tangent(points: tuple[Point2D, ...]) -> tuple[float, float]:
    bx, by = start_tangent(points[::-1])
    return (-bx, -by)


def corner_points(ctx: DetectionContext) -> list[Point2D]:
    """Segment junctions where the outline turns by at least corner_angle_degrees."""
    shape = ctx.shape
    min_turn = math.radians(ctx.config.convergence.corner_angle_degrees)

    corners = []
    for start, end in shape.contours:
        count = end - start
        for i in range(start, end):
            seg = shape.segments[i]
            nxt = shape.segments[start + (i - start + 1) % count]
            ax, ay = _end_tangent(seg.points)
            bx, by = start_tangent(nxt.points)
            dot = max(-1.0, min(1.0, ax * bx + ay * by))
            if math.acos(dot) >= min_turn:
                corners.append(seg.end)
    return corners


def has_curves(ctx: DetectionContext, zone: BBox) -> bool:
    """True when any curve segment's control box touches the zone."""
    return any(
        seg.is_curve and seg.control_bbox().overlaps(zone) for seg in ctx.shape.segments
    )
