"""Horizontal banding detectors: stem, bar, cross stroke, serif, foot, bracket."""

from dataclasses import dataclass

from glyphanatomy.core.analysis import DetectionContext, span_containing
from glyphanatomy.core.detectors._common import (
    Stem,
    band_levels,
    find_stems,
    has_curves,
    span_width,
)
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.domain import BBox, FeatureName


@dataclass(frozen=True, slots=True)
class BarRun:
    """A thin horizontal stroke found by vertical probing.

    Attributes:
        y0: Bottom of the stroke
        y1: Top of the stroke
        x0: Left end of the horizontal span through the stroke
        x1: Right end of that span
    """

    y0: float
    y1: float
    x0: float
    x1: float


@dataclass(frozen=True, slots=True)
class SerifSpan:
    """A widened span at the foot or head of a stem."""

    stem: Stem
    x0: float
    x1: float
    y: float
    at_head: bool


@detector(FeatureName.STEM)
def has_stem(ctx: DetectionContext) -> bool:
    """Thick spans lined up over at least min_bands consecutive bands."""
    if not ctx.usable:
        return False
    return bool(find_stems(ctx))


def find_bar(ctx: DetectionContext) -> BarRun | None:
    """Locate a bar with vertical probes at the central columns.

    A column qualifies when it has a run thinner than max_thickness_ratio of
    the height, away from the top and bottom edges, whose horizontal span is
    at least min_aspect times wider than the run is thick. Qualifying runs
    must agree in height and span width over min_columns columns.
    """
    cfg = ctx.config.bar
    bbox = ctx.bbox
    margin = cfg.edge_margin_ratio * bbox.height
    max_thickness = cfg.max_thickness_ratio * bbox.height

    found: list[BarRun] = []
    for ratio in cfg.column_ratios:
        x = bbox.min_x + ratio * bbox.width
        for y0, y1 in ctx.runs(x):
            thickness = y1 - y0
            if thickness > max_thickness:
                continue
            if y0 < bbox.min_y + margin or y1 > bbox.max_y - margin:
                continue
            span = span_containing(ctx.spans((y0 + y1) / 2), x)
            if span is None or span_width(span) < cfg.min_aspect * thickness:
                continue
            found.append(BarRun(y0, y1, span[0], span[1]))
            break

    if len(found) < cfg.min_columns:
        return None

    anchor = found[0]
    tolerance = cfg.width_tolerance_ratio * bbox.width
    agreeing = [
        run
        for run in found
        if abs((run.y0 + run.y1) / 2 - (anchor.y0 + anchor.y1) / 2) <= anchor.y1 - anchor.y0
        and abs((run.x1 - run.x0) - (anchor.x1 - anchor.x0)) <= tolerance
    ]
    if len(agreeing) < cfg.min_columns:
        return None

    return BarRun(
        y0=min(r.y0 for r in agreeing),
        y1=max(r.y1 for r in agreeing),
        x0=min(r.x0 for r in agreeing),
        x1=max(r.x1 for r in agreeing),
    )


@detector(FeatureName.BAR)
def has_bar(ctx: DetectionContext) -> bool:
    """Thin horizontal stroke between the top and bottom edges."""
    if not ctx.usable:
        return False
    bar = find_bar(ctx)
    if bar is not None:
        ctx.log.debug("Bar found", y0=round(bar.y0, 1), y1=round(bar.y1, 1))
    return bar is not None


def find_cross_stroke(ctx: DetectionContext) -> float | None:
    """Y of a single wide span crossing one narrower stem above and below."""
    cfg = ctx.config.stem
    base = ctx.metrics.baseline
    top = ctx.bbox.max_y
    low = base + cfg.cross_zone_low_ratio * (top - base)
    high = base + cfg.cross_zone_high_ratio * (top - base)
    levels = band_levels(low, high, cfg.cross_bands)
    profile = [(y, ctx.spans(y)) for y in levels]

    for i, (y, spans) in enumerate(profile):
        if len(spans) != 1:
            continue
        wide = spans[0]
        width = span_width(wide)

        def crossed(band: list[tuple[float, float]]) -> bool:
            if len(band) != 1:
                return False
            x0, x1 = band[0]
            return (
                width >= cfg.cross_width_ratio * (x1 - x0)
                and wide[0] < x0
                and x1 < wide[1]
            )

        below = any(crossed(s) for _, s in profile[:i])
        above = any(crossed(s) for _, s in profile[i + 1 :])
        if below and above:
            return y
    return None


@detector(FeatureName.CROSS_STROKE)
def has_cross_stroke(ctx: DetectionContext) -> bool:
    """One band whose single span is much wider than the stem above and below."""
    if not ctx.usable:
        return False
    return find_cross_stroke(ctx) is not None


def find_serifs(ctx: DetectionContext) -> list[SerifSpan]:
    """Feet and heads of stems widened by at least width_ratio.

    Heads only count when the widening reaches out to the left of the stem,
    which keeps shoulder and arm junctions from reading as serifs.
    """
    cfg = ctx.config.serif
    bbox = ctx.bbox
    offset = cfg.foot_offset_ratio * bbox.height
    foot_y = max(ctx.metrics.baseline, bbox.min_y) + offset
    head_y = bbox.max_y - offset

    serifs = []
    for stem in find_stems(ctx):
        if stem.width <= 0:
            continue
        foot = span_containing(ctx.spans(foot_y), stem.center)
        if foot is not None and span_width(foot) >= cfg.width_ratio * stem.width:
            serifs.append(SerifSpan(stem, foot[0], foot[1], foot_y, at_head=False))

        head = span_containing(ctx.spans(head_y), stem.center)
        if (
            head is not None
            and span_width(head) >= cfg.width_ratio * stem.width
            and head[0] <= stem.x0 - (cfg.width_ratio - 1) * stem.width
        ):
            serifs.append(SerifSpan(stem, head[0], head[1], head_y, at_head=True))
    return serifs


@detector(FeatureName.SERIF)
def has_serif(ctx: DetectionContext) -> bool:
    """A stem foot or head widened relative to the stem."""
    if not ctx.usable:
        return False
    return bool(find_serifs(ctx))


@detector(FeatureName.FOOT)
def has_foot(ctx: DetectionContext) -> bool:
    """A stem whose lowest ink sits on the baseline."""
    if not ctx.usable:
        return False

    base = ctx.metrics.baseline
    tolerance = max(ctx.scale.eps, ctx.config.stem.foot_tolerance_ratio * ctx.bbox.height)
    for stem in find_stems(ctx):
        runs = ctx.runs(stem.center)
        if runs and abs(runs[0][0] - base) <= tolerance:
            return True
    return False


@detector(FeatureName.BRACKET)
def has_bracket(ctx: DetectionContext) -> bool:
    """A serif joined to its stem through curved segments."""
    if not ctx.usable:
        return False

    zone_height = ctx.config.serif.bracket_zone_ratio * ctx.bbox.height
    for serif in find_serifs(ctx):
        if serif.at_head:
            zone = BBox(serif.x0, serif.y - zone_height, serif.x1, serif.y)
        else:
            zone = BBox(serif.x0, serif.y, serif.x1, serif.y + zone_height)
        if has_curves(ctx, zone):
            return True
    return False
