"""Shared glyph analysis for detectors and extractors.

This module derives the per-glyph values every heuristic relies on:
- ScaleInfo: epsilons, stem width and overshoot for one glyph
- ContourInfo: Contour nesting and classification (base, mark, hole)
- GlyphGeometry: Lazily built, cached bundle of the above plus the shape
- DetectionContext: Everything a detector needs for one invocation

Contours are classified by containment depth, the same way nested
contours are ordered in a nesting tree: a contour enclosed by an odd
number of other contours is a hole.
"""

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from glyphanatomy.config import DetectionConfig, get_default_config
from glyphanatomy.core.geometry import point_in_polygon, signed_area
from glyphanatomy.core.intersection import (
    arc_hits,
    horizontal_spans,
    ray_hits,
    vertical_runs,
)
from glyphanatomy.core.oracle import is_inside
from glyphanatomy.core.shape import ShapeHandle, flatten_contours, overshoot_for, shape_for
from glyphanatomy.domain import BBox, FontInfo, GlyphOutline, Metrics, Point2D


_DEFAULT_FONT = FontInfo()


class ContourClass(str, Enum):
    """Role of a contour within its glyph."""

    BASE = "base"
    MARK = "mark"
    HOLE = "hole"


@dataclass(frozen=True, slots=True)
class ContourInfo:
    """Classification of one flattened contour.

    Attributes:
        index: Contour index (aligned with ShapeHandle.contours)
        kind: Base, mark or hole
        bbox: Bounding box of the flattened contour
        area: Signed area (sign gives winding direction)
        depth: Number of other contours enclosing this one
        parent: Index of the smallest enclosing contour, if any
        polygon: Flattened contour points
    """

    index: int
    kind: ContourClass
    bbox: BBox
    area: float
    depth: int
    parent: int | None
    polygon: tuple[Point2D, ...]

    @property
    def center(self) -> Point2D:
        return self.bbox.center


@dataclass(frozen=True, slots=True)
class ScaleInfo:
    """Scale primitives shared by every detector for one glyph.

    Attributes:
        upm: Font units per em
        transform_scale: Scale of the font transform (1.0 without one)
        eps: Glyph epsilon, max(upm * eps_upm_ratio, min(W, H) * eps_bbox_ratio)
        upm_eps: Font epsilon, upm * upm_eps_ratio * transform_scale
        stem_width: Typical stem thickness at mid x-height
        overshoot: Ray length guaranteed to exit the bbox
        width: Bbox width (W)
        height: Bbox height (H)
    """

    upm: int
    transform_scale: float
    eps: float
    upm_eps: float
    stem_width: float
    overshoot: float
    width: float
    height: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "upm": self.upm,
            "transform_scale": self.transform_scale,
            "eps": self.eps,
            "upm_eps": self.upm_eps,
            "stem_width": self.stem_width,
            "overshoot": self.overshoot,
            "width": self.width,
            "height": self.height,
        }


@dataclass(eq=False)
class GlyphGeometry:
    """Derived geometry of one outline under one set of metrics."""

    shape: ShapeHandle
    bbox: BBox
    overshoot: float
    scale: ScaleInfo
    contours: list[ContourInfo]

    def holes(self) -> list[ContourInfo]:
        return [c for c in self.contours if c.kind == ContourClass.HOLE]

    def marks(self) -> list[ContourInfo]:
        return [c for c in self.contours if c.kind == ContourClass.MARK]

    def base_contours(self) -> list[ContourInfo]:
        return [c for c in self.contours if c.kind == ContourClass.BASE]


_geometry_cache: "weakref.WeakKeyDictionary[GlyphOutline, dict[tuple, GlyphGeometry]]" = (
    weakref.WeakKeyDictionary()
)


def clear_geometry_cache() -> None:
    """Drop every cached GlyphGeometry."""
    _geometry_cache.clear()


def _percentile(values: list[float], fraction: float) -> float:
    ordered = sorted(values)
    index = int(round(fraction * (len(ordered) - 1)))
    return ordered[max(0, min(len(ordered) - 1, index))]


def estimate_stem_width(
    shape: ShapeHandle,
    metrics: Metrics,
    overshoot: float,
    config: DetectionConfig | None = None,
) -> float:
    """Typical stem thickness: a low percentile of span widths at mid x-height.

    Falls back to the bbox centre line when the glyph does not reach mid
    x-height, and to a fraction of the bbox width when no spans exist.
    """
    config = config or get_default_config()
    geometry = config.geometry
    if shape.is_empty:
        return 0.0

    bbox = shape.bbox
    y = metrics.baseline + (metrics.x_height - metrics.baseline) / 2
    if not bbox.min_y < y < bbox.max_y:
        y = bbox.center.y

    widths = [x1 - x0 for x0, x1 in horizontal_spans(shape, y, overshoot, config) if x1 > x0]
    if not widths:
        return bbox.width * geometry.stem_width_fallback_ratio
    return _percentile(widths, geometry.stem_width_percentile)


def classify_contours(
    outline: GlyphOutline,
    metrics: Metrics,
    config: DetectionConfig | None = None,
) -> list[ContourInfo]:
    """Classify each contour of an outline as base, mark or hole.

    - hole: enclosed by an odd number of other contours
    - mark: not a hole, small (shorter than mark_size_ratio of the glyph
      height and covering less than that fraction of the glyph bbox area)
      and either above mark_x_height_ratio of the x-height or entirely
      below the baseline
    - base: everything else

    Returns:
        ContourInfo per contour with at least three flattened points
    """
    config = config or get_default_config()
    tittle = config.tittle

    shape = shape_for(outline, config)
    if shape.is_empty:
        return []

    polygons = flatten_contours(outline, config=config)
    glyph_box = shape.bbox
    glyph_area = max(glyph_box.width * glyph_box.height, 1e-9)
    mark_floor = metrics.baseline + tittle.mark_x_height_ratio * (
        metrics.x_height - metrics.baseline
    )

    boxes = {i: BBox.from_points(p) for i, p in enumerate(polygons) if len(p) >= 3}
    infos: list[ContourInfo] = []
    for idx, box in boxes.items():
        polygon = polygons[idx]
        test_point = polygon[0]

        enclosing = [
            other
            for other in boxes
            if other != idx and point_in_polygon(test_point, polygons[other])
        ]
        depth = len(enclosing)
        parent = (
            min(enclosing, key=lambda i: boxes[i].width * boxes[i].height) if enclosing else None
        )

        if depth % 2 == 1:
            kind = ContourClass.HOLE
        elif (
            box.height < tittle.mark_size_ratio * glyph_box.height
            and box.width * box.height < tittle.mark_size_ratio * glyph_area
            and (box.min_y > mark_floor or box.max_y < metrics.baseline)
        ):
            kind = ContourClass.MARK
        else:
            kind = ContourClass.BASE

        infos.append(
            ContourInfo(
                index=idx,
                kind=kind,
                bbox=box,
                area=signed_area(polygon),
                depth=depth,
                parent=parent,
                polygon=tuple(polygon),
            )
        )
    return infos


def _build_geometry(
    outline: GlyphOutline, metrics: Metrics, font: FontInfo, config: DetectionConfig
) -> GlyphGeometry:
    shape = shape_for(outline, config)
    bbox = shape.bbox
    overshoot = overshoot_for(outline, config)
    geometry = config.geometry

    upm = font.units_per_em
    width, height = bbox.width, bbox.height
    scale = ScaleInfo(
        upm=upm,
        transform_scale=font.transform_scale,
        eps=max(upm * geometry.eps_upm_ratio, min(width, height) * geometry.eps_bbox_ratio),
        upm_eps=upm * geometry.upm_eps_ratio * font.transform_scale,
        stem_width=estimate_stem_width(shape, metrics, overshoot, config),
        overshoot=overshoot,
        width=width,
        height=height,
    )
    return GlyphGeometry(
        shape=shape,
        bbox=bbox,
        overshoot=overshoot,
        scale=scale,
        contours=classify_contours(outline, metrics, config),
    )


def geometry_for(
    outline: GlyphOutline,
    metrics: Metrics,
    font: FontInfo | None = None,
    config: DetectionConfig | None = None,
) -> GlyphGeometry:
    """Get cached GlyphGeometry for a usable outline."""
    font = font or _DEFAULT_FONT
    config = config or get_default_config()

    per_outline = _geometry_cache.get(outline)
    if per_outline is None:
        per_outline = {}
        _geometry_cache[outline] = per_outline

    key = (metrics, font, config)
    cached = per_outline.get(key)
    if cached is None:
        cached = _build_geometry(outline, metrics, font, config)
        per_outline[key] = cached
    return cached


@dataclass
class DetectionContext:
    """Inputs and shared derived data for one detection call.

    Attributes:
        outline: Glyph outline (read-only)
        metrics: Font metrics
        font: Font-level constants
        config: Detection tuning table
        log: structlog logger bound to the glyph (and feature, once bound)
    """

    outline: GlyphOutline
    metrics: Metrics
    font: FontInfo
    config: DetectionConfig
    log: Any
    _geometry: GlyphGeometry | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        outline: GlyphOutline,
        metrics: Metrics,
        font: FontInfo | None = None,
        config: DetectionConfig | None = None,
        logger: Any = None,
    ) -> "DetectionContext":
        """Build a context with defaults for the optional collaborators."""
        base_logger = logger if logger is not None else structlog.get_logger("glyphanatomy")
        return cls(
            outline=outline,
            metrics=metrics,
            font=font or _DEFAULT_FONT,
            config=config or get_default_config(),
            log=base_logger.bind(glyph=outline.name or "<anonymous>"),
        )

    def bind(self, **values: Any) -> "DetectionContext":
        """Copy of this context whose logger carries extra key/values."""
        return DetectionContext(
            outline=self.outline,
            metrics=self.metrics,
            font=self.font,
            config=self.config,
            log=self.log.bind(**values),
            _geometry=self._geometry,
        )

    @property
    def usable(self) -> bool:
        """True when the outline can be examined at all."""
        return self.outline.is_usable() and not shape_for(self.outline, self.config).is_empty

    @property
    def geometry(self) -> GlyphGeometry:
        if self._geometry is None:
            self._geometry = geometry_for(self.outline, self.metrics, self.font, self.config)
        return self._geometry

    @property
    def shape(self) -> ShapeHandle:
        return self.geometry.shape

    @property
    def bbox(self) -> BBox:
        return self.geometry.bbox

    @property
    def scale(self) -> ScaleInfo:
        return self.geometry.scale

    @property
    def overshoot(self) -> float:
        return self.geometry.overshoot

    @property
    def is_uppercase_height(self) -> bool:
        """True when the glyph clearly rises above the x-height."""
        margin = self.config.stem.uppercase_margin_ratio * self.bbox.height
        return self.bbox.max_y > self.metrics.x_height + margin

    @property
    def top_line(self) -> float:
        """Cap height for tall glyphs, x-height otherwise."""
        return self.metrics.cap_height if self.is_uppercase_height else self.metrics.x_height

    def spans(self, y: float) -> list[tuple[float, float]]:
        """Ink spans on the horizontal line at y."""
        return horizontal_spans(self.shape, y, self.overshoot, self.config)

    def runs(self, x: float) -> list[tuple[float, float]]:
        """Ink runs on the vertical line at x."""
        return vertical_runs(self.shape, x, self.overshoot, self.config)

    def ray(self, origin: Point2D, angle: float, length: float | None = None) -> list[Point2D]:
        """Ray hits from origin, at least overshoot long."""
        if length is None or length < self.overshoot:
            length = self.overshoot
        return ray_hits(self.shape, origin, angle, length, self.config)

    def arc(
        self, cx: float, cy: float, r: float, start_deg: float, sweep_deg: float
    ) -> list[Point2D]:
        """Arc probe hits."""
        return arc_hits(self.shape, cx, cy, r, start_deg, sweep_deg, self.config)

    def inside(self, point: Point2D) -> bool:
        """Inside/outside oracle for this outline."""
        return is_inside(self.outline, point, config=self.config)


def span_containing(spans: list[tuple[float, float]], x: float) -> tuple[float, float] | None:
    """The span that contains x, if any."""
    for x0, x1 in spans:
        if x0 <= x <= x1:
            return (x0, x1)
    return None


def stroke_thickness(ctx: DetectionContext, x: float, y: float) -> float:
    """Width of the horizontal ink span containing (x, y); 0 outside the ink."""
    if not ctx.usable:
        return 0.0
    span = span_containing(ctx.spans(y), x)
    return span[1] - span[0] if span else 0.0


def detect_serif_style(ctx: DetectionContext) -> bool | None:
    """Decide whether a glyph is serifed.

    Compares the width of the ink just above the baseline with the stem
    width at mid height, measured on the leftmost stem.

    Returns:
        True for serif, False for sans, None when undetermined
    """
    if not ctx.usable:
        return None

    serif = ctx.config.serif
    bbox = ctx.bbox
    base = ctx.metrics.baseline
    top = ctx.top_line

    mid_spans = ctx.spans(base + (top - base) / 2)
    if not mid_spans:
        return None
    stem = mid_spans[0]
    stem_width = stem[1] - stem[0]
    if stem_width <= 0:
        return None

    foot_y = max(base, bbox.min_y) + serif.foot_offset_ratio * bbox.height
    foot = span_containing(ctx.spans(foot_y), (stem[0] + stem[1]) / 2)
    if foot is None:
        return None

    ratio = (foot[1] - foot[0]) / stem_width
    ctx.log.debug("Serif style", ratio=round(ratio, 3))
    if ratio > serif.width_ratio:
        return True
    if ratio < serif.sans_ratio:
        return False
    return None


def glyph_summary(ctx: DetectionContext) -> dict[str, Any]:
    """Scale primitives, contour classes and serif style of a glyph."""
    if not ctx.usable:
        return {"usable": False}

    geometry = ctx.geometry
    counts = {kind.value: 0 for kind in ContourClass}
    for contour in geometry.contours:
        counts[contour.kind.value] += 1

    return {
        "usable": True,
        "bbox": geometry.bbox.to_dict(),
        "scale": geometry.scale.to_dict(),
        "contours": counts,
        "serif": detect_serif_style(ctx),
        "segments": len(geometry.shape.segments),
    }
