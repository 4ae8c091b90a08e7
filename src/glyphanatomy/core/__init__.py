"""Core detection algorithms for glyphanatomy.

This module contains:

- Shape adaptation (outline to segments, caches keyed by outline)
- Intersection (rays, arcs and polylines against the shape)
- The inside/outside oracle (winding number with jittered probes)
- Shared per-glyph analysis (scale primitives, contour classes)
- Feature detectors, the detection orchestrator and segment extraction

All functions are:
- Synchronous and single-threaded
- Read-only with respect to their input outlines

Key functions:
- detect: Run one feature detector on an outline
- extract: Outline segments making up a feature
- is_inside: Inside/outside test for a point
- safe_intersect: Intersection with a tessellated fallback
"""

from glyphanatomy.core.analysis import (
    ContourClass,
    ContourInfo,
    DetectionContext,
    GlyphGeometry,
    ScaleInfo,
    classify_contours,
    clear_geometry_cache,
    detect_serif_style,
    geometry_for,
    glyph_summary,
    stroke_thickness,
)
from glyphanatomy.core.detectors import DETECTORS
from glyphanatomy.core.extractor import EXTRACTORS, clip_segments, extract, feature_clip_boundary
from glyphanatomy.core.hints import LETTER_FEATURE_HINTS, features_for_character
from glyphanatomy.core.intersection import (
    ArcProbe,
    Hit,
    IntersectionResult,
    IntersectionStatus,
    LineProbe,
    PolylineProbe,
    batch_scanlines,
    horizontal_spans,
    intersect,
    precompute_scanlines,
    ray_hits,
    safe_intersect,
    vertical_runs,
)
from glyphanatomy.core.oracle import crossing_count, is_inside, winding_number
from glyphanatomy.core.orchestrator import (
    available_features,
    detect,
    detect_many,
    require_feature,
    resolve_feature,
)
from glyphanatomy.core.shape import (
    ShapeHandle,
    clear_caches,
    flatten_contours,
    overshoot_for,
    segments_for,
    shape_for,
    tessellate,
)

__all__ = [
    # Registries
    "DETECTORS",
    "EXTRACTORS",
    "LETTER_FEATURE_HINTS",
    # Analysis
    "ContourClass",
    "ContourInfo",
    "DetectionContext",
    "GlyphGeometry",
    "ScaleInfo",
    "classify_contours",
    "clear_geometry_cache",
    "detect_serif_style",
    "geometry_for",
    "glyph_summary",
    "stroke_thickness",
    # Detection and extraction
    "available_features",
    "clip_segments",
    "detect",
    "detect_many",
    "extract",
    "feature_clip_boundary",
    "features_for_character",
    "require_feature",
    "resolve_feature",
    # Intersection
    "ArcProbe",
    "Hit",
    "IntersectionResult",
    "IntersectionStatus",
    "LineProbe",
    "PolylineProbe",
    "batch_scanlines",
    "horizontal_spans",
    "intersect",
    "precompute_scanlines",
    "ray_hits",
    "safe_intersect",
    "vertical_runs",
    # Oracle
    "crossing_count",
    "is_inside",
    "winding_number",
    # Shape
    "ShapeHandle",
    "clear_caches",
    "flatten_contours",
    "overshoot_for",
    "segments_for",
    "shape_for",
    "tessellate",
]
