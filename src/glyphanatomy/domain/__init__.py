"""Domain models for glyphanatomy.

This module contains the values that flow through the detection core. All
models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Serializable to plain dictionaries for JSON output
- Independent of fonttools implementation details

Key classes:
- Point2D, BBox, Metrics: Geometric values in font units
- PathCommand, GlyphOutline, FontInfo: Detection input
- Segment, SegmentMeta: Outline segments and derived data
- FeatureName: Closed set of detectable features
- FeatureResult, FeatureHighlight: Detection and extraction output
- HorizontalClip, VerticalClip, DiagonalClip, PolygonClip: Clip boundaries
"""

from glyphanatomy.domain.feature import (
    FEATURE_ALIASES,
    CircleShape,
    ClipBoundary,
    DiagonalClip,
    FeatureHighlight,
    FeatureName,
    FeatureResult,
    FeatureShape,
    HorizontalClip,
    PathShape,
    PolygonClip,
    PolylineShape,
    VerticalClip,
)
from glyphanatomy.domain.geometry import BBox, Metrics, Point2D
from glyphanatomy.domain.outline import CommandType, FontInfo, GlyphOutline, PathCommand
from glyphanatomy.domain.segment import Segment, SegmentKind, SegmentMeta

__all__: list[str] = [
    # Enums
    "CommandType",
    "FeatureName",
    "SegmentKind",
    # Geometry
    "BBox",
    "Metrics",
    "Point2D",
    # Input
    "FontInfo",
    "GlyphOutline",
    "PathCommand",
    # Segments
    "Segment",
    "SegmentMeta",
    # Results
    "CircleShape",
    "FeatureHighlight",
    "FeatureResult",
    "FeatureShape",
    "PathShape",
    "PolylineShape",
    # Clipping
    "ClipBoundary",
    "DiagonalClip",
    "HorizontalClip",
    "PolygonClip",
    "VerticalClip",
    "FEATURE_ALIASES",
]
