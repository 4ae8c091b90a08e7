"""Feature names and detection results.

This module defines what the detection core hands back to its callers:
- FeatureName: Closed enum of detectable anatomy features
- CircleShape, PolylineShape, PathShape: Shapes attached to a result
- FeatureResult: Found flag plus optional shape and anchor
- FeatureHighlight: Outline segments that make up a feature
- HorizontalClip, VerticalClip, DiagonalClip, PolygonClip: Cuts used when
  computing highlight regions
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from glyphanatomy.domain.geometry import Point2D
from glyphanatomy.domain.segment import Segment


class FeatureName(str, Enum):
    """Typographic anatomy features the core can detect."""

    ARC = "arc"
    APEX = "apex"
    APERTURE = "aperture"
    ARM = "arm"
    BAR = "bar"
    BEAK = "beak"
    BOWL = "bowl"
    BRACKET = "bracket"
    COUNTER = "counter"
    CROSS_STROKE = "cross_stroke"
    CROTCH = "crotch"
    EAR = "ear"
    EYE = "eye"
    FINIAL = "finial"
    FOOT = "foot"
    HOOK = "hook"
    LEG = "leg"
    LINK = "link"
    LOOP = "loop"
    NECK = "neck"
    SERIF = "serif"
    SHOULDER = "shoulder"
    SPINE = "spine"
    SPUR = "spur"
    STEM = "stem"
    TAIL = "tail"
    TERMINAL = "terminal"
    TITTLE = "tittle"
    VERTEX = "vertex"

    @property
    def display_name(self) -> str:
        """Human-readable name, e.g. "Cross stroke"."""
        return self.value.replace("_", " ").capitalize()


# Alternative names callers use for the same feature
FEATURE_ALIASES: dict[str, FeatureName] = {
    "crossbar": FeatureName.BAR,
    "crossstroke": FeatureName.CROSS_STROKE,
    "dot": FeatureName.TITTLE,
}


@dataclass(frozen=True, slots=True)
class CircleShape:
    """Circle in font units."""

    cx: float
    cy: float
    r: float

    @property
    def center(self) -> Point2D:
        return Point2D(self.cx, self.cy)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "circle", "cx": self.cx, "cy": self.cy, "r": self.r}


@dataclass(frozen=True, slots=True)
class PolylineShape:
    """Closed polyline approximating a region."""

    points: tuple[Point2D, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"type": "polyline", "points": [p.to_dict() for p in self.points]}


@dataclass(frozen=True, slots=True)
class PathShape:
    """Outline segments forming a path."""

    segments: tuple[Segment, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"type": "path", "segments": [s.to_dict() for s in self.segments]}


FeatureShape = CircleShape | PolylineShape | PathShape


@dataclass(frozen=True, slots=True)
class FeatureResult:
    """Outcome of a single feature detection.

    Attributes:
        found: Whether the feature was detected
        shape: Optional derived shape (circle, polyline or path)
        location: Optional anchor point
        label: Optional sub-classification, e.g. "ball" for a terminal
    """

    found: bool
    shape: FeatureShape | None = None
    location: Point2D | None = None
    label: str | None = None

    def __bool__(self) -> bool:
        return self.found

    @classmethod
    def not_found(cls) -> "FeatureResult":
        return cls(found=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "found": self.found,
            "shape": self.shape.to_dict() if self.shape is not None else None,
            "location": self.location.to_dict() if self.location is not None else None,
            "label": self.label,
        }


@dataclass(frozen=True, slots=True)
class FeatureHighlight:
    """Outline segments belonging to a feature.

    Attributes:
        segments: Segments in outline order
        closed: True when the segments form a closed contour
    """

    segments: tuple[Segment, ...] = field(default_factory=tuple)
    closed: bool = False

    def is_empty(self) -> bool:
        return not self.segments

    def to_dict(self) -> dict[str, Any]:
        return {
            "segments": [s.to_dict() for s in self.segments],
            "closed": self.closed,
        }


@dataclass(frozen=True, slots=True)
class HorizontalClip:
    """Half-plane above or below a horizontal line."""

    y: float
    keep_above: bool = True

    def keeps(self, point: Point2D) -> bool:
        return point.y >= self.y if self.keep_above else point.y <= self.y


@dataclass(frozen=True, slots=True)
class VerticalClip:
    """Half-plane right or left of a vertical line."""

    x: float
    keep_right: bool = True

    def keeps(self, point: Point2D) -> bool:
        return point.x >= self.x if self.keep_right else point.x <= self.x


@dataclass(frozen=True, slots=True)
class DiagonalClip:
    """Half-plane above or below the line y = slope * x + intercept."""

    slope: float
    intercept: float
    keep_above: bool = True

    def keeps(self, point: Point2D) -> bool:
        line_y = self.slope * point.x + self.intercept
        return point.y >= line_y if self.keep_above else point.y <= line_y


@dataclass(frozen=True, slots=True)
class PolygonClip:
    """Interior of a polygon."""

    points: tuple[Point2D, ...]

    def keeps(self, point: Point2D) -> bool:
        n = len(self.points)
        if n < 3:
            return False

        inside = False
        j = n - 1
        for i in range(n):
            xi, yi = self.points[i].x, self.points[i].y
            xj, yj = self.points[j].x, self.points[j].y
            if ((yi > point.y) != (yj > point.y)) and (
                point.x < (xj - xi) * (point.y - yi) / (yj - yi) + xi
            ):
                inside = not inside
            j = i
        return inside


ClipBoundary = HorizontalClip | VerticalClip | DiagonalClip | PolygonClip
