"""Path segment types.

- SegmentKind: Line, quadratic or cubic Bezier
- Segment: One drawable piece of an outline with explicit start point
- SegmentMeta: Segment plus derived tangent/normal/direction data
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from glyphanatomy.domain.geometry import BBox, Point2D


class SegmentKind(str, Enum):
    """Kind of path segment."""

    LINE = "line"
    QUAD = "quad"
    CUBIC = "cubic"


@dataclass(frozen=True, slots=True)
class Segment:
    """A single outline segment.

    Attributes:
        kind: Segment kind
        points: Control points including both endpoints (2 for a line,
            3 for a quadratic, 4 for a cubic)
        contour: Index of the contour the segment belongs to
    """

    kind: SegmentKind
    points: tuple[Point2D, ...]
    contour: int = 0

    @property
    def start(self) -> Point2D:
        return self.points[0]

    @property
    def end(self) -> Point2D:
        return self.points[-1]

    @property
    def is_curve(self) -> bool:
        return self.kind != SegmentKind.LINE

    def control_bbox(self) -> BBox:
        """Bounding box of the control polygon (contains the curve)."""
        return BBox.from_points(self.points)

    def chord_length(self) -> float:
        """Straight-line distance between the endpoints."""
        return self.start.distance_to(self.end)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "kind": self.kind.value,
            "points": [p.to_dict() for p in self.points],
            "contour": self.contour,
        }


@dataclass(frozen=True, slots=True)
class SegmentMeta:
    """Per-segment derived data used by the winding oracle and tracers.

    Attributes:
        segment: The underlying segment
        tangent: Unit tangent at the segment start
        normal: Unit normal, (tangent.y, -tangent.x)
        direction: Signed horizontal direction, sign(tangent.x) or 1
    """

    segment: Segment
    tangent: Point2D
    normal: Point2D
    direction: int

    @property
    def kind(self) -> SegmentKind:
        return self.segment.kind

    @property
    def points(self) -> tuple[Point2D, ...]:
        return self.segment.points
